"""Errors raised by the session core."""


class SessionNotFoundError(LookupError):
    """Raised when a session id is unknown or already removed."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class GatewayError(RuntimeError):
    """Raised when a call to the remote meeting provider fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        status_code: int | None = None,
        code: str | None = None,
        is_authorization_failure: bool = False,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.code = code
        self.is_authorization_failure = is_authorization_failure
