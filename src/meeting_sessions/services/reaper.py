"""Background removal of expired sessions."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from meeting_sessions.domain.errors import SessionNotFoundError
from meeting_sessions.services.registry import SessionRegistry, utc_now

_logger = logging.getLogger(__name__)


@dataclass
class ExpiryReaper:
    """Periodically removes sessions older than the configured TTL."""

    registry: SessionRegistry
    ttl: timedelta = timedelta(hours=1)
    interval_seconds: float = 15 * 60
    clock: Callable[[], datetime] = utc_now
    _loop_task: asyncio.Task[None] | None = field(default=None, init=False)
    _cycle_task: asyncio.Task[list[str]] | None = field(default=None, init=False)

    async def run_cycle(self) -> list[str]:
        """Remove every expired session and return the removed ids."""
        now = self.clock()
        expired = [
            summary.id
            for summary in self.registry.list_sessions()
            if now - summary.created_at > self.ttl
        ]
        reaped: list[str] = []
        for session_id in expired:
            try:
                await self.registry.remove(session_id)
            except SessionNotFoundError:
                _logger.debug("Expired session %s already removed", session_id)
                continue
            except Exception:
                _logger.exception("Failed to reap session %s", session_id)
                continue
            reaped.append(session_id)
        if reaped:
            _logger.info("Reaped %s expired session(s): %s", len(reaped), reaped)
        return reaped

    def tick(self) -> asyncio.Task[list[str]] | None:
        """Start a cycle unless the previous one is still running."""
        if self._cycle_task is not None and not self._cycle_task.done():
            _logger.warning("Previous reaper cycle still running, skipping tick")
            return None
        self._cycle_task = asyncio.create_task(self.run_cycle())
        return self._cycle_task

    def start(self) -> None:
        """Schedule the periodic loop on the running event loop."""
        if self._loop_task is not None and not self._loop_task.done():
            return
        self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the periodic loop and any in-flight cycle."""
        for task in (self._loop_task, self._cycle_task):
            if task is None or task.done():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._loop_task = None
        self._cycle_task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.tick()
