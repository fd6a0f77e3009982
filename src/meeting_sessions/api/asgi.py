"""ASGI entrypoint for the meeting sessions API."""

from meeting_sessions.api.app import create_app
from meeting_sessions.containers import build_container

app = create_app(build_container())
