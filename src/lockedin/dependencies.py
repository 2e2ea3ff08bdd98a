"""Shared FastAPI dependencies."""

from fastapi.requests import HTTPConnection

from lockedin.ws.manager import GroupBroadcaster


def get_broadcaster(conn: HTTPConnection) -> GroupBroadcaster:
    """The application's fan-out registry, created in ``create_app``. Works for HTTP and WebSocket routes."""
    return conn.app.state.broadcaster
