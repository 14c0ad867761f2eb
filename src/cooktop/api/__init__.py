"""FastAPI dashboard adapter for the cooktop core."""

from .app import create_app
from .websocket import WebSocketManager

__all__ = [
    "create_app",
    "WebSocketManager",
]
