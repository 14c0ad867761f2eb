"""WebSocket manager for real-time dashboard updates."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any

from fastapi import WebSocket

from ..core.session import SessionSnapshot
from .schemas import WebSocketMessage

logger = logging.getLogger(__name__)


class WebSocketManager:
    """Manages WebSocket connections and broadcasts.

    Pushes snapshots, state changes and hazard warnings to every connected
    dashboard.
    """

    def __init__(self) -> None:
        self._connections: list[WebSocket] = []
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        """Number of active WebSocket connections."""
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._connections.append(websocket)
        logger.info(
            "WebSocket connected. Total connections: %d",
            len(self._connections),
        )

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection."""
        async with self._lock:
            if websocket in self._connections:
                self._connections.remove(websocket)
        logger.info(
            "WebSocket disconnected. Total connections: %d",
            len(self._connections),
        )

    async def broadcast(self, message_type: str, data: dict[str, Any]) -> None:
        """Broadcast message to all connected clients.

        Automatically removes clients that fail to receive the message.

        Args:
            message_type: Type of message (e.g., "snapshot").
            data: Message data dictionary.
        """
        if not self._connections:
            return

        message = WebSocketMessage(
            type=message_type,
            data=data,
            timestamp=datetime.now(),
        )
        message_dict = asdict(message)
        message_dict["timestamp"] = message_dict["timestamp"].isoformat()
        json_message = json.dumps(message_dict)

        async with self._lock:
            disconnected: list[WebSocket] = []
            for connection in self._connections:
                try:
                    await connection.send_text(json_message)
                except Exception as e:
                    logger.warning("Failed to send to WebSocket: %s", e)
                    disconnected.append(connection)

            for conn in disconnected:
                self._connections.remove(conn)

    async def broadcast_snapshot(self, snapshot: SessionSnapshot) -> None:
        """Broadcast the per-tick snapshot (history omitted)."""
        await self.broadcast("snapshot", snapshot.to_dict())

    async def broadcast_state_update(
        self,
        state: str,
        previous_state: str | None,
    ) -> None:
        """Broadcast a state change to all clients."""
        await self.broadcast("state_update", {
            "state": state,
            "previous_state": previous_state,
        })

    async def broadcast_warning(
        self,
        warning: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Broadcast a hazard warning for the dashboard to surface.

        Args:
            warning: Warning kind, e.g. "BOILOVER_PREDICTED".
            data: Optional signal values at detection time.
        """
        payload: dict[str, Any] = {"warning": warning}
        if data:
            payload.update(data)
        await self.broadcast("warning", payload)
