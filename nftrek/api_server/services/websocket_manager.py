"""
WebSocket status manager for real-time mint progress streaming.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List

from fastapi import WebSocket

from nftrek.core.models import StatusUpdate

logger = logging.getLogger(__name__)


class StatusWebSocketManager:
    """Manages WebSocket connections per session and streams status updates to them."""

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = defaultdict(list)

    async def connect(self, session_id: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections[session_id].append(websocket)

    def disconnect(self, session_id: str, websocket: WebSocket):
        connections = self.active_connections.get(session_id, [])
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            self.active_connections.pop(session_id, None)

    def connection_count(self) -> int:
        return sum(len(connections) for connections in self.active_connections.values())

    async def broadcast(self, session_id: str, message: Dict[str, Any]):
        """Send a message to every client watching the session."""
        for connection in list(self.active_connections.get(session_id, [])):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.debug(f"StatusWebSocketManager: dropping client of {session_id}: {e}")
                self.disconnect(session_id, connection)

    def listener_for(self, session_id: str):
        """Orchestrator status listener that forwards updates to the session's clients."""
        async def listener(update: StatusUpdate):
            await self.broadcast(session_id, update.to_dict())

        return listener
