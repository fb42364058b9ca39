"""Real-time change feed over WebSockets.

Each business has one channel. Route handlers publish a change event after
their commit (via BackgroundTasks) so that connected views refetch their
projections. Delivery is best-effort: a failed send drops that socket.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import WebSocket, status

logger = logging.getLogger(__name__)


def business_channel(business_id: int) -> str:
    return f"business:{business_id}"


class ConnectionManager:
    """Manages WebSocket connections grouped by channel."""

    MAX_CONNECTIONS_PER_CHANNEL = 200

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}
        self.connection_metadata: Dict[int, Dict[str, Any]] = {}

    async def connect(
        self,
        websocket: WebSocket,
        channel: str,
        user_id: Optional[int] = None,
    ) -> bool:
        """Accept a WebSocket into a channel.

        Returns True if connection was successful, False if rejected.
        """
        if len(self.active_connections.get(channel, [])) >= self.MAX_CONNECTIONS_PER_CHANNEL:
            logger.warning(f"WebSocket connection rejected: channel '{channel}' at capacity")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return False

        await websocket.accept()
        self.active_connections.setdefault(channel, []).append(websocket)
        self.connection_metadata[id(websocket)] = {
            "connected_at": datetime.now(timezone.utc),
            "user_id": user_id,
            "channel": channel,
            "last_ping": datetime.now(timezone.utc),
        }
        logger.debug(f"WebSocket connected to channel '{channel}', user_id={user_id}")
        return True

    def disconnect(self, websocket: WebSocket, channel: str):
        """Disconnect a WebSocket from a channel."""
        connections = self.active_connections.get(channel)
        if connections and websocket in connections:
            connections.remove(websocket)
            if not connections:
                del self.active_connections[channel]
        self.connection_metadata.pop(id(websocket), None)
        logger.debug(f"WebSocket disconnected from channel '{channel}'")

    def update_ping(self, websocket: WebSocket):
        """Update last ping time for a connection."""
        metadata = self.connection_metadata.get(id(websocket))
        if metadata:
            metadata["last_ping"] = datetime.now(timezone.utc)

    async def broadcast(self, message: Dict[str, Any], channel: str):
        """Broadcast a message to all connections in a channel."""
        disconnected = []
        for connection in list(self.active_connections.get(channel, [])):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.debug(f"WebSocket send failed: {e}")
                disconnected.append(connection)

        for conn in disconnected:
            self.disconnect(conn, channel)

    def get_connection_count(self, channel: Optional[str] = None) -> int:
        """Get the number of active connections."""
        if channel:
            return len(self.active_connections.get(channel, []))
        return sum(len(conns) for conns in self.active_connections.values())


ws_manager = ConnectionManager()


async def publish_change(business_id: int, collection: str, action: str, entity_id: Any):
    """Notify subscribers of a business that a record changed."""
    await ws_manager.broadcast(
        {
            "event": "change",
            "collection": collection,
            "action": action,
            "id": entity_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        channel=business_channel(business_id),
    )
