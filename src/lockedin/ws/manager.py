"""WebSocket fan-out registry.

Tracks live WebSocket connections and the groups each one has joined,
and pushes events to every connection in a group. State lives in process
memory only: it is lost on restart and not shared between instances.

Delivery is best-effort and at-most-once. A connection that is not
subscribed when an event is published never sees it; a connection whose
send fails is dropped.
"""

import asyncio
import json
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

import structlog
from fastapi import WebSocket

logger = structlog.get_logger()


@dataclass
class ClientConnection:
    """Represents a single WebSocket client."""

    websocket: WebSocket
    groups: set[str] = field(default_factory=set)
    connected_at: float = field(default_factory=time.time)
    messages_sent: int = 0


class GroupBroadcaster:
    """Registry of live connections per group.

    Mutations are serialized with an asyncio lock; sends happen outside
    the lock so one slow client cannot block subscriptions.
    """

    def __init__(self) -> None:
        self._connections: dict[str, ClientConnection] = {}  # conn_id -> client
        self._groups: dict[str, set[str]] = defaultdict(set)  # group_id -> {conn_ids}
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket, conn_id: str) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._connections[conn_id] = ClientConnection(websocket=websocket)
        logger.info("ws_connected", conn_id=conn_id)

    async def disconnect(self, conn_id: str) -> None:
        """Remove a WebSocket connection and its subscriptions."""
        async with self._lock:
            client = self._remove(conn_id)
        if client is not None:
            logger.info("ws_disconnected", conn_id=conn_id, groups=len(client.groups))

    async def subscribe(self, conn_id: str, group_id: str) -> bool:
        """Join a connection to a group's channel. Returns False if the connection is unknown.

        Membership of the group is not checked.
        """
        if not group_id:
            return False
        async with self._lock:
            client = self._connections.get(conn_id)
            if client is None:
                return False
            client.groups.add(group_id)
            self._groups[group_id].add(conn_id)
        logger.debug("ws_subscribed", conn_id=conn_id, group_id=group_id)
        return True

    async def unsubscribe(self, conn_id: str, group_id: str) -> bool:
        """Remove a connection from a group's channel."""
        async with self._lock:
            client = self._connections.get(conn_id)
            if client is None:
                return False
            client.groups.discard(group_id)
            self._discard_from_group(group_id, conn_id)
        return True

    async def publish(self, group_id: str, event: str, data: dict[str, Any]) -> int:
        """Send ``{"event": event, "data": data}`` to every connection in the group.

        Returns the number of connections that received the message.
        """
        async with self._lock:
            targets = [
                (conn_id, self._connections[conn_id])
                for conn_id in self._groups.get(group_id, set())
                if conn_id in self._connections
            ]
        if not targets:
            return 0

        payload = json.dumps({"event": event, "data": data})
        sent = 0
        failed: list[str] = []

        for conn_id, client in targets:
            try:
                await client.websocket.send_text(payload)
                client.messages_sent += 1
                sent += 1
            except Exception:
                failed.append(conn_id)

        if failed:
            async with self._lock:
                for conn_id in failed:
                    self._remove(conn_id)
            logger.info("ws_dropped_dead_connections", group_id=group_id, count=len(failed))

        return sent

    def get_stats(self) -> dict[str, Any]:
        """Get connection statistics."""
        return {
            "total_connections": len(self._connections),
            "groups": {gid: len(conns) for gid, conns in self._groups.items() if conns},
        }

    def _remove(self, conn_id: str) -> ClientConnection | None:
        client = self._connections.pop(conn_id, None)
        if client is None:
            return None
        for group_id in client.groups:
            self._discard_from_group(group_id, conn_id)
        return client

    def _discard_from_group(self, group_id: str, conn_id: str) -> None:
        conns = self._groups.get(group_id)
        if conns is None:
            return
        conns.discard(conn_id)
        if not conns:
            del self._groups[group_id]
