"""WebSocket endpoint: clients join group channels and receive violation events."""

import json
import uuid

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from lockedin.dependencies import get_broadcaster
from lockedin.ws.manager import GroupBroadcaster

logger = structlog.get_logger()

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    broadcaster: GroupBroadcaster = Depends(get_broadcaster),  # noqa: B008
) -> None:
    """Single WebSocket endpoint multiplexing group channels.

    Protocol:
        Client -> Server:
            {"action": "join-group", "group_id": "..."}
            {"action": "leave-group", "group_id": "..."}
            {"action": "ping"}

        Server -> Client:
            {"event": "violation", "data": {"username", "domain", "groupName", "groupId"}}
            {"type": "joined", "group_id": "..."}
            {"type": "left", "group_id": "..."}
            {"type": "pong"}
            {"type": "error", "message": "..."}
    """
    conn_id = str(uuid.uuid4())
    await broadcaster.connect(websocket, conn_id)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(msg, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue

            action = msg.get("action")
            group_id = str(msg.get("group_id") or msg.get("groupId") or "")

            if action == "join-group":
                if await broadcaster.subscribe(conn_id, group_id):
                    await websocket.send_json({"type": "joined", "group_id": group_id})
                else:
                    await websocket.send_json({"type": "error", "message": "group_id is required"})

            elif action == "leave-group":
                await broadcaster.unsubscribe(conn_id, group_id)
                await websocket.send_json({"type": "left", "group_id": group_id})

            elif action == "ping":
                await websocket.send_json({"type": "pong"})

            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown action: {action}",
                })

    except WebSocketDisconnect:
        await broadcaster.disconnect(conn_id)
    except Exception:
        logger.exception("ws_error", conn_id=conn_id)
        await broadcaster.disconnect(conn_id)
