"""WebSocket endpoint — live event delivery to browser clients.

Each client connects to /ws?userId=<id>. The handler:
1. Registers the connection under that user id (if given)
2. Keeps reading from the socket (answers {"type": "ping"} with pong)
3. Unregisters on disconnect

The user id is trusted as-is: the HTTP API authenticates the calls
that trigger notifications, this channel only carries them out.
"""

import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from hireboard.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/ws")
async def user_websocket(websocket: WebSocket):
    """Long-lived connection, one per browser tab."""
    registry: ConnectionRegistry = websocket.app.state.registry
    user_id = websocket.query_params.get("userId")

    await websocket.accept()

    registry.attach(websocket)
    if user_id:
        registry.register(user_id, websocket)
        logger.info("ws.connected", user_id=user_id)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue
            if isinstance(msg, dict) and msg.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
    except WebSocketDisconnect:
        pass
    finally:
        registry.detach(websocket)
        if user_id:
            registry.unregister(user_id, websocket)
            logger.info("ws.disconnected", user_id=user_id)
