"""
WebSocket endpoint for realtime notifications.

Clients connect to ``/ws/notifications?token=<access token>``; the socket is
registered with the hub until the client disconnects.
"""
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from workforce.api.deps import user_from_token
from workforce.core.database import AsyncSessionLocal
from workforce.services.realtime import hub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: str = ""):
    async with AsyncSessionLocal() as db:
        user = await user_from_token(token, db)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    hub.registry.register(user.id, websocket)
    logger.info("Realtime connection opened for user %s", user.id)
    try:
        while True:
            # Incoming frames are only keep-alives
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        hub.registry.unregister(user.id, websocket)
        logger.info("Realtime connection closed for user %s", user.id)
