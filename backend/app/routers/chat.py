from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from typing import List, Optional
import json
import logging

from app.database import SessionLocal, get_db
from app.errors import AppError
from app.schemas.chat import ChatMessageCreate, ChatMessageResponse
from app.schemas.statuses import Role
from app.security import Identity, authorize, require_role
from app.services.chat_relay_service import chat_relay_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

CHAT_ROLES = (Role.SUPPLIER.value, Role.INVENTORY.value)


def get_session_factory():
    """Sessions for websocket handlers, which outlive a single request"""
    return SessionLocal


@router.get("/api/inventory/chat/{room_id}/messages", response_model=List[ChatMessageResponse])
def get_room_history(
    room_id: str,
    identity: Identity = Depends(require_role(*CHAT_ROLES)),
    db: Session = Depends(get_db)
):
    return chat_relay_service.get_history(room_id, db)


@router.post("/api/inventory/chat/send", response_model=ChatMessageResponse, status_code=201)
async def send_message(
    payload: ChatMessageCreate,
    identity: Identity = Depends(require_role(*CHAT_ROLES)),
    db: Session = Depends(get_db)
):
    return await chat_relay_service.send(payload.room_id, payload.sender, payload.message, db)


@router.websocket("/ws/chat/{room_id}")
async def chat_socket(
    websocket: WebSocket,
    room_id: str,
    token: Optional[str] = Query(None),
    session_factory=Depends(get_session_factory)
):
    try:
        authorize(token, CHAT_ROLES)
    except AppError as e:
        logger.warning(f"Chat socket refused for room {room_id}: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    manager = chat_relay_service.manager
    await manager.join(room_id, websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                logger.warning(f"Ignoring malformed frame in room {room_id}")
                await websocket.send_json({"error": "invalid JSON"})
                continue
            await chat_relay_service.relay(room_id, data, websocket, session_factory)
    except WebSocketDisconnect:
        pass
    finally:
        manager.leave(room_id, websocket)
