"""
Chat Relay Service - supplier <-> inventory chat rooms.

Live messages are broadcast to the other sockets in the room before they are
written to the database, so a failed write never blocks delivery. Clients
joining later only see what was persisted.
"""
import logging
from typing import Callable, Dict, List, Optional, Set

from fastapi import WebSocket
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import StoreError, ValidationError
from app.models.chat_message import ChatMessage
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open websockets per room"""

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = {}

    async def join(self, room_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self.rooms.setdefault(room_id, set()).add(websocket)
        logger.info(f"Socket joined room {room_id} ({len(self.rooms[room_id])} connected)")

    def leave(self, room_id: str, websocket: WebSocket) -> None:
        members = self.rooms.get(room_id)
        if not members:
            return
        members.discard(websocket)
        if not members:
            del self.rooms[room_id]
        logger.info(f"Socket left room {room_id}")

    async def broadcast(self, room_id: str, payload: dict, exclude: Optional[WebSocket] = None) -> int:
        """
        Send payload to every socket in the room except `exclude`.

        Returns:
            Number of sockets the payload was sent to
        """
        sent = 0
        for websocket in list(self.rooms.get(room_id, ())):
            if websocket is exclude:
                continue
            try:
                await websocket.send_json(payload)
                sent += 1
            except Exception as e:
                logger.warning(f"Dropping socket in room {room_id}: {str(e)}")
                self.leave(room_id, websocket)
        return sent


class ChatRelayService:
    """Stores chat history and relays live messages"""

    def __init__(self, manager: Optional[ConnectionManager] = None):
        self.manager = manager or ConnectionManager()

    def get_history(self, room_id: str, db: Session) -> List[ChatMessage]:
        return (
            db.query(ChatMessage)
            .filter(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
            .all()
        )

    def save_message(self, room_id: Optional[str], sender: Optional[str], message: Optional[str], db: Session) -> ChatMessage:
        if not room_id or not sender or not message:
            raise ValidationError("Missing required fields")

        chat_message = ChatMessage(room_id=room_id, sender=sender, message=message)
        db.add(chat_message)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save chat message in room {room_id}: {str(e)}")
            raise StoreError(str(e))
        db.refresh(chat_message)
        return chat_message

    async def send(self, room_id: Optional[str], sender: Optional[str], message: Optional[str], db: Session) -> ChatMessage:
        """Persist a message posted over HTTP, then push it to live sockets"""
        chat_message = self.save_message(room_id, sender, message, db)
        await self.manager.broadcast(room_id, {
            "message": chat_message.message,
            "sender": chat_message.sender,
            "timestamp": chat_message.timestamp.isoformat(),
        })
        return chat_message

    async def relay(
        self,
        room_id: str,
        data: dict,
        websocket: WebSocket,
        session_factory: Callable[[], Session]
    ) -> bool:
        """
        Forward a socket message to the rest of the room, then store it.

        Returns:
            True if the message was persisted
        """
        if not isinstance(data, dict):
            data = {}
        sender = data.get("sender")
        message = data.get("message")
        if not sender or not message:
            await websocket.send_json({"error": "sender and message are required"})
            return False

        await self.manager.broadcast(
            room_id,
            {"message": message, "sender": sender, "timestamp": utcnow().isoformat()},
            exclude=websocket,
        )

        db = session_factory()
        try:
            self.save_message(room_id, sender, message, db)
            return True
        except StoreError:
            # Already delivered to connected peers; only history misses it
            return False
        finally:
            db.close()


# Singleton instance
chat_relay_service = ChatRelayService()
