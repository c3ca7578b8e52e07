"""
Message log: ordered, append-only history per chat room.

Messages are ordered by (created_at, id); the integer id is the insertion
sequence, so two messages with the same timestamp keep their append order.
Listing a room first gives the milestone notifier a chance to run.
"""
import logging
from typing import Optional, List, Dict, Any
from models import db, ChatRoom, ChatMessage, MESSAGE_TYPE_TEXT, MESSAGE_TYPE_SYSTEM, utcnow
from services import notifier
from services.chat_rooms import get_room, require_participant
from services.relationships import is_following
from utils.errors import NotFound, InvalidOperation, Forbidden, storage_guard
from utils.realtime import publish_message
from utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


def serialize_message(message: ChatMessage) -> Dict[str, Any]:
    return {
        'id': message.id,
        'chat_room_id': str(message.chat_room_id),
        'sender_id': message.sender_id,
        'content': message.content,
        'message_type': message.message_type,
        'created_at': message.created_at.isoformat() if message.created_at else None,
    }


def _insert(room: ChatRoom, sender_id: Optional[str], content: str, message_type: str) -> ChatMessage:
    message = ChatMessage(
        chat_room_id=room.id,
        sender_id=sender_id,
        content=content,
        message_type=message_type,
        created_at=utcnow(),
    )
    db.session.add(message)

    room.last_message = content
    room.last_message_time = message.created_at
    db.session.commit()

    publish_message(room.id, serialize_message(message))
    return message


def ensure_can_message(sender_id: str, room: ChatRoom):
    """
    Senders may only write to people they follow, unless the room is
    romantic (the pair matched).
    """
    require_participant(room, sender_id)
    if room.is_romantic:
        return
    if not is_following(sender_id, room.other_participant(sender_id)):
        raise Forbidden("You can only send messages to people you follow")


@storage_guard
def append(room_id, sender_id: str, content: str) -> ChatMessage:
    room = get_room(room_id)
    require_participant(room, sender_id)

    content = sanitize_text(content, field="content")
    if not content:
        raise InvalidOperation("Message content cannot be empty")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise InvalidOperation(f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters")

    message = _insert(room, sender_id, content, MESSAGE_TYPE_TEXT)
    logger.info(f"Message {message.id} sent by {sender_id} in room {room.id}")
    return message


@storage_guard
def append_system(room_id, content: str) -> ChatMessage:
    """Append a message with no sender. Reserved for the milestone notifier."""
    room = get_room(room_id)
    message = _insert(room, None, content, MESSAGE_TYPE_SYSTEM)
    logger.info(f"System message {message.id} appended to room {room.id}")
    return message


@storage_guard
def list_messages(room_id, after_id: Optional[int] = None) -> List[ChatMessage]:
    """
    All messages for the room in order.

    after_id restricts the result to messages appended after that message,
    for clients polling for new messages.
    """
    room = get_room(room_id)
    notifier.check_twenty_day_milestone(room.id)

    query = ChatMessage.query.filter(ChatMessage.chat_room_id == room.id)
    if after_id is not None:
        query = query.filter(ChatMessage.id > after_id)

    return query.order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc()).all()


@storage_guard
def delete_message(message_id: int, user_id: str) -> ChatMessage:
    """Sender-initiated delete. System messages belong to nobody and stay."""
    message = db.session.get(ChatMessage, message_id)
    if message is None:
        raise NotFound(f"Message {message_id} not found")
    if message.sender_id is None or message.sender_id != user_id:
        raise Forbidden("You can only delete your own messages")

    room = db.session.get(ChatRoom, message.chat_room_id)
    db.session.delete(message)
    db.session.flush()

    # Keep the room preview pointing at the newest remaining message
    latest = ChatMessage.query.filter(ChatMessage.chat_room_id == room.id)\
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())\
        .first()
    room.last_message = latest.content if latest else None
    room.last_message_time = latest.created_at if latest else None
    db.session.commit()

    logger.info(f"Message {message_id} deleted by {user_id}")
    return message
