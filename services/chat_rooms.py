"""
Chat room manager.

Every unordered user pair has at most one room. The pair is stored in
canonical order and guarded by a unique constraint, so (a, b) and (b, a)
always resolve to the same row.
"""
import uuid
import logging
from typing import Optional, List, Dict, Any
from models import db, User, ChatRoom, canonical_pair, utcnow
from services.identity import require_user
from services.storage import insert_or_fetch
from utils.errors import InvalidOperation, RoomNotFound, Forbidden, storage_guard

logger = logging.getLogger(__name__)


def _coerce_room_id(room_id) -> uuid.UUID:
    if isinstance(room_id, uuid.UUID):
        return room_id
    try:
        return uuid.UUID(str(room_id))
    except (TypeError, ValueError):
        raise RoomNotFound(f"Chat room {room_id} not found")


def _find_room(participant1_id: str, participant2_id: str) -> Optional[ChatRoom]:
    return ChatRoom.query.filter_by(
        participant1_id=participant1_id,
        participant2_id=participant2_id
    ).first()


def _upgrade_to_romantic(room: ChatRoom, started_by: str) -> ChatRoom:
    # Conditional update: only the first writer flips the flag and stamps it
    upgraded = ChatRoom.query.filter(
        ChatRoom.id == room.id,
        ChatRoom.is_romantic.is_(False)
    ).update({
        ChatRoom.is_romantic: True,
        ChatRoom.romantic_started_by: db.func.coalesce(ChatRoom.romantic_started_by, started_by),
        ChatRoom.romantic_started_at: db.func.coalesce(ChatRoom.romantic_started_at, utcnow()),
    }, synchronize_session='fetch')
    db.session.commit()
    db.session.refresh(room)

    if upgraded:
        logger.info(f"Chat room {room.id} upgraded to romantic mode by {started_by}")
    return room


@storage_guard
def get_or_create_room(user_a: str, user_b: str, romantic_hint: bool = False) -> ChatRoom:
    """
    Return the room for the pair, creating it if needed.

    With romantic_hint the room is created romantic, or an existing
    non-romantic room is upgraded. user_a is recorded as the one who
    started romantic mode. A romantic room is never downgraded.
    """
    if user_a == user_b:
        raise InvalidOperation("Cannot open a chat with yourself")
    require_user(user_a)
    require_user(user_b)

    participant1_id, participant2_id = canonical_pair(user_a, user_b)
    room = _find_room(participant1_id, participant2_id)

    if room is None:
        now = utcnow()
        new_room = ChatRoom(
            participant1_id=participant1_id,
            participant2_id=participant2_id,
            is_romantic=romantic_hint,
            romantic_started_by=user_a if romantic_hint else None,
            romantic_started_at=now if romantic_hint else None,
            twenty_day_message_sent=False,
        )
        room, created = insert_or_fetch(
            new_room,
            lambda: _find_room(participant1_id, participant2_id)
        )
        if created:
            logger.info(
                f"Chat room {room.id} created for {participant1_id} and {participant2_id}"
                f"{' in romantic mode' if romantic_hint else ''}"
            )
            return room

    if romantic_hint and not room.is_romantic:
        room = _upgrade_to_romantic(room, user_a)
    return room


@storage_guard
def get_room(room_id) -> ChatRoom:
    room = db.session.get(ChatRoom, _coerce_room_id(room_id))
    if room is None:
        raise RoomNotFound(f"Chat room {room_id} not found")
    return room


def require_participant(room: ChatRoom, user_id: str) -> ChatRoom:
    if not room.has_participant(user_id):
        raise Forbidden("You are not a participant in this chat")
    return room


def serialize_room(room: ChatRoom, other_user: Optional[User] = None) -> Dict[str, Any]:
    data = {
        'id': str(room.id),
        'participant1_id': room.participant1_id,
        'participant2_id': room.participant2_id,
        'is_romantic': room.is_romantic,
        'romantic_started_by': room.romantic_started_by,
        'romantic_started_at': room.romantic_started_at.isoformat() if room.romantic_started_at else None,
        'twenty_day_message_sent': room.twenty_day_message_sent,
        'last_message': room.last_message,
        'last_message_time': room.last_message_time.isoformat() if room.last_message_time else None,
        'created_at': room.created_at.isoformat() if room.created_at else None,
    }
    if other_user is not None:
        data['other_user'] = {
            'id': other_user.id,
            'name': other_user.name,
            'avatar_url': other_user.avatar_url,
            'is_online': other_user.is_online,
        }
    return data


@storage_guard
def list_rooms_for_user(user_id: str) -> List[Dict[str, Any]]:
    """Rooms the user takes part in, most recent activity first"""
    require_user(user_id)

    rooms = ChatRoom.query.filter(
        db.or_(
            ChatRoom.participant1_id == user_id,
            ChatRoom.participant2_id == user_id
        )
    ).all()

    other_ids = [room.other_participant(user_id) for room in rooms]
    users = {u.id: u for u in User.query.filter(User.id.in_(other_ids)).all()} if other_ids else {}

    rooms_data = [serialize_room(room, users.get(room.other_participant(user_id))) for room in rooms]
    rooms_data.sort(
        key=lambda r: r['last_message_time'] or r['created_at'] or '',
        reverse=True
    )
    return rooms_data
