"""
Romantic milestone notifier.

Once a room has been romantic for ROMANTIC_MILESTONE_DAYS, a single system
message names the user who started romantic mode. The check runs lazily
whenever a room's messages are listed, and ``sweep_twenty_day_milestones``
covers rooms nobody has opened (run it from cron via ``flask
notify-milestones``).
"""
import os
import logging
from datetime import datetime, timedelta
from typing import Optional
from models import db, User, ChatRoom, ChatMessage, utcnow
from services import messages as message_log

logger = logging.getLogger(__name__)

ROMANTIC_MILESTONE_DAYS = int(os.getenv('ROMANTIC_MILESTONE_DAYS', 20))


def milestone_text(starter_name: str) -> str:
    return f"{starter_name} has been in romantic mode with you for {ROMANTIC_MILESTONE_DAYS} days 💕"


def check_twenty_day_milestone(room_id, now: Optional[datetime] = None) -> Optional[ChatMessage]:
    """
    Append the milestone message if it is due. Returns the message, or None
    when nothing was sent. Calling it again after it fired is a no-op.
    """
    now = now or utcnow()

    room = ChatRoom.query.filter(
        ChatRoom.id == room_id,
        ChatRoom.is_romantic.is_(True),
        ChatRoom.twenty_day_message_sent.is_(False)
    ).first()

    if room is None or room.romantic_started_at is None:
        return None
    if room.romantic_started_at > now - timedelta(days=ROMANTIC_MILESTONE_DAYS):
        return None

    # Claim the flag first; a concurrent reader that loses sends nothing
    claimed = ChatRoom.query.filter(
        ChatRoom.id == room.id,
        ChatRoom.twenty_day_message_sent.is_(False)
    ).update({ChatRoom.twenty_day_message_sent: True})
    if not claimed:
        db.session.rollback()
        return None

    starter = db.session.get(User, room.romantic_started_by) if room.romantic_started_by else None
    starter_name = starter.name if starter else "Your match"

    # Commits the flag together with the message
    message = message_log.append_system(room.id, milestone_text(starter_name))
    logger.info(f"Sent {ROMANTIC_MILESTONE_DAYS}-day milestone message in room {room.id}")
    return message


def sweep_twenty_day_milestones(now: Optional[datetime] = None) -> int:
    """Fire every due milestone. Returns how many messages were sent."""
    now = now or utcnow()
    cutoff = now - timedelta(days=ROMANTIC_MILESTONE_DAYS)

    due_room_ids = [
        room_id for (room_id,) in db.session.query(ChatRoom.id).filter(
            ChatRoom.is_romantic.is_(True),
            ChatRoom.twenty_day_message_sent.is_(False),
            ChatRoom.romantic_started_at <= cutoff
        ).all()
    ]

    sent = 0
    for room_id in due_room_ids:
        if check_twenty_day_milestone(room_id, now=now) is not None:
            sent += 1

    logger.info(f"Milestone sweep sent {sent} of {len(due_room_ids)} due messages")
    return sent
