import uuid
from sqlalchemy import Uuid
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class ChatRoom(db.Model, SerializerMixin):
    __tablename__ = "chat_rooms"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    participant1_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    participant2_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    # Romantic mode only ever moves false -> true
    is_romantic = db.Column(db.Boolean, nullable=False, default=False)
    romantic_started_by = db.Column(db.String, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    romantic_started_at = db.Column(db.DateTime, nullable=True)
    twenty_day_message_sent = db.Column(db.Boolean, nullable=False, default=False)

    # Preview cache for room lists
    last_message = db.Column(db.Text, nullable=True)
    last_message_time = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('participant1_id', 'participant2_id', name='uq_chat_room_pair'),
        db.CheckConstraint('participant1_id != participant2_id', name='check_no_self_chat'),
        db.Index('idx_chat_rooms_participant2', 'participant2_id'),
    )

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant1_id, self.participant2_id)

    def other_participant(self, user_id: str) -> str:
        return self.participant2_id if self.participant1_id == user_id else self.participant1_id
