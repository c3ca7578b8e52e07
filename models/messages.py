from .base import db, utcnow
from sqlalchemy import Uuid
from sqlalchemy_serializer import SerializerMixin

MESSAGE_TYPE_TEXT = 'text'
MESSAGE_TYPE_SYSTEM = 'system'


class ChatMessage(db.Model, SerializerMixin):
    __tablename__ = "chat_messages"

    # Integer id doubles as the insertion sequence used to break timestamp ties
    id = db.Column(db.BigInteger().with_variant(db.Integer, 'sqlite'), primary_key=True, autoincrement=True)
    chat_room_id = db.Column(Uuid, db.ForeignKey('chat_rooms.id', ondelete='CASCADE'), nullable=False)
    sender_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    content = db.Column(db.Text, nullable=False)
    message_type = db.Column(
        db.Enum(MESSAGE_TYPE_TEXT, MESSAGE_TYPE_SYSTEM, name='message_type'),
        nullable=False,
        default=MESSAGE_TYPE_TEXT
    )
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.Index('idx_room_created', 'chat_room_id', 'created_at', 'id'),
        db.Index('idx_sender_created', 'sender_id', 'created_at'),
    )
