import uuid
from sqlalchemy import Uuid
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class Like(db.Model, SerializerMixin):
    __tablename__ = "user_likes"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    liker_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    liked_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('liker_id', 'liked_id', name='uq_like_pair'),
        db.CheckConstraint('liker_id != liked_id', name='check_no_self_like'),
        db.Index('idx_likes_liked', 'liked_id'),
    )
