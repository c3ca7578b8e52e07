import uuid
from sqlalchemy import Uuid
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class Follow(db.Model, SerializerMixin):
    __tablename__ = "user_follows"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    follower_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    following_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    # One edge per ordered pair, and nobody follows themselves
    __table_args__ = (
        db.UniqueConstraint('follower_id', 'following_id', name='uq_follow_pair'),
        db.CheckConstraint('follower_id != following_id', name='check_no_self_follow'),
        db.Index('idx_follows_following', 'following_id'),
    )
