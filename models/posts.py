import uuid
from sqlalchemy import Uuid
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class CommunityPost(db.Model, SerializerMixin):
    __tablename__ = "community_posts"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    content = db.Column(db.Text, nullable=False)
    location_tag = db.Column(db.String(150), nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.Index('idx_posts_user_created', 'user_id', 'created_at'),
        db.Index('idx_posts_created', 'created_at'),
    )
