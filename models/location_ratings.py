import uuid
from sqlalchemy import Uuid
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class LocationRating(db.Model, SerializerMixin):
    __tablename__ = "location_ratings"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    location_name = db.Column(db.String(150), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'location_name', name='uq_rating_user_location'),
        db.CheckConstraint('rating >= 1 AND rating <= 5', name='check_rating_range'),
        db.Index('idx_ratings_location', 'location_name'),
    )
