# models/user.py
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, Index, func
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class User(db.Model, SerializerMixin):
    __tablename__ = "users"

    # Primary Key (Clerk user_id comes as a string)
    id = Column(String, primary_key=True)

    # Basic Info
    name = Column(String(150), nullable=False, index=True)
    email = Column(String(150), unique=True, nullable=False)
    avatar_url = Column(String(500), nullable=True)

    # Traveller profile
    age = Column(Integer, nullable=True)
    gender = Column(String(20), nullable=True)
    bio = Column(Text, nullable=True)
    current_city = Column(String(100), nullable=True)
    current_district = Column(String(100), nullable=True)
    locale = Column(String(10), nullable=True)

    # Presence
    is_online = Column(Boolean, nullable=False, default=False)
    last_seen = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_users_email_lower", func.lower(email), unique=True),
        Index("ix_users_created_at", "created_at"),
        Index("ix_users_district", "current_district"),
    )

    serialize_only = (
        'id', 'name', 'avatar_url', 'age', 'gender', 'bio',
        'current_city', 'current_district', 'is_online',
    )

    def __repr__(self):
        return f'<User {self.id}>'
