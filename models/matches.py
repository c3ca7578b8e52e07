import uuid
from sqlalchemy import Uuid
from .base import db, utcnow
from sqlalchemy_serializer import SerializerMixin
from sqlalchemy import CheckConstraint

class Match(db.Model, SerializerMixin):
    __tablename__ = "matches"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    user1_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    user2_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='matched')
    match_score = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)

    # user1_id is the smaller ID (see canonical_pair), so a pair has exactly one record
    __table_args__ = (
        db.UniqueConstraint('user1_id', 'user2_id', name='uq_match_pair'),
        CheckConstraint('user1_id != user2_id', name='check_no_self_match'),
    )
