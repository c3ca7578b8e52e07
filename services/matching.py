"""
Match detection.

A match is the pair-wise condition "a likes b and b likes a". The matches
table materialises it: a row exists exactly while both like edges exist.
On a new match the pair's chat room is created or upgraded to romantic mode.
"""
import logging
from typing import Optional, List, Dict, Any
from models import db, User, Like, Match, canonical_pair
from services import chat_rooms
from services.storage import insert_or_fetch
from utils.errors import storage_guard

logger = logging.getLogger(__name__)

# Mutual likes carry no compatibility signal; every match gets the same score
# the web client has always shown for a mutual like
MATCH_SCORE = 85


def _find_match(user_a: str, user_b: str) -> Optional[Match]:
    user1_id, user2_id = canonical_pair(user_a, user_b)
    return Match.query.filter_by(user1_id=user1_id, user2_id=user2_id).first()


def check_mutual(user_a: str, user_b: str) -> bool:
    """True iff both directed like edges exist"""
    return Like.query.filter(
        db.or_(
            db.and_(Like.liker_id == user_a, Like.liked_id == user_b),
            db.and_(Like.liker_id == user_b, Like.liked_id == user_a)
        )
    ).count() == 2


def on_like(liker_id: str, liked_id: str) -> Optional[Match]:
    """
    Called after liker_id -> liked_id is stored.

    Creates the MatchRecord and promotes the chat room when the like is
    reciprocated. Safe to run concurrently for both directions of a pair.
    """
    if not check_mutual(liker_id, liked_id):
        return None

    match = _find_match(liker_id, liked_id)
    if match is None:
        user1_id, user2_id = canonical_pair(liker_id, liked_id)
        match, created = insert_or_fetch(
            Match(user1_id=user1_id, user2_id=user2_id, status='matched', match_score=MATCH_SCORE),
            lambda: _find_match(liker_id, liked_id)
        )
        if created:
            logger.info(f"Match created between {user1_id} and {user2_id}")

    chat_rooms.get_or_create_room(liker_id, liked_id, romantic_hint=True)
    return match


def remove_match(user_a: str, user_b: str) -> int:
    """Delete the pair's MatchRecord. Caller commits."""
    user1_id, user2_id = canonical_pair(user_a, user_b)
    return Match.query.filter_by(user1_id=user1_id, user2_id=user2_id).delete()


@storage_guard
def is_mutual_like(user_a: str, user_b: str) -> bool:
    return _find_match(user_a, user_b) is not None


@storage_guard
def list_matches(user_id: str) -> List[Dict[str, Any]]:
    """Matches involving user_id, newest first, with the other user attached"""
    matches = Match.query.filter(
        db.or_(Match.user1_id == user_id, Match.user2_id == user_id),
        Match.status == 'matched'
    ).order_by(Match.created_at.desc()).all()

    other_ids = [m.user2_id if m.user1_id == user_id else m.user1_id for m in matches]
    users = {u.id: u for u in User.query.filter(User.id.in_(other_ids)).all()} if other_ids else {}

    results = []
    for match in matches:
        other_user_id = match.user2_id if match.user1_id == user_id else match.user1_id
        other_user = users.get(other_user_id)
        if not other_user:
            continue
        results.append({
            'match': match,
            'user': other_user,
        })
    return results
