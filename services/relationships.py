"""
Relationship ledger: follow and like edges between users.

Both edge kinds are directional and unique per ordered pair. Follow and like
are idempotent; repeating them returns the existing edge. Liking someone who
already likes you runs the match detector before the call returns.
"""
import logging
from typing import List, Tuple, Optional
from models import db, User, Follow, Like, Match
from services import matching
from services.identity import require_user
from services.storage import insert_or_fetch
from utils.cache import CacheManager
from utils.errors import InvalidOperation, storage_guard

logger = logging.getLogger(__name__)


def _require_pair(actor_id: str, target_id: str, action: str):
    if actor_id == target_id:
        raise InvalidOperation(f"Cannot {action} yourself")
    require_user(actor_id)
    require_user(target_id)


def _find_follow(follower_id: str, followee_id: str) -> Optional[Follow]:
    return Follow.query.filter_by(follower_id=follower_id, following_id=followee_id).first()


def _find_like(liker_id: str, liked_id: str) -> Optional[Like]:
    return Like.query.filter_by(liker_id=liker_id, liked_id=liked_id).first()


def _invalidate(*user_ids: str):
    for user_id in user_ids:
        CacheManager.invalidate_user_cache(user_id)


@storage_guard
def follow(follower_id: str, followee_id: str) -> Tuple[Follow, bool]:
    """Create the follow edge. Returns (edge, created)."""
    _require_pair(follower_id, followee_id, 'follow')

    edge = _find_follow(follower_id, followee_id)
    if edge is not None:
        return edge, False

    edge, created = insert_or_fetch(
        Follow(follower_id=follower_id, following_id=followee_id),
        lambda: _find_follow(follower_id, followee_id)
    )
    _invalidate(follower_id, followee_id)
    if created:
        logger.info(f"{follower_id} now follows {followee_id}")
    return edge, created


@storage_guard
def unfollow(follower_id: str, followee_id: str) -> bool:
    """Remove the follow edge. Absent edges are a no-op."""
    require_user(follower_id)
    require_user(followee_id)
    removed = Follow.query.filter_by(
        follower_id=follower_id,
        following_id=followee_id
    ).delete()
    db.session.commit()

    if removed:
        _invalidate(follower_id, followee_id)
        logger.info(f"{follower_id} unfollowed {followee_id}")
    return bool(removed)


@storage_guard
def like(liker_id: str, liked_id: str) -> Tuple[Like, Optional[Match]]:
    """
    Create the like edge, then check for a mutual like.

    Returns (edge, match) where match is the MatchRecord when the pair is
    mutual after this like, else None.
    """
    _require_pair(liker_id, liked_id, 'like')

    edge = _find_like(liker_id, liked_id)
    if edge is None:
        edge, created = insert_or_fetch(
            Like(liker_id=liker_id, liked_id=liked_id),
            lambda: _find_like(liker_id, liked_id)
        )
        if created:
            logger.info(f"{liker_id} liked {liked_id}")

    # Re-run on repeated likes too so a half-finished earlier match converges
    match = matching.on_like(liker_id, liked_id)
    _invalidate(liker_id, liked_id)
    return edge, match


@storage_guard
def unlike(liker_id: str, liked_id: str) -> bool:
    """
    Remove the like edge and any MatchRecord for the pair.

    The pair's chat room keeps its romantic flag.
    """
    require_user(liker_id)
    require_user(liked_id)
    removed = Like.query.filter_by(liker_id=liker_id, liked_id=liked_id).delete()
    matches_removed = matching.remove_match(liker_id, liked_id)
    db.session.commit()

    _invalidate(liker_id, liked_id)
    if removed:
        logger.info(f"{liker_id} unliked {liked_id}")
    if matches_removed:
        logger.info(f"Match between {liker_id} and {liked_id} removed")
    return bool(removed)


@storage_guard
def is_following(follower_id: str, followee_id: str) -> bool:
    require_user(follower_id)
    require_user(followee_id)
    return _find_follow(follower_id, followee_id) is not None


@storage_guard
def is_liked(liker_id: str, liked_id: str) -> bool:
    require_user(liker_id)
    require_user(liked_id)
    return _find_like(liker_id, liked_id) is not None


@storage_guard
def list_followers(user_id: str) -> List[User]:
    require_user(user_id)
    return User.query.join(Follow, Follow.follower_id == User.id)\
        .filter(Follow.following_id == user_id).all()


@storage_guard
def list_following(user_id: str) -> List[User]:
    require_user(user_id)
    return User.query.join(Follow, Follow.following_id == User.id)\
        .filter(Follow.follower_id == user_id).all()


@storage_guard
def list_liked(user_id: str) -> List[User]:
    require_user(user_id)
    return User.query.join(Like, Like.liked_id == User.id)\
        .filter(Like.liker_id == user_id).all()


@storage_guard
def list_liked_by(user_id: str) -> List[User]:
    require_user(user_id)
    return User.query.join(Like, Like.liker_id == User.id)\
        .filter(Like.liked_id == user_id).all()
