import logging
from typing import Optional, List, Dict, Any
from models import db, User, Follow, Like, utcnow
from utils.errors import NotFound, InvalidOperation, storage_guard
from utils.cache import CacheManager, build_user_stats_cache_key, CACHE_TTL_SHORT
from utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

# Fields a user may change on their own profile, with max lengths for text
EDITABLE_TEXT_FIELDS = {
    'name': 150,
    'bio': 1000,
    'gender': 20,
    'current_city': 100,
    'current_district': 100,
    'locale': 10,
    'avatar_url': 500,
}


def require_user(user_id: str) -> User:
    user = db.session.get(User, user_id) if user_id else None
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


def serialize_user(user: User) -> Dict[str, Any]:
    data = user.to_dict()
    data['last_seen'] = user.last_seen.isoformat() if user.last_seen else None
    return data


@storage_guard
def list_users(district: Optional[str] = None) -> List[User]:
    """Travellers, online first, optionally narrowed to one district"""
    query = User.query
    if district and district != 'all':
        query = query.filter(User.current_district == district)
    return query.order_by(User.is_online.desc(), User.name.asc()).all()


@storage_guard
def update_profile(user_id: str, data: Dict[str, Any]) -> User:
    user = require_user(user_id)

    # Validate everything before touching the user
    updates = {}
    for field, max_length in EDITABLE_TEXT_FIELDS.items():
        if field in data:
            value = sanitize_text(data[field], max_length, field=field)
            if field == 'name' and not value:
                raise InvalidOperation("Name cannot be empty")
            updates[field] = value or None

    if 'age' in data:
        age = data['age']
        if age is not None:
            try:
                age = int(age)
            except (TypeError, ValueError):
                raise InvalidOperation("Age must be a number")
            if age < 18 or age > 120:
                raise InvalidOperation("Age must be between 18 and 120")
        updates['age'] = age

    for field, value in updates.items():
        setattr(user, field, value)

    db.session.commit()
    logger.info(f"Updated profile for user {user_id}")
    return user


@storage_guard
def set_presence(user_id: str, is_online: bool) -> User:
    user = require_user(user_id)
    user.is_online = bool(is_online)
    user.last_seen = utcnow()
    db.session.commit()
    return user


@storage_guard
def get_user_stats(user_id: str) -> Dict[str, int]:
    require_user(user_id)

    def load():
        return {
            'followers': Follow.query.filter_by(following_id=user_id).count(),
            'following': Follow.query.filter_by(follower_id=user_id).count(),
            'likes': Like.query.filter_by(liked_id=user_id).count(),
        }

    return CacheManager.get_or_load(build_user_stats_cache_key(user_id), load, ttl=CACHE_TTL_SHORT)


@storage_guard
def get_users(user_ids: List[str]) -> List[User]:
    """Users for the given ids in the same order, skipping ids that are gone"""
    if not user_ids:
        return []
    found = {u.id: u for u in User.query.filter(User.id.in_(user_ids)).all()}
    return [found[user_id] for user_id in user_ids if user_id in found]
