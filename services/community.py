import logging
from typing import Optional, List, Dict, Any, Tuple
from models import db, User, CommunityPost, LocationRating
from services.identity import require_user
from services.storage import insert_or_fetch
from utils.errors import InvalidOperation, storage_guard
from utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

MAX_POST_LENGTH = 2000


def serialize_post(post: CommunityPost, author: Optional[User] = None) -> Dict[str, Any]:
    data = {
        'id': str(post.id),
        'user_id': post.user_id,
        'content': post.content,
        'location_tag': post.location_tag,
        'image_url': post.image_url,
        'created_at': post.created_at.isoformat() if post.created_at else None,
    }
    if author is not None:
        data['user'] = {
            'id': author.id,
            'name': author.name,
            'avatar_url': author.avatar_url,
        }
    return data


@storage_guard
def create_post(user_id: str, content: str, location_tag: Optional[str] = None,
                image_url: Optional[str] = None) -> CommunityPost:
    require_user(user_id)

    content = sanitize_text(content, field="content")
    if not content:
        raise InvalidOperation("Post content cannot be empty")
    if len(content) > MAX_POST_LENGTH:
        raise InvalidOperation(f"Post cannot exceed {MAX_POST_LENGTH} characters")

    post = CommunityPost(
        user_id=user_id,
        content=content,
        location_tag=sanitize_text(location_tag, 150, field="location_tag") or None,
        image_url=image_url or None,
    )
    db.session.add(post)
    db.session.commit()

    logger.info(f"Post {post.id} created by {user_id}")
    return post


@storage_guard
def list_posts(page: int = 1, per_page: int = 20) -> Tuple[List[Tuple[CommunityPost, User]], int]:
    """Community feed, newest first, with each post's author"""
    query = db.session.query(CommunityPost, User)\
        .join(User, User.id == CommunityPost.user_id)\
        .order_by(CommunityPost.created_at.desc())

    total = query.count()
    rows = query.offset((page - 1) * per_page).limit(per_page).all()
    return rows, total


@storage_guard
def list_user_posts(user_id: str) -> List[CommunityPost]:
    require_user(user_id)
    return CommunityPost.query.filter_by(user_id=user_id)\
        .order_by(CommunityPost.created_at.desc()).all()


def _find_rating(user_id: str, location_name: str) -> Optional[LocationRating]:
    return LocationRating.query.filter_by(user_id=user_id, location_name=location_name).first()


@storage_guard
def rate_location(user_id: str, location_name: str, rating) -> LocationRating:
    """One rating per user and location; rating again replaces the old score"""
    require_user(user_id)

    location_name = sanitize_text(location_name, 150)
    if not location_name:
        raise InvalidOperation("Location name is required")
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise InvalidOperation("Rating must be a number between 1 and 5")
    if rating < 1 or rating > 5:
        raise InvalidOperation("Rating must be a number between 1 and 5")

    existing = _find_rating(user_id, location_name)
    if existing is None:
        existing, created = insert_or_fetch(
            LocationRating(user_id=user_id, location_name=location_name, rating=rating),
            lambda: _find_rating(user_id, location_name)
        )
        if created:
            return existing

    existing.rating = rating
    db.session.commit()
    return existing


@storage_guard
def get_location_rating(location_name: str) -> Dict[str, Any]:
    average, count = db.session.query(
        db.func.avg(LocationRating.rating),
        db.func.count(LocationRating.id)
    ).filter(LocationRating.location_name == location_name).one()

    if not count:
        return {'location_name': location_name, 'average': 0, 'count': 0}
    return {
        'location_name': location_name,
        'average': round(float(average), 1),
        'count': count,
    }
