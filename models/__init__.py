from .base import db, metadata, utcnow, canonical_pair
from .users import User
from .follows import Follow
from .likes import Like
from .matches import Match
from .chat_rooms import ChatRoom
from .messages import ChatMessage, MESSAGE_TYPE_TEXT, MESSAGE_TYPE_SYSTEM
from .posts import CommunityPost
from .location_ratings import LocationRating

__all__ = [
    'db',
    'metadata',
    'utcnow',
    'canonical_pair',
    'User',
    'Follow',
    'Like',
    'Match',
    'ChatRoom',
    'ChatMessage',
    'MESSAGE_TYPE_TEXT',
    'MESSAGE_TYPE_SYSTEM',
    'CommunityPost',
    'LocationRating',
]
