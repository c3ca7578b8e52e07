"""
Error types raised by the social graph services.

Each error carries the HTTP status the resources translate it to.
"""
import logging
from functools import wraps
from typing import Optional, Dict
from sqlalchemy.exc import OperationalError, InterfaceError

logger = logging.getLogger(__name__)


class SocialGraphError(Exception):
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFound(SocialGraphError):
    """A referenced user, room, message or edge does not exist"""
    status_code = 404


class RoomNotFound(NotFound):
    pass


class AlreadyExists(SocialGraphError):
    status_code = 409


class InvalidOperation(SocialGraphError):
    """Self-follow, self-like or any other structurally nonsensical request"""
    status_code = 400


class Forbidden(SocialGraphError):
    status_code = 403


class StorageUnavailable(SocialGraphError):
    """The database could not be reached. Never retried or masked."""
    status_code = 503


def storage_guard(f):
    """
    Translate database connectivity failures into StorageUnavailable.

    The session is rolled back so the caller's next request starts clean.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            from models import db
            db.session.rollback()
            logger.error("Storage unavailable in %s: %s", f.__name__, str(e))
            raise StorageUnavailable("Storage is currently unavailable") from e
    return wrapper
