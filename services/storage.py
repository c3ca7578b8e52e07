import logging
from typing import Callable, Optional, Tuple, TypeVar
from sqlalchemy.exc import IntegrityError
from models import db

logger = logging.getLogger(__name__)

T = TypeVar('T')


def insert_or_fetch(instance: T, fetch: Callable[[], Optional[T]]) -> Tuple[T, bool]:
    """
    Insert a row guarded by a unique constraint.

    When a concurrent writer got there first the conflict is rolled back and
    the winning row is fetched instead. Returns (row, created).
    """
    db.session.add(instance)
    try:
        db.session.commit()
        return instance, True
    except IntegrityError:
        db.session.rollback()
        existing = fetch()
        if existing is None:
            # Not a uniqueness race (e.g. a missing foreign key), let it surface
            raise
        logger.info(f"Insert conflict on {type(instance).__name__}, using existing row")
        return existing, False
