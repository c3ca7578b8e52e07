"""
Message transport.

Clients either poll ``GET /chats/<room_id>/messages?after=<id>`` or subscribe
to the redis channel for the room; both see the same ordered log.
"""
import json
import logging
from typing import Any, Dict

from utils import cache

logger = logging.getLogger(__name__)


def room_channel(room_id) -> str:
    return f"chat:{room_id}"


def publish_message(room_id, payload: Dict[str, Any]) -> bool:
    """Push an appended message to subscribers of the room channel"""
    if not cache.CacheManager.is_available():
        return False

    try:
        receivers = cache.redis_client.publish(
            room_channel(room_id),
            json.dumps(payload, default=str)
        )
        logger.debug(f"Published message to {receivers} subscribers of room {room_id}")
        return True
    except Exception as e:
        logger.error(f"Realtime publish error for room {room_id}: {str(e)}")
        return False
