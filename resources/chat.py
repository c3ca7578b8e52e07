import logging
from middleware.auth import clerk_required
from flask_restful import Resource
from flask import request
from models import db
from services import chat_rooms
from utils.errors import SocialGraphError
from utils.response import success_response, error_response, service_error_response

logger = logging.getLogger(__name__)


class ChatRoomListResource(Resource):
    """Resource for the current user's chat rooms"""

    @clerk_required
    def get(self):
        """List rooms with the other participant and last message preview"""
        try:
            user_id = request.user.get('sub')
            rooms = chat_rooms.list_rooms_for_user(user_id)

            return success_response(
                {'rooms': rooms, 'total': len(rooms)},
                "Chat rooms retrieved successfully"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching chat rooms: {str(e)}")
            return error_response("Failed to fetch chat rooms", 500)

    @clerk_required
    def post(self):
        """Open (or reopen) the chat with another user"""
        try:
            user_id = request.user.get('sub')
            data = request.get_json(silent=True)

            if not data or not data.get('user_id'):
                return error_response("user_id is required", 400)

            other_user_id = data['user_id']
            room = chat_rooms.get_or_create_room(user_id, other_user_id)

            return success_response(
                chat_rooms.serialize_room(room),
                "Chat room ready"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error opening chat room: {str(e)}")
            return error_response("Failed to open chat room", 500)
