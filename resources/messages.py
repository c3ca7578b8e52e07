import logging
from middleware.auth import clerk_required
from flask_restful import Resource
from flask import request
from models import db
from services import messages
from services.chat_rooms import get_room, require_participant
from utils.errors import SocialGraphError
from utils.response import success_response, error_response, service_error_response

logger = logging.getLogger(__name__)


class RoomMessagesResource(Resource):
    """Resource for sending and retrieving messages in a chat room"""

    @clerk_required
    def get(self, room_id):
        """
        Get messages for a chat room in chronological order.
        Pass ?after=<message_id> to poll for newer messages only.
        """
        try:
            user_id = request.user.get('sub')

            room = require_participant(get_room(room_id), user_id)
            after_id = request.args.get('after', type=int)

            history = messages.list_messages(room.id, after_id=after_id)
            messages_data = [messages.serialize_message(msg) for msg in history]

            return success_response(
                {
                    'messages': messages_data,
                    'total': len(messages_data),
                    'is_romantic': room.is_romantic
                },
                "Messages retrieved successfully"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error fetching messages: {str(e)}")
            return error_response("Failed to fetch messages", 500)

    @clerk_required
    def post(self, room_id):
        """Send a message to the other participant"""
        try:
            user_id = request.user.get('sub')
            data = request.get_json(silent=True)

            if not data:
                return error_response("No data provided", 400)

            content = data.get('content') or data.get('text')
            if not content:
                return error_response("content is required", 400)

            room = get_room(room_id)
            messages.ensure_can_message(user_id, room)

            message = messages.append(room.id, user_id, content)

            return success_response(
                messages.serialize_message(message),
                "Message sent successfully",
                201
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error sending message: {str(e)}")
            return error_response("Failed to send message", 500)


class MessageDetailResource(Resource):
    """Resource for a single message"""

    @clerk_required
    def delete(self, message_id):
        """Delete one of the current user's own messages"""
        try:
            user_id = request.user.get('sub')
            messages.delete_message(message_id, user_id)

            return success_response({'deleted': message_id}, "Message deleted")

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error deleting message {message_id}: {str(e)}")
            return error_response("Failed to delete message", 500)
