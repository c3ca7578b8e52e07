import logging
from middleware.auth import clerk_required
from flask_restful import Resource
from flask import request
from services import matching
from utils.errors import SocialGraphError
from utils.response import success_response, error_response, service_error_response

logger = logging.getLogger(__name__)


class UserMatchesResource(Resource):
    """Resource for getting user's current matches"""

    @clerk_required
    def get(self):
        """Get all mutual likes for the current user"""
        try:
            user_id = request.user.get('sub')

            matches_data = []
            for entry in matching.list_matches(user_id):
                match, other_user = entry['match'], entry['user']
                matches_data.append({
                    'match_id': str(match.id),
                    'user_id': other_user.id,
                    'name': other_user.name,
                    'age': other_user.age,
                    'avatar_url': other_user.avatar_url,
                    'bio': other_user.bio,
                    'current_city': other_user.current_city,
                    'current_district': other_user.current_district,
                    'is_online': other_user.is_online,
                    'match_score': match.match_score,
                    'matched_at': match.created_at.isoformat() if match.created_at else None
                })

            return success_response(
                {'matches': matches_data, 'total': len(matches_data)},
                "Matches retrieved successfully"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching matches: {str(e)}")
            return error_response("Failed to fetch matches", 500)
