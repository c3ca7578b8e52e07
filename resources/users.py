import logging
from middleware.auth import clerk_required
from flask_restful import Resource
from flask import request
from models import db
from services import identity, relationships
from services.identity import serialize_user
from utils.cache import CacheManager, build_relationship_cache_key
from utils.errors import SocialGraphError
from utils.response import success_response, error_response, service_error_response

logger = logging.getLogger(__name__)


class CurrentUserResource(Resource):
    """Resource for current authenticated user's profile"""

    @clerk_required
    def get(self):
        """Get current user's profile"""
        try:
            user_id = request.user.get('sub')
            user = identity.require_user(user_id)

            user_data = serialize_user(user)
            user_data['email'] = user.email
            user_data['locale'] = user.locale
            user_data['created_at'] = user.created_at.isoformat() if user.created_at else None

            return success_response(user_data, "User profile retrieved successfully")

        except SocialGraphError as e:
            logger.warning(f"Profile lookup failed: {e.message}")
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching user profile: {str(e)}")
            return error_response("Failed to fetch profile", 500)

    @clerk_required
    def put(self):
        """Update current user's profile"""
        try:
            user_id = request.user.get('sub')
            data = request.get_json(silent=True)

            if not data:
                return error_response("No data provided", 400)

            user = identity.update_profile(user_id, data)

            return success_response(serialize_user(user), "Profile updated successfully")

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error updating profile: {str(e)}")
            return error_response("Failed to update profile", 500)

    @clerk_required
    def patch(self):
        """Partially update current user's profile"""
        # Only supplied fields are touched, so PATCH and PUT share the logic
        return self.put()


class PresenceResource(Resource):
    """Resource for the current user's online status"""

    @clerk_required
    def post(self):
        try:
            user_id = request.user.get('sub')
            data = request.get_json(silent=True) or {}

            user = identity.set_presence(user_id, data.get('is_online', True))

            return success_response(
                {'is_online': user.is_online, 'last_seen': user.last_seen.isoformat()},
                "Presence updated"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error updating presence: {str(e)}")
            return error_response("Failed to update presence", 500)


class UserListResource(Resource):
    """Resource for browsing travellers"""

    @clerk_required
    def get(self):
        try:
            user_id = request.user.get('sub')
            district = request.args.get('district')

            users = [
                serialize_user(user) for user in identity.list_users(district)
                if user.id != user_id
            ]

            return success_response(
                {'users': users, 'total': len(users)},
                "Travellers retrieved successfully"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error listing users: {str(e)}")
            return error_response("Failed to fetch travellers", 500)


class UserProfileResource(Resource):
    """Resource for viewing other users' profiles"""

    @clerk_required
    def get(self, user_id):
        """Get another user's public profile"""
        try:
            current_user_id = request.user.get('sub')

            user = identity.require_user(user_id)
            public_data = serialize_user(user)

            if user_id != current_user_id:
                public_data['is_following'] = relationships.is_following(current_user_id, user_id)
                public_data['is_liked'] = relationships.is_liked(current_user_id, user_id)

            return success_response(public_data, "User profile retrieved")

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {str(e)}")
            return error_response("Failed to fetch profile", 500)


class UserStatsResource(Resource):
    """Resource for follower, following and like counts"""

    @clerk_required
    def get(self, user_id):
        try:
            stats = identity.get_user_stats(user_id)
            return success_response(stats, "User stats retrieved")

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching stats for {user_id}: {str(e)}")
            return error_response("Failed to fetch stats", 500)


class _RelationshipListResource(Resource):
    relation = None
    loader = None

    @clerk_required
    def get(self, user_id):
        try:
            # Only ids are cached so presence and profile edits show up immediately
            user_ids = CacheManager.get_or_load(
                build_relationship_cache_key(user_id, self.relation),
                lambda: [u.id for u in self.loader(user_id)]
            )
            users = [serialize_user(u) for u in identity.get_users(user_ids)]

            return success_response(
                {self.relation: users, 'total': len(users)},
                f"{self.relation.replace('_', ' ').capitalize()} retrieved successfully"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching {self.relation} for {user_id}: {str(e)}")
            return error_response(f"Failed to fetch {self.relation.replace('_', ' ')}", 500)


class FollowersResource(_RelationshipListResource):
    """Users following user_id"""
    relation = 'followers'
    loader = staticmethod(relationships.list_followers)


class FollowingResource(_RelationshipListResource):
    """Users user_id follows"""
    relation = 'following'
    loader = staticmethod(relationships.list_following)
