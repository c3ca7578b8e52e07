import logging
from middleware.auth import clerk_required
from flask_restful import Resource
from flask import request
from models import db
from services import identity, relationships, matching
from services.identity import serialize_user
from utils.cache import CacheManager, build_relationship_cache_key
from utils.errors import SocialGraphError
from utils.response import success_response, error_response, service_error_response

logger = logging.getLogger(__name__)


class FollowResource(Resource):
    """Follow, unfollow and check a follow edge towards target_user_id"""

    @clerk_required
    def get(self, target_user_id):
        try:
            user_id = request.user.get('sub')
            return success_response(
                {'is_following': relationships.is_following(user_id, target_user_id)},
                "Follow status retrieved"
            )
        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error checking follow status: {str(e)}")
            return error_response("Failed to check follow status", 500)

    @clerk_required
    def post(self, target_user_id):
        try:
            user_id = request.user.get('sub')

            edge, created = relationships.follow(user_id, target_user_id)

            return success_response(
                {
                    'follower_id': edge.follower_id,
                    'following_id': edge.following_id,
                    'created_at': edge.created_at.isoformat() if edge.created_at else None,
                    'created': created
                },
                "Followed successfully" if created else "Already following",
                201 if created else 200
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error following user: {str(e)}")
            return error_response("Failed to follow user", 500)

    @clerk_required
    def delete(self, target_user_id):
        try:
            user_id = request.user.get('sub')
            removed = relationships.unfollow(user_id, target_user_id)

            return success_response(
                {'removed': removed},
                "Unfollowed successfully" if removed else "Not following"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error unfollowing user: {str(e)}")
            return error_response("Failed to unfollow user", 500)


class LikeResource(Resource):
    """Like, unlike and check a like edge towards target_user_id"""

    @clerk_required
    def get(self, target_user_id):
        try:
            user_id = request.user.get('sub')
            return success_response(
                {
                    'is_liked': relationships.is_liked(user_id, target_user_id),
                    'is_match': matching.is_mutual_like(user_id, target_user_id)
                },
                "Like status retrieved"
            )
        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error checking like status: {str(e)}")
            return error_response("Failed to check like status", 500)

    @clerk_required
    def post(self, target_user_id):
        """
        Like a user.
        If they already like the current user, this creates a match and
        switches their chat room to romantic mode.
        """
        try:
            user_id = request.user.get('sub')

            edge, match = relationships.like(user_id, target_user_id)

            return success_response(
                {
                    'liker_id': edge.liker_id,
                    'liked_id': edge.liked_id,
                    'is_match': match is not None,
                    'match_id': str(match.id) if match else None
                },
                "It's a match!" if match else "Like sent!"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error liking user: {str(e)}")
            return error_response("Failed to like user", 500)

    @clerk_required
    def delete(self, target_user_id):
        try:
            user_id = request.user.get('sub')
            removed = relationships.unlike(user_id, target_user_id)

            return success_response(
                {'removed': removed},
                "Like removed" if removed else "Not liked"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error unliking user: {str(e)}")
            return error_response("Failed to unlike user", 500)


class LikedUsersResource(Resource):
    """Users the current user has liked"""

    @clerk_required
    def get(self):
        try:
            user_id = request.user.get('sub')
            user_ids = CacheManager.get_or_load(
                build_relationship_cache_key(user_id, 'liked'),
                lambda: [u.id for u in relationships.list_liked(user_id)]
            )
            users = [serialize_user(u) for u in identity.get_users(user_ids)]
            return success_response({'users': users, 'total': len(users)}, "Liked users retrieved")

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching liked users: {str(e)}")
            return error_response("Failed to fetch liked users", 500)


class LikedByResource(Resource):
    """Users who liked the current user"""

    @clerk_required
    def get(self):
        try:
            user_id = request.user.get('sub')
            user_ids = CacheManager.get_or_load(
                build_relationship_cache_key(user_id, 'liked_by'),
                lambda: [u.id for u in relationships.list_liked_by(user_id)]
            )
            users = [serialize_user(u) for u in identity.get_users(user_ids)]
            return success_response({'users': users, 'total': len(users)}, "Admirers retrieved")

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching admirers: {str(e)}")
            return error_response("Failed to fetch users who liked you", 500)
