import logging
from middleware.auth import clerk_required
from flask_restful import Resource
from flask import request
from models import db
from services import community
from utils.errors import SocialGraphError
from utils.response import success_response, error_response, paginated_response, service_error_response

logger = logging.getLogger(__name__)


class PostListResource(Resource):
    """Community feed"""

    @clerk_required
    def get(self):
        try:
            page = max(request.args.get('page', type=int, default=1), 1)
            per_page = min(max(request.args.get('per_page', type=int, default=20), 1), 100)

            rows, total = community.list_posts(page, per_page)
            posts = [community.serialize_post(post, author) for post, author in rows]

            return paginated_response(posts, total, page, per_page)

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching posts: {str(e)}")
            return error_response("Failed to fetch posts", 500)

    @clerk_required
    def post(self):
        try:
            user_id = request.user.get('sub')
            data = request.get_json(silent=True)

            if not data:
                return error_response("No data provided", 400)

            post = community.create_post(
                user_id,
                data.get('content'),
                location_tag=data.get('location_tag'),
                image_url=data.get('image_url')
            )

            return success_response(community.serialize_post(post), "Post created", 201)

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error creating post: {str(e)}")
            return error_response("Failed to create post", 500)


class UserPostsResource(Resource):
    """Posts by one user"""

    @clerk_required
    def get(self, user_id):
        try:
            posts = [community.serialize_post(post) for post in community.list_user_posts(user_id)]
            return success_response({'posts': posts, 'total': len(posts)}, "Posts retrieved")

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching posts for {user_id}: {str(e)}")
            return error_response("Failed to fetch posts", 500)


class LocationRatingResource(Resource):
    """Average rating for a location, and rating it"""

    @clerk_required
    def get(self, location_name):
        try:
            return success_response(
                community.get_location_rating(location_name),
                "Rating retrieved"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching rating for {location_name}: {str(e)}")
            return error_response("Failed to fetch rating", 500)

    @clerk_required
    def post(self, location_name):
        try:
            user_id = request.user.get('sub')
            data = request.get_json(silent=True) or {}

            rating = community.rate_location(user_id, location_name, data.get('rating'))

            return success_response(
                {
                    'location_name': rating.location_name,
                    'rating': rating.rating,
                    'summary': community.get_location_rating(rating.location_name)
                },
                "Thanks for rating!"
            )

        except SocialGraphError as e:
            return service_error_response(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error rating {location_name}: {str(e)}")
            return error_response("Failed to save rating", 500)
