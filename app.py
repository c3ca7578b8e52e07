from flask import Flask
from flask_cors import CORS
from flask_restful import Api, Resource
from flask_migrate import Migrate
from models import db
from dotenv import load_dotenv
import os
import logging
import click

load_dotenv()

app = Flask(__name__)

app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('DATABASE_URL', 'sqlite:///wandermatch.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

CORS(app)

migrate = Migrate(app, db)
db.init_app(app)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s %(message)s'
)

api = Api(app)

class HealthCheck(Resource):
    def get(self):
        return {"status": "ok"}


api.add_resource(HealthCheck, '/health')

from resources.webhooks import ClerkWebhook
from resources.users import (
    CurrentUserResource,
    PresenceResource,
    UserListResource,
    UserProfileResource,
    UserStatsResource,
    FollowersResource,
    FollowingResource
)
from resources.relationships import (
    FollowResource,
    LikeResource,
    LikedUsersResource,
    LikedByResource
)
from resources.match import UserMatchesResource
from resources.chat import ChatRoomListResource
from resources.messages import RoomMessagesResource, MessageDetailResource
from resources.community import PostListResource, UserPostsResource, LocationRatingResource

api.add_resource(ClerkWebhook, '/webhooks/clerk')

# User routes
api.add_resource(CurrentUserResource, '/users/me')
api.add_resource(PresenceResource, '/users/me/presence')
api.add_resource(UserListResource, '/users')
api.add_resource(UserProfileResource, '/users/<string:user_id>')
api.add_resource(UserStatsResource, '/users/<string:user_id>/stats')
api.add_resource(FollowersResource, '/users/<string:user_id>/followers')
api.add_resource(FollowingResource, '/users/<string:user_id>/following')
api.add_resource(UserPostsResource, '/users/<string:user_id>/posts')

# Relationship routes
api.add_resource(FollowResource, '/follows/<string:target_user_id>')
api.add_resource(LikeResource, '/likes/<string:target_user_id>')
api.add_resource(LikedUsersResource, '/likes')
api.add_resource(LikedByResource, '/likes/received')
api.add_resource(UserMatchesResource, '/matches')

# Chat routes
api.add_resource(ChatRoomListResource, '/chats')
api.add_resource(RoomMessagesResource, '/chats/<string:room_id>/messages')
api.add_resource(MessageDetailResource, '/messages/<int:message_id>')

# Community routes
api.add_resource(PostListResource, '/posts')
api.add_resource(LocationRatingResource, '/locations/<string:location_name>/ratings')


@app.cli.command('notify-milestones')
def notify_milestones():
    """Send every romantic milestone message that is due."""
    from services.notifier import sweep_twenty_day_milestones
    sent = sweep_twenty_day_milestones()
    click.echo(f"Sent {sent} milestone message(s)")


if __name__ == '__main__':
    app.run(debug=True)
