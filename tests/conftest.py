import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("CLERK_FRONTEND_API", "clerk.test.local")
os.environ.setdefault("CLERK_WEBHOOK_SECRET", "whsec_test")

import pytest

from app import app as flask_app
from middleware.auth import auth_middleware
from models import db, User
from utils import cache


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    monkeypatch.setattr(cache, "redis_client", None)


@pytest.fixture
def app_ctx():
    flask_app.config["TESTING"] = True
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_user(app_ctx):
    def _make_user(user_id, name=None, **fields):
        user = User(
            id=user_id,
            name=name or user_id.title(),
            email=f"{user_id}@wandermatch.test",
            **fields
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def users(make_user):
    """Three travellers whose ids sort alice < bob < carol"""
    return {
        "alice": make_user("alice", "Alice Nair", current_district="Ernakulam"),
        "bob": make_user("bob", "Bob Menon", current_district="Idukki"),
        "carol": make_user("carol", "Carol Pillai", current_district="Ernakulam"),
    }


@pytest.fixture
def client(app_ctx, monkeypatch):
    # The bearer token is the Clerk user id
    monkeypatch.setattr(auth_middleware, "decode_token", lambda token: {"sub": token})
    return flask_app.test_client()


@pytest.fixture
def auth():
    def _auth(user_id):
        return {"Authorization": f"Bearer {user_id}"}
    return _auth
