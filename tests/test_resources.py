import uuid
from datetime import timedelta

from models import db, utcnow
from services import chat_rooms
from utils import cache


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_missing_token_is_unauthorized(client, users):
    response = client.get("/users/me")

    assert response.status_code == 401
    assert response.get_json()["success"] is False


def test_current_user_profile(client, users, auth):
    response = client.get("/users/me", headers=auth("alice"))

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["id"] == "alice"
    assert data["email"] == "alice@wandermatch.test"


def test_unknown_current_user(client, users, auth):
    response = client.get("/users/me", headers=auth("ghost"))
    assert response.status_code == 404


def test_update_profile(client, users, auth):
    response = client.patch(
        "/users/me",
        json={"bio": "Houseboats <b>and</b> sunsets", "age": 27, "current_city": "Alleppey"},
        headers=auth("alice")
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["bio"] == "Houseboats band/b sunsets"
    assert data["age"] == 27
    assert data["current_city"] == "Alleppey"

    response = client.put("/users/me", json={"age": 12}, headers=auth("alice"))
    assert response.status_code == 400


def test_presence(client, users, auth):
    response = client.post("/users/me/presence", json={"is_online": True}, headers=auth("bob"))

    assert response.status_code == 200
    assert response.get_json()["data"]["is_online"] is True


def test_list_users_by_district(client, users, auth):
    response = client.get("/users?district=Ernakulam", headers=auth("bob"))

    ids = [u["id"] for u in response.get_json()["data"]["users"]]
    assert sorted(ids) == ["alice", "carol"]


def test_follow_endpoints(client, users, auth):
    first = client.post("/follows/bob", headers=auth("alice"))
    second = client.post("/follows/bob", headers=auth("alice"))

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.get_json()["data"]["created"] is False

    status = client.get("/follows/bob", headers=auth("alice"))
    assert status.get_json()["data"]["is_following"] is True

    followers = client.get("/users/bob/followers", headers=auth("carol"))
    assert [u["id"] for u in followers.get_json()["data"]["followers"]] == ["alice"]

    stats = client.get("/users/bob/stats", headers=auth("carol"))
    assert stats.get_json()["data"]["followers"] == 1

    removed = client.delete("/follows/bob", headers=auth("alice"))
    assert removed.get_json()["data"]["removed"] is True


def test_self_follow_is_bad_request(client, users, auth):
    response = client.post("/follows/alice", headers=auth("alice"))

    assert response.status_code == 400
    assert response.get_json()["error"]["message"] == "Cannot follow yourself"


def test_follow_unknown_user_is_not_found(client, users, auth):
    response = client.post("/follows/ghost", headers=auth("alice"))
    assert response.status_code == 404


def test_like_until_match(client, users, auth):
    first = client.post("/likes/bob", headers=auth("alice")).get_json()["data"]
    assert first["is_match"] is False

    second = client.post("/likes/alice", headers=auth("bob"))
    assert second.get_json()["message"] == "It's a match!"
    assert second.get_json()["data"]["is_match"] is True

    matches = client.get("/matches", headers=auth("alice")).get_json()["data"]
    assert matches["total"] == 1
    assert matches["matches"][0]["user_id"] == "bob"

    received = client.get("/likes/received", headers=auth("alice")).get_json()["data"]
    assert [u["id"] for u in received["users"]] == ["bob"]

    liked = client.get("/likes", headers=auth("alice")).get_json()["data"]
    assert [u["id"] for u in liked["users"]] == ["bob"]

    rooms = client.get("/chats", headers=auth("alice")).get_json()["data"]["rooms"]
    assert len(rooms) == 1
    assert rooms[0]["is_romantic"] is True
    assert rooms[0]["other_user"]["id"] == "bob"

    client.delete("/likes/bob", headers=auth("alice"))
    status = client.get("/likes/bob", headers=auth("alice")).get_json()["data"]
    assert status == {"is_liked": False, "is_match": False}


def test_chat_flow(client, users, auth):
    opened = client.post("/chats", json={"user_id": "bob"}, headers=auth("alice"))
    assert opened.status_code == 200
    room_id = opened.get_json()["data"]["id"]

    reopened = client.post("/chats", json={"user_id": "alice"}, headers=auth("bob"))
    assert reopened.get_json()["data"]["id"] == room_id

    # Alice does not follow Bob yet
    blocked = client.post(f"/chats/{room_id}/messages", json={"content": "Hi"}, headers=auth("alice"))
    assert blocked.status_code == 403

    client.post("/follows/bob", headers=auth("alice"))
    sent = client.post(f"/chats/{room_id}/messages", json={"content": "Hi"}, headers=auth("alice"))
    assert sent.status_code == 201
    message_id = sent.get_json()["data"]["id"]

    listed = client.get(f"/chats/{room_id}/messages", headers=auth("bob")).get_json()["data"]
    assert [m["content"] for m in listed["messages"]] == ["Hi"]
    assert listed["is_romantic"] is False

    polled = client.get(f"/chats/{room_id}/messages?after={message_id}", headers=auth("bob"))
    assert polled.get_json()["data"]["messages"] == []

    outsider = client.get(f"/chats/{room_id}/messages", headers=auth("carol"))
    assert outsider.status_code == 403

    not_yours = client.delete(f"/messages/{message_id}", headers=auth("bob"))
    assert not_yours.status_code == 403
    deleted = client.delete(f"/messages/{message_id}", headers=auth("alice"))
    assert deleted.status_code == 200


def test_unknown_room(client, users, auth):
    response = client.get(f"/chats/{uuid.uuid4()}/messages", headers=auth("alice"))
    assert response.status_code == 404

    response = client.post("/chats/not-a-room/messages", json={"content": "Hi"}, headers=auth("alice"))
    assert response.status_code == 404


def test_reading_a_romantic_room_delivers_milestone(client, users, auth):
    room = chat_rooms.get_or_create_room("alice", "bob", romantic_hint=True)
    room.romantic_started_at = utcnow() - timedelta(days=21)
    db.session.commit()

    data = client.get(f"/chats/{room.id}/messages", headers=auth("bob")).get_json()["data"]

    assert len(data["messages"]) == 1
    assert data["messages"][0]["message_type"] == "system"
    assert data["messages"][0]["sender_id"] is None
    assert data["messages"][0]["content"].startswith("Alice Nair has been in romantic mode")


def test_non_text_message_content_is_bad_request(client, users, auth):
    room_id = client.post("/chats", json={"user_id": "bob"}, headers=auth("alice")).get_json()["data"]["id"]
    client.post("/follows/bob", headers=auth("alice"))

    response = client.post(f"/chats/{room_id}/messages", json={"content": 123}, headers=auth("alice"))

    assert response.status_code == 400
    assert response.get_json()["error"]["message"] == "content must be a string"


def test_non_text_profile_field_is_bad_request(client, users, auth):
    response = client.put("/users/me", json={"bio": ["not", "text"]}, headers=auth("alice"))

    assert response.status_code == 400
    assert response.get_json()["error"]["message"] == "bio must be a string"


class DictRedis:
    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def scan_iter(self, match):
        prefix = match.rstrip("*")
        return [key for key in self.store if key.startswith(prefix)]

    def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)
        return len(keys)


def test_cached_follower_list_shows_fresh_presence(client, users, auth, monkeypatch):
    monkeypatch.setattr(cache, "redis_client", DictRedis())
    client.post("/follows/bob", headers=auth("alice"))

    before = client.get("/users/bob/followers", headers=auth("carol")).get_json()["data"]
    assert [u["is_online"] for u in before["followers"]] == [False]

    client.post("/users/me/presence", json={"is_online": True}, headers=auth("alice"))

    after = client.get("/users/bob/followers", headers=auth("carol")).get_json()["data"]
    assert [u["id"] for u in after["followers"]] == ["alice"]
    assert [u["is_online"] for u in after["followers"]] == [True]
