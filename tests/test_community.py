import pytest

from services import community
from utils.errors import InvalidOperation


def test_create_and_list_posts(users):
    community.create_post("alice", "Sunrise at Varkala cliff", location_tag="Varkala")
    community.create_post("bob", "Tea estates in the mist")

    rows, total = community.list_posts()

    assert total == 2
    assert {post.content for post, _ in rows} == {"Sunrise at Varkala cliff", "Tea estates in the mist"}
    assert [post.location_tag for post in community.list_user_posts("alice")] == ["Varkala"]


def test_empty_post_rejected(users):
    with pytest.raises(InvalidOperation):
        community.create_post("alice", "  ")


def test_rating_is_upserted_per_user(users):
    community.rate_location("alice", "Munnar", 4)
    community.rate_location("alice", "Munnar", 5)
    community.rate_location("bob", "Munnar", 4)

    assert community.get_location_rating("Munnar") == {
        "location_name": "Munnar",
        "average": 4.5,
        "count": 2,
    }


def test_rating_bounds(users):
    with pytest.raises(InvalidOperation):
        community.rate_location("alice", "Munnar", 6)
    with pytest.raises(InvalidOperation):
        community.rate_location("alice", "Munnar", "great")


def test_unrated_location(users):
    assert community.get_location_rating("Bekal")["count"] == 0


def test_post_endpoints(client, users, auth):
    created = client.post(
        "/posts",
        json={"content": "Kathakali tonight in Kochi", "location_tag": "Fort Kochi"},
        headers=auth("carol")
    )
    assert created.status_code == 201

    feed = client.get("/posts", headers=auth("alice")).get_json()
    assert feed["pagination"]["total"] == 1
    assert feed["data"][0]["user"]["id"] == "carol"

    rated = client.post("/locations/Munnar/ratings", json={"rating": 5}, headers=auth("alice"))
    assert rated.get_json()["data"]["summary"]["average"] == 5.0
