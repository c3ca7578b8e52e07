import pytest

from models import Follow, Like, Match
from services import identity, relationships
from utils.errors import InvalidOperation, NotFound


def test_follow_is_idempotent(users):
    edge, created = relationships.follow("alice", "bob")
    again, created_again = relationships.follow("alice", "bob")

    assert created is True
    assert created_again is False
    assert again.id == edge.id
    assert Follow.query.filter_by(follower_id="alice", following_id="bob").count() == 1


def test_follow_is_directional(users):
    relationships.follow("alice", "bob")

    assert relationships.is_following("alice", "bob") is True
    assert relationships.is_following("bob", "alice") is False


def test_cannot_follow_yourself(users):
    with pytest.raises(InvalidOperation, match="Cannot follow yourself"):
        relationships.follow("alice", "alice")


def test_follow_unknown_user(users):
    with pytest.raises(NotFound):
        relationships.follow("alice", "ghost")
    with pytest.raises(NotFound):
        relationships.follow("ghost", "alice")


def test_unfollow(users):
    relationships.follow("alice", "bob")

    assert relationships.unfollow("alice", "bob") is True
    assert relationships.is_following("alice", "bob") is False
    # Absent edge is not an error
    assert relationships.unfollow("alice", "bob") is False


def test_follow_lists(users):
    relationships.follow("alice", "bob")
    relationships.follow("carol", "bob")
    relationships.follow("bob", "alice")

    assert {u.id for u in relationships.list_followers("bob")} == {"alice", "carol"}
    assert {u.id for u in relationships.list_following("bob")} == {"alice"}
    assert relationships.list_following("carol")[0].id == "bob"

    with pytest.raises(NotFound):
        relationships.list_followers("ghost")


def test_one_sided_like_is_not_a_match(users):
    edge, match = relationships.like("alice", "bob")

    assert edge.liker_id == "alice"
    assert match is None
    assert relationships.is_liked("alice", "bob") is True
    assert relationships.is_liked("bob", "alice") is False
    assert Match.query.count() == 0


def test_like_is_idempotent(users):
    relationships.like("alice", "bob")
    relationships.like("alice", "bob")

    assert Like.query.filter_by(liker_id="alice", liked_id="bob").count() == 1


def test_cannot_like_yourself(users):
    with pytest.raises(InvalidOperation):
        relationships.like("bob", "bob")


def test_like_lists(users):
    relationships.like("alice", "bob")
    relationships.like("carol", "bob")

    assert [u.id for u in relationships.list_liked("alice")] == ["bob"]
    assert {u.id for u in relationships.list_liked_by("bob")} == {"alice", "carol"}


def test_unlike_absent_edge_is_noop(users):
    assert relationships.unlike("alice", "bob") is False


def test_user_stats(users):
    relationships.follow("alice", "bob")
    relationships.follow("carol", "bob")
    relationships.follow("bob", "carol")
    relationships.like("alice", "bob")

    assert identity.get_user_stats("bob") == {"followers": 2, "following": 1, "likes": 1}
    assert identity.get_user_stats("alice") == {"followers": 0, "following": 1, "likes": 0}


def test_removing_edges_to_unknown_users(users):
    with pytest.raises(NotFound):
        relationships.unfollow("alice", "ghost")
    with pytest.raises(NotFound):
        relationships.unlike("ghost", "alice")


def test_predicates_on_unknown_users(users):
    with pytest.raises(NotFound):
        relationships.is_following("alice", "ghost")
    with pytest.raises(NotFound):
        relationships.is_liked("ghost", "alice")
