import itertools

from models import db, Like, Match, ChatRoom
from services import matching, relationships


def _match_exists(a, b):
    return matching.is_mutual_like(a, b)


def _both_liked(a, b):
    return relationships.is_liked(a, b) and relationships.is_liked(b, a)


def test_mutual_like_creates_match_and_romantic_room(users):
    relationships.like("alice", "bob")
    _, match = relationships.like("bob", "alice")

    assert match is not None
    assert (match.user1_id, match.user2_id) == ("alice", "bob")
    assert matching.check_mutual("alice", "bob") is True

    room = ChatRoom.query.filter_by(participant1_id="alice", participant2_id="bob").one()
    assert room.is_romantic is True
    # The like that completed the match started romantic mode
    assert room.romantic_started_by == "bob"
    assert room.romantic_started_at is not None
    assert room.twenty_day_message_sent is False


def test_match_record_follows_like_edges(users):
    """After every like/unlike the match row exists iff both edges do"""
    operations = [
        ("like", "alice", "bob"),
        ("like", "bob", "alice"),
        ("unlike", "alice", "bob"),
        ("like", "alice", "bob"),
        ("unlike", "bob", "alice"),
        ("unlike", "alice", "bob"),
        ("like", "bob", "alice"),
        ("like", "alice", "bob"),
        ("like", "alice", "bob"),
    ]

    for op, actor, target in operations:
        getattr(relationships, op)(actor, target)
        assert _match_exists("alice", "bob") == _both_liked("alice", "bob")
        assert Match.query.count() <= 1


def test_unlike_keeps_room_romantic(users):
    relationships.like("alice", "bob")
    relationships.like("bob", "alice")

    relationships.unlike("alice", "bob")
    relationships.unlike("bob", "alice")

    assert Match.query.count() == 0
    room = ChatRoom.query.filter_by(participant1_id="alice", participant2_id="bob").one()
    assert room.is_romantic is True


def test_repeated_like_repairs_missing_match(users):
    # Both edges stored but the match step never ran
    db.session.add_all([
        Like(liker_id="alice", liked_id="carol"),
        Like(liker_id="carol", liked_id="alice"),
    ])
    db.session.commit()
    assert Match.query.count() == 0

    _, match = relationships.like("carol", "alice")

    assert match is not None
    assert ChatRoom.query.one().is_romantic is True


def test_list_matches(users):
    for a, b in itertools.permutations(["alice", "bob"]):
        relationships.like(a, b)
    for a, b in itertools.permutations(["alice", "carol"]):
        relationships.like(a, b)
    relationships.like("bob", "carol")

    alice_matches = matching.list_matches("alice")
    assert {entry["user"].id for entry in alice_matches} == {"bob", "carol"}

    bob_matches = matching.list_matches("bob")
    assert [entry["user"].id for entry in bob_matches] == ["alice"]
    assert bob_matches[0]["match"].match_score == matching.MATCH_SCORE


def test_match_insert_conflict_returns_existing_match(users, monkeypatch):
    relationships.like("alice", "bob")
    _, existing = relationships.like("bob", "alice")
    existing_id = existing.id

    real_find_match = matching._find_match
    calls = []

    def stale_find_match(user_a, user_b):
        # First lookup misses, as if the other like inserted concurrently
        calls.append((user_a, user_b))
        if len(calls) == 1:
            return None
        return real_find_match(user_a, user_b)

    monkeypatch.setattr(matching, "_find_match", stale_find_match)

    _, match = relationships.like("alice", "bob")

    assert len(calls) == 2
    assert match.id == existing_id
    assert Match.query.count() == 1
    assert ChatRoom.query.count() == 1
