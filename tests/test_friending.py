import pytest

from trackshare.errors import (
    AlreadyFriendsError,
    FriendNotFoundError,
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
    SelfFriendError,
)
from trackshare.models.friend import ACCEPTED, PENDING, REJECTED
from trackshare.services import friending


def test_send_and_accept_request(session, alice, bob):
    request = friending.send_request(session, alice.id, bob.id)
    assert request.status == PENDING

    accepted = friending.accept_request(session, alice.id, bob.id)

    assert accepted.status == ACCEPTED
    assert friending.get_friends(session, alice.id) == [bob.id]
    assert friending.get_friends(session, bob.id) == [alice.id]


def test_cannot_befriend_self(session, alice):
    with pytest.raises(SelfFriendError):
        friending.send_request(session, alice.id, alice.id)


def test_duplicate_pending_request_fails(session, alice, bob):
    friending.send_request(session, alice.id, bob.id)

    with pytest.raises(FriendRequestAlreadyExistsError):
        friending.send_request(session, alice.id, bob.id)
    # Reverse direction is blocked while the first is pending
    with pytest.raises(FriendRequestAlreadyExistsError):
        friending.send_request(session, bob.id, alice.id)


def test_request_after_friendship_fails(session, alice, bob):
    friending.send_request(session, alice.id, bob.id)
    friending.accept_request(session, alice.id, bob.id)

    with pytest.raises(AlreadyFriendsError):
        friending.send_request(session, bob.id, alice.id)


def test_rejected_request_can_be_sent_again(session, alice, bob):
    friending.send_request(session, alice.id, bob.id)
    rejected = friending.reject_request(session, alice.id, bob.id)
    assert rejected.status == REJECTED
    assert friending.get_friends(session, alice.id) == []

    again = friending.send_request(session, alice.id, bob.id)
    assert again.status == PENDING


def test_answer_missing_request(session, alice, bob):
    with pytest.raises(FriendRequestNotFoundError):
        friending.accept_request(session, alice.id, bob.id)
    with pytest.raises(FriendRequestNotFoundError):
        friending.reject_request(session, alice.id, bob.id)
    with pytest.raises(FriendRequestNotFoundError):
        friending.remove_request(session, alice.id, bob.id)


def test_only_recipient_direction_accepts(session, alice, bob):
    friending.send_request(session, alice.id, bob.id)

    with pytest.raises(FriendRequestNotFoundError):
        friending.accept_request(session, bob.id, alice.id)


def test_remove_request(session, alice, bob):
    friending.send_request(session, alice.id, bob.id)
    friending.remove_request(session, alice.id, bob.id)

    assert friending.get_requests(session, bob.id) == []


def test_get_requests_newest_first(session, make_user, alice, bob):
    carol = make_user("carol")
    first = friending.send_request(session, alice.id, bob.id)
    second = friending.send_request(session, carol.id, alice.id)

    assert [r.id for r in friending.get_requests(session, alice.id)] == [second.id, first.id]
    assert [r.id for r in friending.get_requests(session, bob.id)] == [first.id]


def test_remove_friend(session, alice, bob):
    friending.send_request(session, alice.id, bob.id)
    friending.accept_request(session, alice.id, bob.id)

    friending.remove_friend(session, bob.id, alice.id)

    assert friending.get_friends(session, alice.id) == []
    with pytest.raises(FriendNotFoundError):
        friending.remove_friend(session, alice.id, bob.id)
