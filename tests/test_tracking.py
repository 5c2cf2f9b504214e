from datetime import date

import pytest

from trackshare.errors import DataOwnerMismatchError, NotFoundError
from trackshare.services import tracking
from trackshare.services.tracking import SortOption


@pytest.fixture(name="logged")
def logged_fixture(session, alice, bob):
    """Five data points across two users, in logging order."""
    return [
        tracking.log(session, alice.id, date(2024, 5, 1), 10),
        tracking.log(session, bob.id, date(2024, 5, 2), 30),
        tracking.log(session, alice.id, date(2024, 5, 3), 20),
        tracking.log(session, bob.id, date(2024, 5, 3), 20),
        tracking.log(session, alice.id, date(2024, 5, 10), 5),
    ]


def ids(data):
    return [d.id for d in data]


def test_log_creates_data_point(session, alice):
    data_point = tracking.log(session, alice.id, date(2024, 1, 1), 42)

    assert data_point.id is not None
    assert data_point.user_id == alice.id
    assert data_point.score == 42
    assert data_point.created_at is not None


def test_get_data_without_filters_is_most_recent_first(session, logged):
    assert ids(tracking.get_data(session)) == ids(reversed(logged))


def test_get_data_by_user(session, alice, logged):
    assert ids(tracking.get_data(session, user_id=alice.id)) == [logged[4].id, logged[2].id, logged[0].id]


def test_get_data_by_exact_date(session, logged):
    assert ids(tracking.get_data(session, day=date(2024, 5, 3))) == [logged[3].id, logged[2].id]


def test_get_data_by_inclusive_range(session, logged):
    data = tracking.get_data(session, date_range=(date(2024, 5, 2), date(2024, 5, 3)))
    assert ids(data) == [logged[3].id, logged[2].id, logged[1].id]


def test_filters_combine(session, bob, logged):
    data = tracking.get_data(session, user_id=bob.id, date_range=(date(2024, 5, 1), date(2024, 5, 2)))
    assert ids(data) == [logged[1].id]


def test_sort_by_score_keeps_recent_first_on_ties(session, logged):
    data = tracking.get_data(session, sort=SortOption.SCORE)
    assert [d.score for d in data] == [30, 20, 20, 10, 5]
    # Both 20s logged on the same day: the later one comes first
    assert ids(data)[1:3] == [logged[3].id, logged[2].id]


def test_sort_by_date(session, logged):
    data = tracking.get_data(session, sort=SortOption.DATE)
    assert [d.date for d in data] == sorted((d.date for d in logged), reverse=True)


def test_update_is_partial(session, alice):
    data_point = tracking.log(session, alice.id, date(2024, 1, 1), 1)
    created_update = data_point.updated_at

    updated = tracking.update(session, data_point.id, score=9)

    assert updated.score == 9
    assert updated.date == date(2024, 1, 1)
    assert updated.updated_at >= created_update


def test_delete(session, alice):
    data_point = tracking.log(session, alice.id, date(2024, 1, 1), 1)
    tracking.delete(session, data_point.id)

    with pytest.raises(NotFoundError):
        tracking.get_data_point(session, data_point.id)


def test_assert_user_is_owner(session, alice, bob):
    data_point = tracking.log(session, alice.id, date(2024, 1, 1), 1)

    tracking.assert_user_is_owner(session, data_point.id, alice.id)
    with pytest.raises(DataOwnerMismatchError):
        tracking.assert_user_is_owner(session, data_point.id, bob.id)
    with pytest.raises(NotFoundError):
        tracking.assert_user_is_owner(session, 12345, alice.id)


def test_redact_user_drops_owner_only():
    shaped = {"id": 1, "user": "alice", "date": date(2024, 1, 1), "score": 3}

    redacted = tracking.redact_user(shaped)

    assert "user" not in redacted
    assert redacted["score"] == 3
    assert shaped["user"] == "alice"
