from contextlib import nullcontext
from datetime import date, datetime, timedelta

from trackshare.models import Competition
from trackshare.services import competing, fanout, joining, tracking


def make_ended(session, owner, name):
    competition = Competition(name=name, owner_id=owner.id, end_date=datetime.utcnow() - timedelta(days=1))
    session.add(competition)
    session.commit()
    session.refresh(competition)
    return competition


def test_fan_out_skips_ended_competitions(session, alice):
    active = competing.create(session, alice.id, "A", datetime.utcnow() + timedelta(days=7))
    ended = make_ended(session, alice, "B")
    joining.join(session, alice.id, active.id)
    joining.join(session, alice.id, ended.id)
    data_point = tracking.log(session, alice.id, date(2024, 3, 1), 42)

    report = fanout.fan_out_data_point(session, alice.id, data_point.id)

    assert report.delivered == [active.id]
    assert report.failed == [ended.id]
    assert "has already ended" in report.outcomes[1].error
    assert competing.get_data_ids(session, active.id) == [data_point.id]
    assert competing.get_data_ids(session, ended.id) == []
    # The data point itself is untouched by the failure
    assert tracking.get_data_point(session, data_point.id).score == 42


def test_fan_out_only_reaches_the_loggers_competitions(session, alice, bob):
    mine = competing.create(session, alice.id, "Mine", datetime.utcnow() + timedelta(days=7))
    theirs = competing.create(session, bob.id, "Theirs", datetime.utcnow() + timedelta(days=7))
    joining.join(session, alice.id, mine.id)
    joining.join(session, bob.id, theirs.id)
    data_point = tracking.log(session, alice.id, date(2024, 3, 1), 7)

    report = fanout.fan_out_data_point(session, alice.id, data_point.id)

    assert report.delivered == [mine.id]
    assert competing.get_data_ids(session, theirs.id) == []


def test_fan_out_without_memberships(session, alice):
    data_point = tracking.log(session, alice.id, date(2024, 3, 1), 7)

    report = fanout.fan_out_data_point(session, alice.id, data_point.id)

    assert report.outcomes == []


def test_run_fan_out_hands_report_to_sink(session, alice):
    active = competing.create(session, alice.id, "A", datetime.utcnow() + timedelta(days=7))
    joining.join(session, alice.id, active.id)
    data_point = tracking.log(session, alice.id, date(2024, 3, 1), 42)
    received = []

    report = fanout.run_fan_out(lambda: nullcontext(session), alice.id, data_point.id, sink=received.append)

    assert received == [report]
    assert report.data_point_id == data_point.id
    assert report.delivered == [active.id]
