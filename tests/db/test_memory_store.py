from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from hazard_watch.db.models import (
    HazardType,
    Location,
    ReportStatus,
    Severity,
    UserRecord,
    WeatherAlertRecord,
    WeatherAlertType,
)
from hazard_watch.db.store import (
    InMemoryHazardStore,
    InMemoryUserStore,
    InMemoryWeatherAlertStore,
)


def test_add_assigns_sequential_ids(hazard_store: InMemoryHazardStore, make_report) -> None:
    first = hazard_store.add(make_report(report_id=""))
    second = hazard_store.add(make_report(report_id=""))

    assert (first.id, second.id) == ("1", "2")
    assert len(hazard_store) == 2


def test_reads_return_copies(hazard_store: InMemoryHazardStore, make_report) -> None:
    stored = hazard_store.add(make_report())
    stored.verification_reasons.append("tampered")
    fetched = hazard_store.find_by_id(stored.id)
    assert fetched is not None
    fetched.status = ReportStatus.REJECTED

    again = hazard_store.find_by_id(stored.id)

    assert again is not None
    assert again.status == ReportStatus.PENDING
    assert again.verification_reasons == []


def test_update_changes_fields(hazard_store: InMemoryHazardStore, make_report) -> None:
    stored = hazard_store.add(make_report())

    updated = hazard_store.update(stored.id, status=ReportStatus.VERIFIED, verification_reasons=["ok"])

    assert updated is not None
    assert updated.status == ReportStatus.VERIFIED
    assert hazard_store.find_by_id(stored.id).verification_reasons == ["ok"]


@pytest.mark.parametrize("field", ["id", "submitter_id", "created_at"])
def test_update_refuses_immutable_fields(hazard_store: InMemoryHazardStore, make_report, field: str) -> None:
    stored = hazard_store.add(make_report())

    with pytest.raises(ValueError):
        hazard_store.update(stored.id, **{field: "x"})


def test_update_unknown_report_returns_none(hazard_store: InMemoryHazardStore) -> None:
    assert hazard_store.update("404", status=ReportStatus.VERIFIED) is None


def test_list_is_newest_first_with_filters(hazard_store: InMemoryHazardStore, make_report) -> None:
    old_flood = hazard_store.add(make_report(age=timedelta(hours=3)))
    fire = hazard_store.add(make_report(hazard_type=HazardType.FIRE, age=timedelta(hours=2)))
    new_flood = hazard_store.add(make_report(age=timedelta(hours=1)))
    hazard_store.update(fire.id, status=ReportStatus.VERIFIED)

    assert [r.id for r in hazard_store.list()] == [new_flood.id, fire.id, old_flood.id]
    assert [r.id for r in hazard_store.list(hazard_type=HazardType.FLOOD)] == [new_flood.id, old_flood.id]
    assert [r.id for r in hazard_store.list(status=ReportStatus.VERIFIED)] == [fire.id]
    assert [r.id for r in hazard_store.list(limit=1)] == [new_flood.id]


def test_find_by_submitter(hazard_store: InMemoryHazardStore, make_report) -> None:
    mine = hazard_store.add(make_report(submitter_id="a"))
    hazard_store.add(make_report(submitter_id="b"))

    assert [r.id for r in hazard_store.find_by_submitter("a")] == [mine.id]
    assert hazard_store.find_by_submitter("nobody") == []


def test_window_query_bounds_are_inclusive(hazard_store: InMemoryHazardStore, make_report, clock) -> None:
    now = clock.now()
    edge = hazard_store.add(make_report(age=timedelta(hours=1)))
    hazard_store.add(make_report(age=timedelta(hours=2)))
    hazard_store.add(make_report(hazard_type=HazardType.FIRE))

    found = hazard_store.find_by_submitter_and_type("user-1", HazardType.FLOOD, now - timedelta(hours=1), now)

    assert [r.id for r in found] == [edge.id]


def _user(email: str) -> UserRecord:
    return UserRecord(
        id="",
        email=email,
        name="Asha",
        phone="+919812345678",
        location=Location(latitude=19.07, longitude=72.87, address="Mumbai"),
        password_hash="x",
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def test_user_store_email_lookup_is_case_insensitive() -> None:
    users = InMemoryUserStore()
    stored = users.add(_user("asha@example.com"))

    assert users.find_by_email(" ASHA@example.com ").id == stored.id
    assert users.find_by_email("other@example.com") is None


def test_user_store_update() -> None:
    users = InMemoryUserStore()
    stored = users.add(_user("asha@example.com"))

    assert users.update(stored.id, name="Asha K").name == "Asha K"
    assert users.update("missing", name="x") is None
    with pytest.raises(ValueError):
        users.update(stored.id, id="9")


def test_alert_store_active_window(clock) -> None:
    now = clock.now()
    alerts = InMemoryWeatherAlertStore()

    def _alert(start: datetime, end: datetime, created: datetime) -> WeatherAlertRecord:
        return WeatherAlertRecord(
            id="",
            type=WeatherAlertType.HEAVY_RAIN,
            title="Heavy rain",
            description="Heavy rain expected",
            severity=Severity.MEDIUM,
            location=Location(latitude=19.07, longitude=72.87, address="Mumbai"),
            valid_from=start,
            valid_until=end,
            created_at=created,
        )

    active = alerts.add(_alert(now - timedelta(hours=1), now + timedelta(hours=1), now - timedelta(hours=1)))
    expired = alerts.add(_alert(now - timedelta(days=2), now - timedelta(days=1), now - timedelta(days=2)))
    upcoming = alerts.add(_alert(now + timedelta(hours=1), now + timedelta(hours=5), now))

    assert [a.id for a in alerts.list_active(now)] == [active.id]
    assert [a.id for a in alerts.list_all()] == [upcoming.id, active.id, expired.id]


def test_naive_and_aware_timestamps_mix(hazard_store: InMemoryHazardStore, make_report, clock) -> None:
    now = clock.now()
    naive = hazard_store.add(make_report(created_at=(now - timedelta(minutes=30)).replace(tzinfo=None)))
    aware = hazard_store.add(make_report())

    found = hazard_store.find_by_submitter_and_type("user-1", HazardType.FLOOD, now - timedelta(hours=1), now)

    assert {r.id for r in found} == {naive.id, aware.id}
    assert [r.id for r in hazard_store.list()] == [aware.id, naive.id]
