from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from roam.core.errors import PersistenceFailure, ValidationFailure
from roam.db.base import Base
from roam.db.models.event import Event, EventOccurrence
from roam.db.models.town import Town
from roam.domain.schemas.event import (
    UNKNOWN,
    EventDraft,
    Host,
    Location,
    Occurrence,
    Price,
    RecurrenceRule,
)
from roam.services.publish.publisher import publish_event


def _make_session():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, future=True)()


def _draft(**overrides) -> EventDraft:
    values = {
        "title": "Salsa Night",
        "description": "Live band from 9",
        "town": "Cabarete",
        "host": Host(name="Carlos", phone_contact=UNKNOWN),
        "location": Location(name="Lax", address="Playa Cabarete"),
        "price": Price(value=5, currency="USD"),
        "tags": ("dance", "salsa"),
        "occurrences": (
            Occurrence(
                start_ts=datetime(2025, 6, 6, 21, 0),
                end_ts=datetime(2025, 6, 6, 23, 30),
            ),
        ),
    }
    values.update(overrides)
    return EventDraft(**values)


def test_publish_event_persists_and_returns_record() -> None:
    session = _make_session()
    now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    published = publish_event(session, _draft(), now=now)

    rows = session.scalars(select(Event)).all()
    assert len(rows) == 1
    assert published.id == rows[0].id
    assert published.created_at == now
    assert published.title == "Salsa Night"
    assert published.town == "Cabarete"
    assert published.host.name == "Carlos"
    assert published.host.phone_contact is None
    assert published.price.value == 5.0
    assert published.recurrence_rule == RecurrenceRule.ONE_TIME
    assert published.is_on_demand is False
    assert rows[0].host == {"name": "Carlos"}


def test_naive_times_are_localized_to_town_timezone() -> None:
    session = _make_session()

    published = publish_event(session, _draft())

    # Santo Domingo is UTC-4 all year.
    assert published.occurrences[0].start_ts == datetime(2025, 6, 7, 1, 0, tzinfo=timezone.utc)
    assert published.occurrences[0].end_ts == datetime(2025, 6, 7, 3, 30, tzinfo=timezone.utc)


def test_offset_times_are_kept() -> None:
    session = _make_session()
    start = datetime.fromisoformat("2025-06-01T08:00:00-04:00")

    published = publish_event(
        session,
        _draft(town=None, occurrences=(Occurrence(start_ts=start),)),
    )

    assert published.occurrences[0].start_ts == start
    assert published.town is None
    assert session.scalars(select(Town)).all() == []


def test_publish_reuses_existing_town() -> None:
    session = _make_session()

    publish_event(session, _draft())
    publish_event(session, _draft(title="Bachata Night", town="cabarete"))

    towns = session.scalars(select(Town)).all()
    assert len(towns) == 1
    assert towns[0].tz == "America/Santo_Domingo"


def test_incomplete_draft_is_rejected() -> None:
    session = _make_session()

    with pytest.raises(ValidationFailure) as excinfo:
        publish_event(session, _draft(title=UNKNOWN, occurrences=()))

    assert excinfo.value.missing == ["title", "start time"]
    assert session.scalars(select(Event)).all() == []


def test_end_before_start_is_rejected() -> None:
    session = _make_session()
    draft = _draft(
        occurrences=(
            Occurrence(start_ts=datetime(2025, 6, 6, 21, 0), end_ts=datetime(2025, 6, 6, 20, 0)),
        )
    )

    with pytest.raises(ValidationFailure):
        publish_event(session, draft)


def test_storage_errors_become_persistence_failures() -> None:
    session = _make_session()
    EventOccurrence.__table__.drop(session.get_bind())

    with pytest.raises(PersistenceFailure) as excinfo:
        publish_event(session, _draft())

    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert "event_occurrences" in str(excinfo.value)
