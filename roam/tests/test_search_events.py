from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from roam.db.base import Base
from roam.domain.schemas.event import EventDraft, Host, Location, Occurrence
from roam.services.publish.publisher import publish_event
from roam.services.search.events import search_events


def _make_session():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, future=True)()


def _publish(session, title: str, town: str, now: datetime, **extra) -> None:
    draft = EventDraft(
        title=title,
        town=town,
        host=Host(name="Host"),
        location=Location(name="Venue"),
        occurrences=(Occurrence(start_ts=datetime(2025, 7, 1, 18, 0)),),
        **extra,
    )
    publish_event(session, draft, now=now)


def _seed(session) -> None:
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    _publish(session, "Sunset Yoga", "Cabarete", now)
    _publish(session, "Yoga for Kids", "Las Terrenas", now + timedelta(minutes=1))
    _publish(session, "Salsa Night", "Cabarete", now + timedelta(minutes=2), tags=("dance",))
    _publish(
        session,
        "Open Mic",
        "Cabarete",
        now + timedelta(minutes=3),
        description="Poetry and acoustic yoga music",
    )


def test_search_matches_title_and_description_newest_first() -> None:
    session = _make_session()
    _seed(session)

    results = search_events(session, "yoga")

    assert [event.title for event in results] == ["Open Mic", "Yoga for Kids", "Sunset Yoga"]


def test_search_scoped_by_town() -> None:
    session = _make_session()
    _seed(session)

    results = search_events(session, "YOGA", town="las terrenas")

    assert [event.title for event in results] == ["Yoga for Kids"]


def test_search_requires_every_term() -> None:
    session = _make_session()
    _seed(session)

    assert [e.title for e in search_events(session, "sunset yoga")] == ["Sunset Yoga"]


def test_search_matches_tags() -> None:
    session = _make_session()
    _seed(session)

    assert [e.title for e in search_events(session, "dance")] == ["Salsa Night"]


def test_search_respects_limit_and_blank_query() -> None:
    session = _make_session()
    _seed(session)

    assert len(search_events(session, "yoga", limit=1)) == 1
    assert search_events(session, "   ") == []


def test_search_treats_wildcards_literally() -> None:
    session = _make_session()
    _seed(session)

    assert search_events(session, "%") == []


def test_search_matches_accented_tags_and_titles() -> None:
    session = _make_session()
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    _publish(session, "Noche en la playa", "Cabarete", now, tags=("música",))
    _publish(session, "ÚLTIMA FIESTA", "Cabarete", now + timedelta(minutes=1))

    assert [e.title for e in search_events(session, "Música")] == ["Noche en la playa"]
    assert [e.title for e in search_events(session, "última")] == ["ÚLTIMA FIESTA"]
