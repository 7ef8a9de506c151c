from __future__ import annotations

import logging

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session, selectinload

from roam.db.models.event import Event
from roam.db.models.town import Town
from roam.domain.schemas.event import PublishedEvent
from roam.services.publish.mapper import event_to_published

logger = logging.getLogger(__name__)


def search_events(
    session: Session,
    query: str,
    town: str | None = None,
    limit: int = 10,
) -> list[PublishedEvent]:
    """Keyword search over published events.

    Every whitespace-separated term must appear in the title, description or tags
    (case-insensitive). Results are newest first.
    """
    terms = [term.lower() for term in query.split() if term.strip()]
    if not terms:
        return []

    conditions = [_term_matches(term) for term in terms]
    stmt = (
        select(Event)
        .options(selectinload(Event.occurrences), selectinload(Event.town))
        .where(and_(*conditions))
    )
    if town and town.strip():
        stmt = stmt.join(Town, Town.id == Event.town_id).where(
            func.lower(Town.name) == " ".join(town.split()).lower()
        )
    stmt = stmt.order_by(Event.created_at.desc()).limit(limit)

    events = session.scalars(stmt).all()
    logger.info("Search query=%s town=%s results=%s", query, town, len(events))
    return [event_to_published(event) for event in events]


def _term_matches(term: str):
    return Event.search_text.like(f"%{_escape_like(term)}%", escape="\\")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
