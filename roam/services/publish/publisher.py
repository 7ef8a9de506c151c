from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from roam.core.errors import PersistenceFailure, ValidationFailure
from roam.db.models.event import Event, EventOccurrence
from roam.db.models.town import get_or_create_town
from roam.domain.schemas.event import EventDraft, PublishedEvent, RecurrenceRule, is_known
from roam.services.drafting.completeness import check_completeness
from roam.services.publish.mapper import event_to_published
from roam.services.towns import get_town_timezone, localize

logger = logging.getLogger(__name__)


def publish_event(
    session: Session,
    draft: EventDraft,
    now: datetime | None = None,
) -> PublishedEvent:
    """Persist a complete draft and return the stored record.

    Mandatory fields are checked again here; callers that skip the conversation's
    ``ready`` gate still cannot store an incomplete event.
    """
    completeness = check_completeness(draft)
    if not completeness.complete:
        raise ValidationFailure(
            f"Event is missing: {', '.join(completeness.missing)}",
            missing=completeness.missing,
        )

    now = now or datetime.now(tz=timezone.utc)
    town_name = draft.town if is_known(draft.town) else None
    occurrences = _finalize_occurrences(draft, town_name)

    try:
        town = get_or_create_town(session, town_name) if town_name else None
        event = Event(
            title=draft.title.strip(),
            description=_known(draft.description),
            price_value=_known(draft.price.value) if draft.price else None,
            price_text=_known(draft.price.text) if draft.price else None,
            currency=_known(draft.price.currency) if draft.price else None,
            town_id=town.id if town else None,
            host=_known_fields(draft.host),
            location=_known_fields(draft.location),
            tags=list(draft.tags),
            search_text=_search_text(draft),
            image_url=_known(draft.image_url),
            links=[link.model_dump() for link in draft.links],
            recurrence_rule=_recurrence(draft).value,
            is_on_demand=bool(draft.is_on_demand),
            created_at=now,
            occurrences=[
                EventOccurrence(start_ts=start_ts, end_ts=end_ts)
                for start_ts, end_ts in occurrences
            ],
        )
        session.add(event)
        session.commit()
        session.refresh(event)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Failed to publish event title=%s: %s", draft.title, exc, exc_info=True)
        raise PersistenceFailure(str(exc)) from exc

    logger.info(
        "Published event id=%s title=%s town=%s occurrences=%s",
        event.id,
        event.title,
        town_name,
        len(occurrences),
    )
    return event_to_published(event)


def _finalize_occurrences(
    draft: EventDraft,
    town_name: str | None,
) -> list[tuple[datetime, datetime | None]]:
    tz = get_town_timezone(town_name)
    finalized: list[tuple[datetime, datetime | None]] = []
    for occurrence in draft.occurrences:
        if not isinstance(occurrence.start_ts, datetime):
            continue
        start_ts = localize(occurrence.start_ts, tz).astimezone(timezone.utc)
        end_ts = None
        if occurrence.end_ts is not None:
            end_ts = localize(occurrence.end_ts, tz).astimezone(timezone.utc)
            if end_ts < start_ts:
                raise ValidationFailure(
                    f"Occurrence ends before it starts: {occurrence.start_ts.isoformat()}",
                    missing=[],
                )
        finalized.append((start_ts, end_ts))
    return finalized


def _recurrence(draft: EventDraft) -> RecurrenceRule:
    if isinstance(draft.recurrence_rule, RecurrenceRule):
        return draft.recurrence_rule
    return RecurrenceRule.ONE_TIME


def _known(value: Any) -> Any:
    return value if is_known(value) else None


def _known_fields(model: BaseModel | None) -> dict[str, Any]:
    if model is None:
        return {}
    return {
        name: getattr(model, name)
        for name in type(model).model_fields
        if is_known(getattr(model, name))
    }


def _search_text(draft: EventDraft) -> str:
    parts = [draft.title, _known(draft.description) or "", *draft.tags]
    return " ".join(" ".join(part.split()) for part in parts if part).lower()
