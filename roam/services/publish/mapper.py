from __future__ import annotations

from datetime import datetime, timezone

from roam.db.models.event import Event
from roam.domain.schemas.event import (
    Host,
    Link,
    Location,
    Occurrence,
    Price,
    PublishedEvent,
    RecurrenceRule,
)


def event_to_published(event: Event) -> PublishedEvent:
    price = None
    if event.price_value is not None or event.price_text or event.currency:
        price = Price(value=event.price_value, text=event.price_text, currency=event.currency)

    return PublishedEvent(
        id=event.id,
        created_at=_as_utc(event.created_at),
        title=event.title,
        description=event.description,
        price=price,
        town=event.town.name if event.town else None,
        host=Host.model_validate(event.host or {}),
        location=Location.model_validate(event.location or {}),
        tags=list(event.tags or []),
        image_url=event.image_url,
        links=[Link.model_validate(link) for link in event.links or []],
        recurrence_rule=RecurrenceRule(event.recurrence_rule),
        is_on_demand=event.is_on_demand,
        occurrences=[
            Occurrence(
                start_ts=_as_utc(row.start_ts),
                end_ts=_as_utc(row.end_ts) if row.end_ts else None,
            )
            for row in event.occurrences
        ],
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values; everything is written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
