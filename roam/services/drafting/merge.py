from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from roam.domain.schemas.event import (
    EventDraft,
    Host,
    Location,
    Occurrence,
    is_known,
)
from roam.services.llm.parse import parse_event

ModelT = TypeVar("ModelT", Host, Location)

_SCALAR_FIELDS = (
    "title",
    "description",
    "town",
    "image_url",
    "recurrence_rule",
    "is_on_demand",
)
# Restating these replaces the previous list instead of extending it.
_LIST_FIELDS = ("tags", "links")


def merge_drafts(
    previous: EventDraft | None,
    incoming: EventDraft | Mapping[str, Any] | None,
) -> EventDraft:
    """Fold a new extraction into the draft built so far.

    The latest concrete statement wins. Unknown or absent incoming values keep what
    ``previous`` already had. Neither argument is modified; a new draft is returned.
    A mapping ``incoming`` is read as a raw extraction payload, so sentinel strings
    such as ``"UNKNOWN"`` count as unknown rather than as values.
    """
    base = previous or EventDraft()
    if incoming is None:
        return base
    if not isinstance(incoming, EventDraft):
        incoming = parse_event(dict(incoming))

    updates: dict[str, Any] = {}

    for name in _SCALAR_FIELDS:
        value = getattr(incoming, name)
        if is_known(value):
            updates[name] = value.strip() if type(value) is str else value

    for name in _LIST_FIELDS:
        values = getattr(incoming, name)
        if values:
            updates[name] = tuple(values)

    if _has_known_part(incoming.price):
        updates["price"] = incoming.price

    host = _merge_named(base.host, incoming.host)
    if host is not base.host:
        updates["host"] = host

    location = _merge_named(base.location, incoming.location)
    if location is not base.location:
        updates["location"] = location

    occurrences = _resolved_occurrences(incoming.occurrences)
    if occurrences:
        updates["occurrences"] = occurrences

    if not updates:
        return base
    return base.model_copy(update=updates)


def _has_known_part(model: BaseModel | None) -> bool:
    if model is None:
        return False
    return any(is_known(getattr(model, name)) for name in type(model).model_fields)


def _merge_named(previous: ModelT | None, incoming: ModelT | None) -> ModelT | None:
    if not _has_known_part(incoming):
        return previous
    if previous is None:
        return incoming

    # A different name means a different host or venue; its old details are stale.
    if is_known(incoming.name) and is_known(previous.name):
        if incoming.name.strip().casefold() != previous.name.strip().casefold():
            return incoming

    updates = {
        name: getattr(incoming, name)
        for name in type(incoming).model_fields
        if is_known(getattr(incoming, name))
    }
    return previous.model_copy(update=updates)


def _resolved_occurrences(occurrences: tuple[Occurrence, ...]) -> tuple[Occurrence, ...]:
    return tuple(item for item in occurrences if is_known(item.start_ts))
