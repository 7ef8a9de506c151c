from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from roam.domain.schemas.event import EventDraft


@dataclass(frozen=True)
class MandatoryField:
    path: str
    label: str
    question: str


# Order is the order follow-up questions are asked in.
MANDATORY_FIELDS: tuple[MandatoryField, ...] = (
    MandatoryField(
        path="title",
        label="title",
        question="What is the name of your event?",
    ),
    MandatoryField(
        path="host.name",
        label="host name",
        question="Who is hosting the event?",
    ),
    MandatoryField(
        path="location.name",
        label="location name",
        question="Where will the event take place?",
    ),
    MandatoryField(
        path="occurrences[0].start_ts",
        label="start time",
        question="When does the event start? Please include the date and time.",
    ),
)


def mandatory_fields_of(draft: EventDraft | None = None) -> frozenset[str]:
    return frozenset(field.path for field in MANDATORY_FIELDS)


def resolve_field(draft: EventDraft, path: str) -> Any:
    """Return the value at a dotted path such as ``host.name`` or ``occurrences[0].start_ts``.

    Missing intermediate objects and out-of-range indexes resolve to ``None``.
    """
    current: Any = draft
    for part in path.split("."):
        name, index = _split_index(part)
        current = getattr(current, name, None)
        if index is not None:
            if not current or index >= len(current):
                return None
            current = current[index]
        if current is None:
            return None
    return current


def _split_index(part: str) -> tuple[str, int | None]:
    if part.endswith("]") and "[" in part:
        name, raw_index = part[:-1].split("[", 1)
        return name, int(raw_index)
    return part, None
