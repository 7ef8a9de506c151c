from datetime import datetime, timezone

from roam.domain.schemas.event import EventDraft, Host, Occurrence
from roam.services.drafting.field_schema import (
    MANDATORY_FIELDS,
    mandatory_fields_of,
    resolve_field,
)


def test_mandatory_fields_are_declared_in_question_order() -> None:
    assert [field.path for field in MANDATORY_FIELDS] == [
        "title",
        "host.name",
        "location.name",
        "occurrences[0].start_ts",
    ]
    assert mandatory_fields_of(EventDraft()) == {
        "title",
        "host.name",
        "location.name",
        "occurrences[0].start_ts",
    }


def test_resolve_field_walks_nested_paths() -> None:
    start = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
    draft = EventDraft(
        title="Sunset Yoga",
        host=Host(name="Mia"),
        occurrences=(Occurrence(start_ts=start),),
    )

    assert resolve_field(draft, "title") == "Sunset Yoga"
    assert resolve_field(draft, "host.name") == "Mia"
    assert resolve_field(draft, "occurrences[0].start_ts") == start


def test_resolve_field_returns_none_for_missing_parents() -> None:
    draft = EventDraft(title="Sunset Yoga")

    assert resolve_field(draft, "location.name") is None
    assert resolve_field(draft, "occurrences[0].start_ts") is None
    assert resolve_field(draft, "occurrences[3].start_ts") is None
