from __future__ import annotations

from dataclasses import dataclass, field

from roam.domain.schemas.event import EventDraft, is_known
from roam.services.drafting.field_schema import MANDATORY_FIELDS, resolve_field


@dataclass(frozen=True)
class CompletenessResult:
    complete: bool
    missing: list[str] = field(default_factory=list)
    questions: list[str] = field(default_factory=list)


def check_completeness(draft: EventDraft | None) -> CompletenessResult:
    """Report which mandatory fields the draft still lacks, in a fixed order."""
    draft = draft or EventDraft()
    missing: list[str] = []
    questions: list[str] = []
    for mandatory in MANDATORY_FIELDS:
        if is_known(resolve_field(draft, mandatory.path)):
            continue
        missing.append(mandatory.label)
        questions.append(mandatory.question)
    return CompletenessResult(complete=not missing, missing=missing, questions=questions)
