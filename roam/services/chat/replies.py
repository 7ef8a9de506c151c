from __future__ import annotations

import re
from enum import Enum

from roam.domain.schemas.event import EventDraft, is_known

_WORD_RE = re.compile(r"[a-záéíóúñ']+")

_AFFIRMATIVE_WORDS = {
    "yes",
    "y",
    "yeah",
    "yep",
    "yup",
    "sure",
    "ok",
    "okay",
    "correct",
    "confirm",
    "confirmed",
    "publish",
    "perfect",
    "great",
    "si",
    "sí",
    "dale",
    "claro",
}
_AFFIRMATIVE_PHRASES = ("looks good", "go ahead", "sounds good", "that's right", "all good")
_NEGATIVE_WORDS = {"no", "nope", "nah", "wrong", "incorrect", "change", "cancel", "wait"}
_NEGATIVE_PHRASES = ("not quite", "not right", "hold on")
# An affirmative that also carries one of these is a correction, not a confirmation.
_HEDGE_WORDS = {"but", "except", "change", "instead", "actually"}


class ConfirmationReply(str, Enum):
    AFFIRM = "affirm"
    DENY = "deny"


def classify_confirmation(text: str) -> ConfirmationReply | None:
    normalized = " ".join(_WORD_RE.findall(text.lower()))
    words = normalized.split()
    if not words:
        return None

    if words[0] in _NEGATIVE_WORDS or any(p in normalized for p in _NEGATIVE_PHRASES):
        return ConfirmationReply.DENY

    affirmative = words[0] in _AFFIRMATIVE_WORDS or any(
        normalized.startswith(p) for p in _AFFIRMATIVE_PHRASES
    )
    if affirmative and not _HEDGE_WORDS.intersection(words):
        return ConfirmationReply.AFFIRM
    return None


def summarize_draft(draft: EventDraft) -> str:
    lines: list[str] = []
    if is_known(draft.title):
        lines.append(f"Title: {draft.title}")
    if draft.host and is_known(draft.host.name):
        lines.append(f"Host: {draft.host.name}")
    if draft.location and is_known(draft.location.name):
        where = draft.location.name
        if is_known(draft.location.address):
            where = f"{where} ({draft.location.address})"
        lines.append(f"Where: {where}")
    if is_known(draft.town):
        lines.append(f"Town: {draft.town}")
    for occurrence in draft.occurrences:
        if not is_known(occurrence.start_ts):
            continue
        when = occurrence.start_ts.isoformat()
        if occurrence.end_ts:
            when = f"{when} to {occurrence.end_ts.isoformat()}"
        lines.append(f"When: {when}")
    if is_known(draft.recurrence_rule):
        lines.append(f"Repeats: {draft.recurrence_rule.value}")
    if draft.price:
        if is_known(draft.price.text):
            lines.append(f"Price: {draft.price.text}")
        elif is_known(draft.price.value):
            currency = draft.price.currency if is_known(draft.price.currency) else ""
            lines.append(f"Price: {draft.price.value:g} {currency}".rstrip())
    if draft.tags:
        lines.append(f"Tags: {', '.join(draft.tags)}")
    if is_known(draft.description):
        lines.append(f"Description: {draft.description}")
    return "\n".join(lines)
