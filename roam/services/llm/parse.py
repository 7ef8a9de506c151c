from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

from roam.core.errors import ExtractionFailure
from roam.core.urls import canonicalize_url, looks_like_url
from roam.domain.schemas.chat import ExtractionResult, Intent
from roam.domain.schemas.event import (
    UNKNOWN,
    EventDraft,
    Host,
    Link,
    Location,
    Occurrence,
    Price,
    RecurrenceRule,
    Unknown,
)

logger = logging.getLogger(__name__)

SENTINEL_VALUES = {
    "unknown",
    "missing",
    "n/a",
    "na",
    "none",
    "null",
    "tbd",
    "tba",
    "?",
    "not specified",
    "not provided",
}

INTENT_ALIASES = {
    "create_event": Intent.CREATE_EVENT,
    "create": Intent.CREATE_EVENT,
    "event_creation": Intent.CREATE_EVENT,
    "search": Intent.SEARCH,
    "search_events": Intent.SEARCH,
    "chit_chat": Intent.CHIT_CHAT,
    "message": Intent.CHIT_CHAT,
    "chat": Intent.CHIT_CHAT,
}

RECURRENCE_ALIASES = {
    "one-time": RecurrenceRule.ONE_TIME,
    "one_time": RecurrenceRule.ONE_TIME,
    "onetime": RecurrenceRule.ONE_TIME,
    "once": RecurrenceRule.ONE_TIME,
    "single": RecurrenceRule.ONE_TIME,
    "daily": RecurrenceRule.DAILY,
    "weekly": RecurrenceRule.WEEKLY,
    "monthly": RecurrenceRule.MONTHLY,
    "yearly": RecurrenceRule.YEARLY,
    "annually": RecurrenceRule.YEARLY,
    "annual": RecurrenceRule.YEARLY,
}

Scalar = str | Unknown | None


def parse_extraction_payload(data: Any) -> ExtractionResult:
    """Validate raw model output into an ``ExtractionResult``.

    Raises ``ExtractionFailure`` when the payload cannot be trusted: not an object,
    an event intent without an event, or a search intent without a query. An intent
    we do not recognize is downgraded to chit-chat instead of failing.
    """
    if not isinstance(data, dict):
        raise ExtractionFailure("Extraction payload is not a JSON object")

    raw_intent = _as_str(data.get("intent") or data.get("type")).lower()
    intent = INTENT_ALIASES.get(raw_intent)
    if intent is None:
        logger.info("Unrecognized intent=%s, treating as chit_chat", raw_intent or "<empty>")
        intent = Intent.CHIT_CHAT

    message = _as_str(data.get("message")) or None

    if intent == Intent.CREATE_EVENT:
        event = data.get("event")
        if not isinstance(event, dict):
            raise ExtractionFailure("Event intent returned without an event object")
        return ExtractionResult(intent=intent, event=parse_event(event), message=message)

    if intent == Intent.SEARCH:
        query = _as_str(data.get("query"))
        if not query or _is_sentinel(query):
            raise ExtractionFailure("Search intent returned without a query")
        town = _text(data.get("town"))
        return ExtractionResult(
            intent=intent,
            query=query,
            town=town if isinstance(town, str) else None,
        )

    return ExtractionResult(intent=Intent.CHIT_CHAT, message=message)


def parse_event(raw: dict[str, Any]) -> EventDraft:
    return EventDraft(
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        price=_parse_price(raw),
        town=_text(raw.get("town")),
        host=_parse_host(raw.get("host")),
        location=_parse_location(raw.get("location")),
        tags=_parse_tags(raw.get("tags")),
        image_url=_url(raw.get("image_url")),
        links=_parse_links(raw.get("links")),
        recurrence_rule=_parse_recurrence(raw.get("recurrence_rule")),
        is_on_demand=_as_bool(raw.get("is_on_demand")),
        occurrences=_parse_occurrences(raw.get("occurrences")),
    )


def _parse_price(raw: dict[str, Any]) -> Price | None:
    nested = raw.get("price")
    if isinstance(nested, dict):
        value, text, currency = nested.get("value"), nested.get("text"), nested.get("currency")
    else:
        # Flat keys used by older prompt revisions.
        value = raw.get("price_value", nested if isinstance(nested, (int, float)) else None)
        text = raw.get("price_text", nested if isinstance(nested, str) else None)
        currency = raw.get("currency")

    price = Price(value=_number(value), text=_text(text), currency=_text(currency))
    if price.value is None and price.text is None and price.currency is None:
        return None
    if isinstance(price.currency, str):
        price = price.model_copy(update={"currency": price.currency.upper()})
    return price


def _parse_host(raw: Any) -> Host | None:
    if isinstance(raw, str):
        return Host(name=_text(raw))
    if not isinstance(raw, dict):
        return None
    return Host(
        name=_text(raw.get("name")),
        phone_contact=_text(
            _first_present(raw, "phone_contact", "phone_whatsapp", "phone", "whatsapp")
        ),
        social_handle=_text(_first_present(raw, "social_handle", "instagram", "handle")),
    )


def _parse_location(raw: Any) -> Location | None:
    if isinstance(raw, str):
        return Location(name=_text(raw))
    if not isinstance(raw, dict):
        return None
    return Location(
        name=_text(raw.get("name")),
        address=_text(raw.get("address")),
        lat=_number(raw.get("lat")),
        lng=_number(_first_present(raw, "lng", "lon", "long")),
    )


def _parse_tags(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, list):
        return ()

    tags: list[str] = []
    seen: set[str] = set()
    for item in raw:
        tag = _text(item)
        if not isinstance(tag, str):
            continue
        key = tag.casefold()
        if key in seen:
            continue
        seen.add(key)
        tags.append(tag)
    return tuple(tags)


def _parse_links(raw: Any) -> tuple[Link, ...]:
    if not isinstance(raw, list):
        return ()

    links: list[Link] = []
    for item in raw:
        if isinstance(item, str):
            url, text = item, None
        elif isinstance(item, dict):
            url, text = item.get("url"), item.get("text")
        else:
            continue
        cleaned = _url(url)
        if not isinstance(cleaned, str):
            continue
        label = _text(text)
        links.append(Link(url=cleaned, text=label if isinstance(label, str) else None))
    return tuple(links)


def _parse_recurrence(raw: Any) -> RecurrenceRule | Unknown | None:
    value = _text(raw)
    if not isinstance(value, str):
        return value
    key = value.lower().replace("rrule:", "").replace("freq=", "").split(";")[0].strip()
    rule = RECURRENCE_ALIASES.get(key)
    if rule is None:
        logger.info("Unrecognized recurrence_rule=%s", value)
        return UNKNOWN
    return rule


def _parse_occurrences(raw: Any) -> tuple[Occurrence, ...]:
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        return ()

    occurrences: list[Occurrence] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        start = _timestamp(_first_present(item, "start_ts", "start_time", "start"))
        end = _timestamp(_first_present(item, "end_ts", "end_time", "end"))
        end_ts = end if isinstance(end, datetime) else None
        if isinstance(start, datetime) and end_ts is not None and not _ends_after(start, end_ts):
            logger.info("Dropping end_ts=%s before start_ts=%s", end_ts, start)
            end_ts = None
        occurrences.append(Occurrence(start_ts=start, end_ts=end_ts))
    return tuple(occurrences)


def _ends_after(start: datetime, end: datetime) -> bool:
    if (start.tzinfo is None) != (end.tzinfo is None):
        return True
    return end > start


def _first_present(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _is_sentinel(value: str) -> bool:
    return value.strip().lower() in SENTINEL_VALUES


def _text(value: Any) -> Scalar:
    if isinstance(value, Unknown):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    cleaned = _as_str(value)
    if not cleaned:
        return None
    if _is_sentinel(cleaned):
        return UNKNOWN
    return cleaned


def _url(value: Any) -> Scalar:
    text = _text(value)
    if not isinstance(text, str):
        return text
    if not looks_like_url(text):
        return UNKNOWN
    return canonicalize_url(text)


def _number(value: Any) -> float | Unknown | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = _text(value)
    if not isinstance(text, str):
        return text
    try:
        return float(text.replace(",", ""))
    except ValueError:
        return UNKNOWN


def _as_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    text = _as_str(value).lower()
    if text in {"true", "yes", "1"}:
        return True
    if text in {"false", "no", "0"}:
        return False
    return None


def _timestamp(value: Any) -> datetime | Unknown | None:
    if isinstance(value, datetime):
        return value
    text = _text(value)
    if not isinstance(text, str):
        return text
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return UNKNOWN
