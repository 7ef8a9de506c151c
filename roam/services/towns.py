from __future__ import annotations

from datetime import datetime
import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from roam.config import settings

logger = logging.getLogger(__name__)

# Towns we already serve. Anything else falls back to the default timezone.
KNOWN_TOWN_TIMEZONES: dict[str, str] = {
    "cabarete": "America/Santo_Domingo",
    "las terrenas": "America/Santo_Domingo",
    "santo domingo": "America/Santo_Domingo",
    "sosua": "America/Santo_Domingo",
    "puerto plata": "America/Santo_Domingo",
    "punta cana": "America/Santo_Domingo",
}


def normalize_town_name(town: str) -> str:
    return " ".join(town.split()).casefold().replace("ú", "u")


def get_town_timezone_name(town: str | None) -> str:
    if town:
        known = KNOWN_TOWN_TIMEZONES.get(normalize_town_name(town))
        if known:
            return known
    return settings.DEFAULT_TIMEZONE


def get_town_timezone(town: str | None) -> ZoneInfo:
    name = get_town_timezone_name(town)
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning("Unknown timezone tz=%s town=%s, using UTC", name, town)
        return ZoneInfo("UTC")


def localize(value: datetime, tz: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value
