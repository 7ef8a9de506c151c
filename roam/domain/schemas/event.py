from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import core_schema


class Unknown:
    """Marks a field the extraction client considered but found no value for.

    Distinct from ``None`` (the field was never mentioned). Both count as missing
    when checking completeness; neither overwrites an existing value on merge.
    """

    _instance: Unknown | None = None

    def __new__(cls) -> Unknown:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> Unknown:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Unknown:
        return self

    def __reduce__(self) -> str:
        return "UNKNOWN"

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.is_instance_schema(
            cls,
            serialization=core_schema.plain_serializer_function_ser_schema(lambda _: None),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema: Any, handler: Any) -> dict[str, Any]:
        return {"type": "null"}


UNKNOWN = Unknown()

Text = Union[str, Unknown, None]
Number = Union[float, Unknown, None]


def is_known(value: Any) -> bool:
    if value is None or isinstance(value, Unknown):
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


class RecurrenceRule(str, Enum):
    ONE_TIME = "one-time"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class Price(_FrozenModel):
    value: Number = None
    text: Text = None
    currency: Text = None


class Host(_FrozenModel):
    name: Text = None
    phone_contact: Text = None
    social_handle: Text = None


class Location(_FrozenModel):
    name: Text = None
    address: Text = None
    lat: Number = None
    lng: Number = None


class Link(_FrozenModel):
    url: str
    text: str | None = None


class Occurrence(_FrozenModel):
    start_ts: Union[datetime, Unknown, None] = None
    end_ts: datetime | None = None


class EventDraft(_FrozenModel):
    """An event under construction during a conversation.

    Every field is optional here; which ones must be filled before publishing is
    declared in ``roam.services.drafting.field_schema``.
    """

    title: Text = None
    description: Text = None
    price: Price | None = None
    town: Text = None
    host: Host | None = None
    location: Location | None = None
    tags: tuple[str, ...] = ()
    image_url: Text = None
    links: tuple[Link, ...] = ()
    recurrence_rule: Union[RecurrenceRule, Unknown, None] = None
    is_on_demand: bool | None = None
    occurrences: tuple[Occurrence, ...] = ()


class PublishedEvent(BaseModel):
    id: UUID
    created_at: datetime
    title: str
    description: str | None = None
    price: Price | None = None
    town: str | None = None
    host: Host
    location: Location
    tags: list[str] = Field(default_factory=list)
    image_url: str | None = None
    links: list[Link] = Field(default_factory=list)
    recurrence_rule: RecurrenceRule = RecurrenceRule.ONE_TIME
    is_on_demand: bool = False
    occurrences: list[Occurrence] = Field(default_factory=list)
