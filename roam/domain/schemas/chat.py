from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from roam.domain.schemas.event import EventDraft


class ConversationState(str, Enum):
    GATHERING = "gathering"
    CONFIRMING = "confirming"
    READY = "ready"


class Intent(str, Enum):
    CREATE_EVENT = "create_event"
    SEARCH = "search"
    CHIT_CHAT = "chit_chat"


class HistoryTurn(BaseModel):
    role: Literal["user", "assistant"]
    text: str


class ExtractionResult(BaseModel):
    intent: Intent
    query: str | None = None
    town: str | None = None
    message: str | None = None
    event: EventDraft | None = None


class FollowUpResponse(BaseModel):
    kind: Literal["follow_up"] = "follow_up"
    draft: EventDraft
    questions: list[str]


class ConfirmResponse(BaseModel):
    kind: Literal["confirm"] = "confirm"
    draft: EventDraft
    message: str


class ReadyResponse(BaseModel):
    kind: Literal["ready"] = "ready"
    draft: EventDraft


class SearchResponse(BaseModel):
    kind: Literal["search"] = "search"
    query: str
    town: str | None = None


class MessageResponse(BaseModel):
    kind: Literal["message"] = "message"
    message: str


class ErrorResponse(BaseModel):
    kind: Literal["error"] = "error"
    reason: str


TurnResponse = Annotated[
    Union[
        FollowUpResponse,
        ConfirmResponse,
        ReadyResponse,
        SearchResponse,
        MessageResponse,
        ErrorResponse,
    ],
    Field(discriminator="kind"),
]
