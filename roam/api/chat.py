from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from roam.api.deps import get_conversation_controller
from roam.config import settings
from roam.db.session import get_session
from roam.domain.schemas.chat import ConversationState, HistoryTurn, TurnResponse
from roam.domain.schemas.event import EventDraft, PublishedEvent
from roam.services.chat.controller import ConversationController
from roam.services.search.events import search_events

router = APIRouter(prefix="/chat")


class ChatRequest(BaseModel):
    text: str
    draft: EventDraft | None = None
    state: ConversationState = ConversationState.GATHERING
    history: list[HistoryTurn] = Field(default_factory=list)


class ChatReply(BaseModel):
    state: ConversationState
    reply: TurnResponse
    draft: EventDraft
    results: list[PublishedEvent] | None = None


@router.post("", response_model=ChatReply)
def chat_turn(
    request: ChatRequest,
    controller: ConversationController = Depends(get_conversation_controller),
    session: Session = Depends(get_session),
) -> ChatReply:
    if not request.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing user input")

    result = controller.handle_turn(
        request.text,
        draft=request.draft,
        state=request.state,
        history=request.history,
    )

    results = None
    if result.response.kind == "search":
        results = search_events(
            session,
            result.response.query,
            town=result.response.town,
            limit=settings.SEARCH_LIMIT,
        )
    return ChatReply(
        state=result.state,
        reply=result.response,
        draft=result.draft,
        results=results,
    )
