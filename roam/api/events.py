from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from roam.config import settings
from roam.core.errors import PersistenceFailure, ValidationFailure
from roam.db.session import get_session
from roam.domain.schemas.event import EventDraft, PublishedEvent
from roam.services.publish.publisher import publish_event
from roam.services.search.events import search_events

router = APIRouter(prefix="/events")


class PublishRequest(BaseModel):
    event: EventDraft


class SearchResults(BaseModel):
    results: list[PublishedEvent]


@router.post("", response_model=PublishedEvent, status_code=status.HTTP_201_CREATED)
def publish(request: PublishRequest, session: Session = Depends(get_session)) -> PublishedEvent:
    try:
        return publish_event(session, request.event)
    except ValidationFailure as exc:
        raise HTTPException(
            status_code=422,
            detail={"message": str(exc), "missing": exc.missing},
        )
    except PersistenceFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to publish event", "error": str(exc)},
        )


@router.get("/search", response_model=SearchResults)
def search(
    q: str = Query(""),
    town: str | None = None,
    limit: int = Query(settings.SEARCH_LIMIT, ge=1, le=50),
    session: Session = Depends(get_session),
) -> SearchResults:
    if not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query parameter is required",
        )
    return SearchResults(results=search_events(session, q, town=town, limit=limit))
