from fastapi import Depends, HTTPException, status

from roam.core.env import is_confirmation_required
from roam.services.chat.controller import ConversationController
from roam.services.llm.base import ExtractionClient
from roam.services.llm.client import OpenAIExtractionClient


def get_extraction_client() -> ExtractionClient:
    try:
        return OpenAIExtractionClient()
    except EnvironmentError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        )


def get_conversation_controller(
    client: ExtractionClient = Depends(get_extraction_client),
) -> ConversationController:
    return ConversationController(client, require_confirmation=is_confirmation_required())
