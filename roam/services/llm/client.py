from __future__ import annotations

import json
import logging
from typing import Any

from openai import OpenAI, OpenAIError

from roam.config import settings
from roam.core.env import get_required_env
from roam.core.errors import ExtractionFailure
from roam.domain.schemas.chat import ExtractionResult, HistoryTurn
from roam.domain.schemas.event import EventDraft
from roam.services.llm.base import ExtractionClient
from roam.services.llm.parse import parse_extraction_payload

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are Roam AI, an assistant that helps people publish local events and find them. "
    "Return STRICT JSON only, no markdown. Output a JSON object with these keys:\n"
    "- intent: one of create_event, search, chit_chat.\n"
    "- query: for search, the keywords to look for.\n"
    "- town: for search, the town to look in, if the user named one.\n"
    "- message: for chit_chat, a short friendly reply.\n"
    "- event: for create_event, an object with title, description, "
    "price {value, text, currency}, town, host {name, phone_contact, social_handle}, "
    "location {name, address, lat, lng}, tags (list of strings), image_url, "
    "links (list of {url, text}), recurrence_rule (one-time, daily, weekly, monthly, yearly), "
    "is_on_demand (boolean), occurrences (list of {start_ts, end_ts}).\n"
    "Use ISO 8601 for start_ts and end_ts. Include the UTC offset only if the user gave one; "
    "otherwise write local time without an offset.\n"
    "Only fill fields the user actually stated or that appear in the current draft. "
    "If you considered a field but the user gave no value, write the string \"UNKNOWN\". "
    "Omit fields that are irrelevant. Never invent values.\n"
    "When a current draft is provided, the user is continuing to describe that event: "
    "return the fields from their latest message, and restate the full occurrences list "
    "if they change any timing."
)


class OpenAIExtractionClient(ExtractionClient):
    def __init__(
        self,
        client: OpenAI | None = None,
        model: str | None = None,
        history_limit: int | None = None,
    ) -> None:
        if client is None:
            api_key = get_required_env("OPENAI_API_KEY")
            client = OpenAI(api_key=api_key, timeout=settings.OPENAI_TIMEOUT_S)
        self._client = client
        self.model = model or settings.OPENAI_MODEL
        self.history_limit = settings.HISTORY_LIMIT if history_limit is None else history_limit

    def extract(
        self,
        text: str,
        prior_draft: EventDraft | None = None,
        history: list[HistoryTurn] | None = None,
    ) -> ExtractionResult:
        messages = self.build_messages(text, prior_draft=prior_draft, history=history)
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=0.0,
            )
        except OpenAIError as exc:
            logger.error("Extraction request failed model=%s error=%s", self.model, exc)
            raise ExtractionFailure(f"Extraction service unavailable: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionFailure("Extraction service returned an empty reply")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("LLM returned invalid JSON for extraction content=%s", _truncate(content))
            raise ExtractionFailure("Extraction service returned invalid JSON") from exc

        return parse_extraction_payload(data)

    def build_messages(
        self,
        text: str,
        prior_draft: EventDraft | None = None,
        history: list[HistoryTurn] | None = None,
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = [{"role": "system", "content": SYSTEM_PROMPT}]
        if prior_draft is not None and prior_draft != EventDraft():
            draft_json = prior_draft.model_dump_json(exclude_none=True, exclude_defaults=True)
            messages.append({"role": "system", "content": f"Current draft:\n{draft_json}"})

        recent = list(history or [])
        recent = recent[-self.history_limit:] if self.history_limit > 0 else []
        for turn in recent:
            messages.append({"role": turn.role, "content": turn.text})

        messages.append({"role": "user", "content": text})
        return messages


def _truncate(text: str, limit: int = 200) -> str:
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text
