from __future__ import annotations

from dataclasses import dataclass
import logging

from roam.core.errors import ExtractionFailure
from roam.domain.schemas.chat import (
    ConfirmResponse,
    ConversationState,
    ErrorResponse,
    ExtractionResult,
    FollowUpResponse,
    HistoryTurn,
    Intent,
    MessageResponse,
    ReadyResponse,
    SearchResponse,
    TurnResponse,
)
from roam.domain.schemas.event import EventDraft
from roam.services.chat.replies import ConfirmationReply, classify_confirmation, summarize_draft
from roam.services.drafting.completeness import check_completeness
from roam.services.drafting.merge import merge_drafts
from roam.services.llm.base import ExtractionClient
from roam.utils.timing import Timer, TurnStats

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = (
    "I can help you create an event or find one. "
    "Tell me about your event, or what you are looking for."
)
CHANGE_QUESTION = "What would you like to change?"


@dataclass(frozen=True)
class TurnResult:
    state: ConversationState
    response: TurnResponse
    draft: EventDraft


class ConversationController:
    """Runs one conversation turn: extract, merge, check, and pick a reply.

    The controller keeps no per-conversation state of its own. The caller passes the
    current draft and state in and stores whatever comes back.
    """

    def __init__(
        self,
        extraction_client: ExtractionClient,
        require_confirmation: bool = False,
    ) -> None:
        self._client = extraction_client
        self.require_confirmation = require_confirmation

    def handle_turn(
        self,
        text: str,
        draft: EventDraft | None = None,
        state: ConversationState = ConversationState.GATHERING,
        history: list[HistoryTurn] | None = None,
    ) -> TurnResult:
        draft = draft or EventDraft()
        if state == ConversationState.READY:
            # The caller never published; keep collecting on the same draft.
            state = ConversationState.GATHERING

        stats = TurnStats(state_before=state.value)
        result = self._run_turn(text, draft, state, history, stats)
        stats.state_after = result.state.value
        stats.kind = result.response.kind
        stats.log_status(logger)
        return result

    def _run_turn(
        self,
        text: str,
        draft: EventDraft,
        state: ConversationState,
        history: list[HistoryTurn] | None,
        stats: TurnStats,
    ) -> TurnResult:
        if state == ConversationState.CONFIRMING:
            reply = classify_confirmation(text)
            if reply == ConfirmationReply.AFFIRM:
                return TurnResult(ConversationState.READY, ReadyResponse(draft=draft), draft)
            if reply == ConfirmationReply.DENY:
                return TurnResult(
                    ConversationState.GATHERING,
                    FollowUpResponse(draft=draft, questions=[CHANGE_QUESTION]),
                    draft,
                )

        timer = Timer("extract")
        try:
            with timer:
                extraction = self._client.extract(text, prior_draft=draft, history=history)
        except (ExtractionFailure, TimeoutError, ConnectionError) as exc:
            stats.extract_s = timer.elapsed
            logger.warning("Extraction failed state=%s reason=%s", state.value, exc)
            return self._error(state, draft, str(exc) or type(exc).__name__)
        except Exception as exc:
            # Any client fault ends the turn with an error reply, never a crash.
            stats.extract_s = timer.elapsed
            logger.error("Extraction client raised state=%s: %s", state.value, exc, exc_info=True)
            return self._error(state, draft, f"Extraction client error: {type(exc).__name__}")
        stats.extract_s = timer.elapsed

        if not isinstance(extraction, ExtractionResult):
            logger.warning("Extraction client returned %s", type(extraction).__name__)
            return self._error(state, draft, "Malformed extraction result")
        stats.intent = extraction.intent.value

        if extraction.intent == Intent.SEARCH:
            if not extraction.query:
                return self._error(state, draft, "Search intent without a query")
            return TurnResult(
                state,
                SearchResponse(query=extraction.query, town=extraction.town),
                draft,
            )

        if extraction.intent != Intent.CREATE_EVENT:
            return TurnResult(
                state,
                MessageResponse(message=extraction.message or FALLBACK_MESSAGE),
                draft,
            )

        return self._advance_draft(draft, extraction, stats)

    @staticmethod
    def _error(state: ConversationState, draft: EventDraft, reason: str) -> TurnResult:
        return TurnResult(state, ErrorResponse(reason=reason), draft)

    def _advance_draft(
        self,
        draft: EventDraft,
        extraction: ExtractionResult,
        stats: TurnStats,
    ) -> TurnResult:
        merged = merge_drafts(draft, extraction.event)
        completeness = check_completeness(merged)
        stats.missing_count = len(completeness.missing)

        if not completeness.complete:
            logger.info("Draft incomplete missing=%s", ",".join(completeness.missing))
            return TurnResult(
                ConversationState.GATHERING,
                FollowUpResponse(draft=merged, questions=completeness.questions),
                merged,
            )

        if self.require_confirmation:
            message = f"Here is your event:\n{summarize_draft(merged)}\n\nShall I publish it?"
            return TurnResult(
                ConversationState.CONFIRMING,
                ConfirmResponse(draft=merged, message=message),
                merged,
            )

        return TurnResult(ConversationState.READY, ReadyResponse(draft=merged), merged)
