from __future__ import annotations

from typing import Protocol

from roam.domain.schemas.chat import ExtractionResult, HistoryTurn
from roam.domain.schemas.event import EventDraft


class ExtractionClient(Protocol):
    def extract(
        self,
        text: str,
        prior_draft: EventDraft | None = None,
        history: list[HistoryTurn] | None = None,
    ) -> ExtractionResult:
        ...
