from __future__ import annotations

from dataclasses import dataclass
from time import monotonic


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


class Timer:
    """Context manager that records wall time in ``elapsed``, even when the block raises."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.start = 0.0
        self.elapsed = 0.0

    def __enter__(self) -> "Timer":
        self.start = monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.elapsed = monotonic() - self.start


@dataclass
class TurnStats:
    """Per-turn metrics: state transition, detected intent, reply kind, how many
    mandatory fields are still missing and how long extraction took.
    """

    state_before: str = ""
    state_after: str = ""
    intent: str = "-"
    kind: str = ""
    missing_count: int = 0
    extract_s: float = 0.0

    def status_line(self) -> str:
        return (
            f"turn state={self.state_before}->{self.state_after} "
            f"intent={self.intent} kind={self.kind} "
            f"missing={self.missing_count} extract={format_duration(self.extract_s)}"
        )

    def log_status(self, logger) -> None:
        logger.info(self.status_line())
