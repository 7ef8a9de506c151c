import logging

import pytest

from roam.core.env import get_required_env, is_confirmation_required, load_env
from roam.utils.timing import Timer, TurnStats, format_duration


def test_load_env_does_not_fail_when_missing() -> None:
    load_env()


def test_get_required_env(monkeypatch) -> None:
    monkeypatch.setenv("ROAM_TEST_VALUE", "abc")
    monkeypatch.delenv("ROAM_MISSING_VALUE", raising=False)

    assert get_required_env("ROAM_TEST_VALUE") == "abc"
    with pytest.raises(EnvironmentError):
        get_required_env("ROAM_MISSING_VALUE")


@pytest.mark.parametrize(
    ("value", "expected"),
    [("true", True), ("1", True), ("YES", True), ("false", False), ("", False)],
)
def test_is_confirmation_required(monkeypatch, value, expected) -> None:
    monkeypatch.setenv("ROAM_REQUIRE_CONFIRMATION", value)

    assert is_confirmation_required() is expected


def test_format_duration_formats_components() -> None:
    assert format_duration(0.25) == "250ms"
    assert format_duration(5) == "5s"
    assert format_duration(61) == "1m1s"


def test_timer_measures_elapsed(monkeypatch) -> None:
    now = [0.0]

    def fake_monotonic():
        return now[0]

    monkeypatch.setattr("roam.utils.timing.monotonic", fake_monotonic)
    with Timer() as t:
        now[0] = 2.0
    assert t.elapsed == 2.0


def test_timer_records_elapsed_when_block_raises(monkeypatch) -> None:
    now = [1.0]
    monkeypatch.setattr("roam.utils.timing.monotonic", lambda: now[0])
    timer = Timer("extract")

    with pytest.raises(RuntimeError):
        with timer:
            now[0] = 1.5
            raise RuntimeError("boom")

    assert timer.elapsed == 0.5


def test_turn_stats_logs_status(caplog) -> None:
    caplog.set_level(logging.INFO)
    stats = TurnStats(
        state_before="gathering",
        state_after="ready",
        intent="create_event",
        kind="ready",
        missing_count=0,
        extract_s=1.5,
    )
    stats.log_status(logging.getLogger("status-test"))

    assert any(
        "state=gathering->ready" in rec.message and "extract=1s" in rec.message
        for rec in caplog.records
    )
