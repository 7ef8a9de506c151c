import json

import httpx
import openai
import pytest

from roam.core.errors import ExtractionFailure
from roam.domain.schemas.chat import HistoryTurn, Intent
from roam.domain.schemas.event import EventDraft
from roam.services.llm.client import SYSTEM_PROMPT, OpenAIExtractionClient


class _FakeMessage:
    def __init__(self, content):
        self.content = content


class _FakeChoice:
    def __init__(self, content):
        self.message = _FakeMessage(content)


class _FakeCompletion:
    def __init__(self, content):
        self.choices = [_FakeChoice(content)]


class _FakeOpenAI:
    def __init__(self, content: str | None = None, error: Exception | None = None) -> None:
        self.requests: list[dict] = []
        outer = self

        class _Completions:
            @staticmethod
            def create(**kwargs):
                outer.requests.append(kwargs)
                if error is not None:
                    raise error
                return _FakeCompletion(content)

        class _Chat:
            completions = _Completions()

        self.chat = _Chat()


def test_extract_returns_parsed_result() -> None:
    fake = _FakeOpenAI(json.dumps({"intent": "create_event", "event": {"title": "Open Mic"}}))
    client = OpenAIExtractionClient(client=fake, model="gpt-test")

    result = client.extract("Open mic on Friday")

    assert result.intent == Intent.CREATE_EVENT
    assert result.event.title == "Open Mic"
    request = fake.requests[0]
    assert request["model"] == "gpt-test"
    assert request["response_format"] == {"type": "json_object"}
    assert request["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert request["messages"][-1] == {"role": "user", "content": "Open mic on Friday"}


def test_extract_raises_on_invalid_json() -> None:
    client = OpenAIExtractionClient(client=_FakeOpenAI("not json"))

    with pytest.raises(ExtractionFailure):
        client.extract("hello")


def test_extract_raises_on_empty_reply() -> None:
    client = OpenAIExtractionClient(client=_FakeOpenAI(None))

    with pytest.raises(ExtractionFailure):
        client.extract("hello")


def test_extract_wraps_openai_errors() -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    client = OpenAIExtractionClient(client=_FakeOpenAI(error=openai.APITimeoutError(request=request)))

    with pytest.raises(ExtractionFailure, match="unavailable"):
        client.extract("hello")


def test_build_messages_includes_draft_and_bounded_history() -> None:
    client = OpenAIExtractionClient(client=_FakeOpenAI("{}"), history_limit=2)
    history = [
        HistoryTurn(role="user", text="first"),
        HistoryTurn(role="assistant", text="second"),
        HistoryTurn(role="user", text="third"),
    ]

    messages = client.build_messages(
        "fourth",
        prior_draft=EventDraft(title="Open Mic"),
        history=history,
    )

    assert messages[1]["role"] == "system"
    assert '"title":"Open Mic"' in messages[1]["content"]
    assert [m["content"] for m in messages[2:]] == ["second", "third", "fourth"]


def test_build_messages_skips_empty_draft() -> None:
    client = OpenAIExtractionClient(client=_FakeOpenAI("{}"), history_limit=0)

    messages = client.build_messages("hi", prior_draft=EventDraft(), history=[HistoryTurn(role="user", text="x")])

    assert len(messages) == 2


def test_missing_api_key_raises(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(EnvironmentError):
        OpenAIExtractionClient()
