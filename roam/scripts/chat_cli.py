from __future__ import annotations

import argparse
from typing import Callable

from roam.core.env import is_confirmation_required, load_env
from roam.core.errors import PersistenceFailure, ValidationFailure
from roam.db.session import get_session, init_db
from roam.domain.schemas.chat import ConversationState, HistoryTurn, TurnResponse
from roam.domain.schemas.event import EventDraft, PublishedEvent
from roam.logging import configure_logging
from roam.services.chat.controller import ConversationController
from roam.services.llm.client import OpenAIExtractionClient
from roam.services.publish.publisher import publish_event
from roam.services.search.events import search_events

Publisher = Callable[[EventDraft], PublishedEvent]
Searcher = Callable[[str, str | None], list[PublishedEvent]]


def run_conversation(
    controller: ConversationController,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    publisher: Publisher | None = None,
    searcher: Searcher | None = None,
) -> list[PublishedEvent]:
    draft = EventDraft()
    state = ConversationState.GATHERING
    history: list[HistoryTurn] = []
    published: list[PublishedEvent] = []

    while True:
        try:
            text = read_line("you> ").strip()
        except EOFError:
            break
        if not text:
            continue
        if text.lower() in {"quit", "exit"}:
            break
        if text.lower() in {"reset", "start over"}:
            draft, state, history = EventDraft(), ConversationState.GATHERING, []
            write("Draft cleared.")
            continue

        result = controller.handle_turn(text, draft=draft, state=state, history=history)
        reply = render_response(result.response)
        write(reply)
        history.extend(
            [HistoryTurn(role="user", text=text), HistoryTurn(role="assistant", text=reply)]
        )
        state, draft = result.state, result.draft
        response = result.response

        if response.kind == "search" and searcher is not None:
            matches = searcher(response.query, response.town)
            if not matches:
                write("No events found.")
            for event in matches:
                start = event.occurrences[0].start_ts.isoformat() if event.occurrences else "-"
                write(f"- {start} {event.title} @ {event.location.name}")

        if response.kind == "ready" and publisher is not None:
            try:
                event = publisher(draft)
            except (ValidationFailure, PersistenceFailure) as exc:
                write(f"Could not publish: {exc}")
                state = ConversationState.GATHERING
                continue
            write(f"Published '{event.title}' id={event.id}")
            published.append(event)
            draft, state, history = EventDraft(), ConversationState.GATHERING, []

    return published


def render_response(response: TurnResponse) -> str:
    if response.kind == "follow_up":
        return "\n".join(response.questions)
    if response.kind == "confirm":
        return response.message
    if response.kind == "ready":
        return "Your event is ready to publish."
    if response.kind == "search":
        where = f" in {response.town}" if response.town else ""
        return f"Searching for '{response.query}'{where}..."
    if response.kind == "message":
        return response.message
    return f"Sorry, something went wrong: {response.reason}. Please try again."


def main() -> None:
    load_env()
    configure_logging()

    parser = argparse.ArgumentParser(description="Describe an event and publish it from the terminal.")
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Ask for confirmation before publishing (also ROAM_REQUIRE_CONFIRMATION)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Do not write events to the DB")
    args = parser.parse_args()

    controller = ConversationController(
        OpenAIExtractionClient(),
        require_confirmation=args.confirm or is_confirmation_required(),
    )

    init_db()
    session_gen = get_session()
    session = next(session_gen)
    try:
        run_conversation(
            controller,
            publisher=None if args.dry_run else (lambda draft: publish_event(session, draft)),
            searcher=lambda query, town: search_events(session, query, town=town),
        )
    finally:
        session_gen.close()


if __name__ == "__main__":
    main()
