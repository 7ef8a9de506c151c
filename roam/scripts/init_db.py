from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from roam.core.env import load_env
from roam.db.base import Base
from roam.db.models.town import find_town, get_or_create_town
from roam.db.session import engine, get_session
from roam.logging import configure_logging
from roam.services.towns import KNOWN_TOWN_TIMEZONES


def seed_towns(session: Session, names: list[str] | None = None) -> int:
    created = 0
    for name in names or [key.title() for key in KNOWN_TOWN_TIMEZONES]:
        if find_town(session, name) is None:
            get_or_create_town(session, name)
            created += 1
    session.commit()
    return created


def main() -> None:
    load_env()
    configure_logging()
    Base.metadata.create_all(bind=engine)

    session_gen = get_session()
    session = next(session_gen)
    try:
        created = seed_towns(session)
    finally:
        session_gen.close()

    print(
        f"Database ready at {datetime.now(tz=timezone.utc).isoformat()} "
        f"towns_created={created}"
    )


if __name__ == "__main__":
    main()
