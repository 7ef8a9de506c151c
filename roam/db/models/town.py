from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import String, Uuid, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from roam.db.base import Base
from roam.services.towns import get_town_timezone_name

if TYPE_CHECKING:
    from roam.db.models.event import Event


class Town(Base):
    __tablename__ = "towns"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    tz: Mapped[str] = mapped_column(String(64))

    events: Mapped[list[Event]] = relationship(back_populates="town")


def find_town(session: Session, name: str) -> Town | None:
    cleaned = " ".join(name.split())
    return session.scalar(select(Town).where(func.lower(Town.name) == cleaned.lower()))


def get_or_create_town(session: Session, name: str) -> Town:
    existing = find_town(session, name)
    if existing:
        return existing

    cleaned = " ".join(name.split())
    town = Town(name=cleaned, tz=get_town_timezone_name(cleaned))
    session.add(town)
    session.flush()
    return town
