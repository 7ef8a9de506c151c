from roam.db.models.event import Event, EventOccurrence
from roam.db.models.town import Town

__all__ = [
    "Event",
    "EventOccurrence",
    "Town",
]
