"""
Business logic for creating events.

The registration, cancellation and ranking rules live in their own
services; this one only records new events with the caller as creator.
"""

import logging
from typing import Any, Dict

from ..core.db import EntityStore, to_db_timestamp
from ..schemas.event import EventCreate, EventRead


class EventService:
    """Create events on behalf of an authenticated user."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def create_event(self, data: EventCreate, principal: Dict[str, Any]) -> EventRead:
        """Insert a new event owned by ``principal`` and return it.

        The creator is taken from the authenticated principal and never
        from the payload.  Attendees start empty and the rating at 0.
        """
        logger = logging.getLogger(__name__)
        row = self.store.insert(
            "events",
            {
                "name": data.name,
                "description": data.description,
                "date": to_db_timestamp(data.date),
                "capacity": data.capacity,
                "price": data.price,
                "creator": principal["id"],
            },
        )
        logger.info("User %s created event %s '%s'", principal["email"], row["id"], data.name)
        return EventRead.from_row(row, [])
