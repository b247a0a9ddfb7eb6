"""
Read-only views derived from events and their attendees.

All queries only see active events: the entity store applies the
soft-delete predicate to every finder, and the hand-written
aggregations below use ``EntityStore.active`` for the same purpose.
Ties in the top-events ranking are broken by event id so the result is
deterministic.
"""

import logging
from typing import Any, Dict, List

from ..core.db import EntityStore
from ..core.errors import NotFoundError
from ..schemas.event import CapacityRead, EventRead, EventWithAttendees, TopEventRead

logger = logging.getLogger(__name__)


class RankingService:
    """Capacity fill, top events and per-user event listings."""

    def __init__(self, store: EntityStore, top_limit: int = 5) -> None:
        self.store = store
        self.top_limit = top_limit

    async def capacity_fill(self, event_id: int) -> CapacityRead:
        """Percentage of seats taken for an active event."""
        with self.store.connection() as conn:
            event = self.store.find_by_id("events", event_id, conn=conn)
            if event is None:
                raise NotFoundError("Event not found")
            count = self.store.attendee_count(event_id, conn=conn)
        # capacity > 0 is enforced by EventCreate and the table CHECK
        return CapacityRead(percentage_filled=count / event["capacity"] * 100)

    async def top_events(self, limit: int | None = None) -> List[TopEventRead]:
        """Active events ranked by attendee count, then rating, then id."""
        limit = self.top_limit if limit is None else limit
        rows = self.store.aggregate(
            "SELECT e.id, e.name, COUNT(a.user_id) AS attendees_count, e.rating AS average_rating "
            "FROM events e LEFT JOIN event_attendees a ON a.event_id = e.id "
            f"WHERE {self.store.active('e')} "
            "GROUP BY e.id "
            "ORDER BY attendees_count DESC, average_rating DESC, e.id ASC "
            "LIMIT ?",
            (limit,),
        )
        return [TopEventRead(**row) for row in rows]

    async def list_events(self) -> List[EventWithAttendees]:
        """All active events with attendees resolved to identity fields."""
        with self.store.connection() as conn:
            rows = self.store.find_many("events", order_by=("id",), conn=conn)
            profiles = self.store.attendee_profiles([row["id"] for row in rows], conn=conn)
        return [EventWithAttendees.from_row(row, profiles[row["id"]]) for row in rows]

    async def list_created_by(self, user_id: int) -> List[EventRead]:
        """Active events created by ``user_id``, earliest date first."""
        with self.store.connection() as conn:
            rows = self.store.find_many("events", {"creator": user_id}, order_by=("date", "id"), conn=conn)
            return self._with_attendees(rows, conn)

    async def list_registered_by(self, user_id: int) -> List[EventRead]:
        """Active events ``user_id`` has joined, earliest date first."""
        with self.store.connection() as conn:
            event_ids = self.store.registered_event_ids(user_id, conn=conn)
            if not event_ids:
                return []
            rows = [self.store.find_by_id("events", event_id, conn=conn) for event_id in event_ids]
            return self._with_attendees([row for row in rows if row is not None], conn)

    def _with_attendees(self, rows: List[Dict[str, Any]], conn) -> List[EventRead]:
        attendees = self.store.attendee_map([row["id"] for row in rows], conn=conn)
        return [EventRead.from_row(row, attendees[row["id"]]) for row in rows]
