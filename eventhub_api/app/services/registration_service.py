"""
Business logic for joining events.

Registration is a single write transaction against the entity store.
Failures are classified in a fixed order (missing or cancelled event,
duplicate registration, no free seat) and the attendee row itself is
written by a conditional insert that re-checks capacity and
membership, so the number of attendees never exceeds the capacity and
a user appears at most once per event even under concurrent requests.

Because the attendee relation lives only in ``event_attendees``, the
event's attendee list and the user's registered events cannot drift
apart; there is no second write to keep in sync.
"""

import logging
from typing import Any, Dict

from ..core.db import EntityStore
from ..core.errors import AlreadyRegisteredError, NotFoundError, SoldOutError
from ..schemas.event import EventRead

logger = logging.getLogger(__name__)


class RegistrationService:
    """Enforce capacity and duplicate checks when a user joins an event."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def register(self, event_id: int, principal: Dict[str, Any]) -> EventRead:
        """Add ``principal`` to the attendees of ``event_id``.

        Raises
        ------
        NotFoundError
            The event does not exist or was cancelled.
        AlreadyRegisteredError
            The principal is already an attendee.
        SoldOutError
            The event has no free seat left.
        """
        user_id = principal["id"]
        with self.store.transaction() as conn:
            event = self.store.find_by_id("events", event_id, conn=conn)
            if event is None:
                raise NotFoundError("Event not found")
            if self.store.is_attendee(event_id, user_id, conn=conn):
                logger.info("User %s is already registered for event %s", user_id, event_id)
                raise AlreadyRegisteredError()
            if self.store.attendee_count(event_id, conn=conn) >= event["capacity"]:
                logger.info("Event %s is sold out; rejected user %s", event_id, user_id)
                raise SoldOutError()
            if not self.store.add_attendee_if_available(event_id, user_id, conn=conn):
                raise SoldOutError()
            # Bumping updated_at marks the event as changed by this registration.
            self.store.update("events", event_id, {}, conn=conn)
            event = self.store.find_by_id("events", event_id, conn=conn)
            attendees = self.store.attendee_ids(event_id, conn=conn)
        logger.info(
            "User %s registered for event %s (%s/%s)", user_id, event_id, len(attendees), event["capacity"]
        )
        return EventRead.from_row(event, attendees)
