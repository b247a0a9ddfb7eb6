"""
Business logic for withdrawing events.

An event can be cancelled (soft-deleted) only while nobody has joined
it and only when it is more than ``lead_days`` days away.  Both gates
are permanent policy; there is no forced cancellation.  The checks and
the soft-delete run in one write transaction, so a registration cannot
slip in between the attendee check and the delete.

When ``require_creator`` is set, only the user who created the event
may cancel it.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.db import EntityStore, from_db_timestamp, utc_now
from ..core.errors import HasAttendeesError, NotEventCreatorError, NotFoundError, TooCloseToDateError

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class CancellationService:
    def __init__(self, store: EntityStore, lead_days: int = 7, require_creator: bool = True) -> None:
        self.store = store
        self.lead_days = lead_days
        self.require_creator = require_creator

    def days_until(self, event_date: datetime, now: datetime) -> float:
        """Fractional number of days from ``now`` until ``event_date``."""
        return (event_date - now).total_seconds() / SECONDS_PER_DAY

    async def cancel(self, event_id: int, principal: Dict[str, Any], now: Optional[datetime] = None) -> None:
        """Soft-delete ``event_id`` if the cancellation policy allows it.

        Checks run in order: the event must exist and be active, the
        caller must be its creator (when required), it must have no
        attendees and it must be more than ``lead_days`` days away.
        A second cancellation of the same event fails with
        ``NotFoundError`` because cancelled events are no longer found.
        """
        now = now or utc_now()
        with self.store.transaction() as conn:
            event = self.store.find_by_id("events", event_id, conn=conn)
            if event is None:
                raise NotFoundError("Event not found")
            if self.require_creator and event["creator"] != principal["id"]:
                logger.warning("User %s tried to cancel event %s created by %s", principal["id"], event_id, event["creator"])
                raise NotEventCreatorError()
            if self.store.attendee_count(event_id, conn=conn) > 0:
                raise HasAttendeesError()
            if self.days_until(from_db_timestamp(event["date"]), now) <= self.lead_days:
                raise TooCloseToDateError(self.lead_days)
            self.store.update("events", event_id, {"is_deleted": 1}, conn=conn)
        logger.info("User %s cancelled event %s", principal["id"], event_id)
