"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status code and the human readable
message the API returns for it.  Endpoints translate them into
``HTTPException`` via ``to_http_exception``; ``StoreError`` is left to
the application-level handler registered in ``main`` and becomes a
generic 500 response.
"""

from fastapi import HTTPException, status


class EventHubError(Exception):
    """Base class for all business-rule failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class NotFoundError(EventHubError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class AlreadyRegisteredError(EventHubError):
    message = "You have already registered for this event"


class SoldOutError(EventHubError):
    message = "Event is sold out"


class HasAttendeesError(EventHubError):
    message = "Cannot cancel event with registered users"


class TooCloseToDateError(EventHubError):
    def __init__(self, lead_days: int) -> None:
        self.lead_days = lead_days
        super().__init__(f"Cannot cancel event within {lead_days} days")


class NotEventCreatorError(EventHubError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Only the event creator can cancel this event"


class EmailNotRegisteredError(EventHubError):
    message = "Email not registered"


class InvalidCredentialsError(EventHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class StoreError(Exception):
    """Raised when the underlying SQLite database fails."""


def to_http_exception(exc: EventHubError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)
