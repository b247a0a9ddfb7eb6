"""
FastAPI dependencies returning the services built by ``create_app``.

Services are constructed once per application and stored on
``app.state``; handlers receive them through ``Depends`` so tests can
run the whole stack against a temporary database.
"""

from fastapi import Request

from eventhub_api.app.services.cancellation_service import CancellationService
from eventhub_api.app.services.event_service import EventService
from eventhub_api.app.services.ranking_service import RankingService
from eventhub_api.app.services.registration_service import RegistrationService
from eventhub_api.app.services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_event_service(request: Request) -> EventService:
    return request.app.state.event_service


def get_registration_service(request: Request) -> RegistrationService:
    return request.app.state.registration_service


def get_cancellation_service(request: Request) -> CancellationService:
    return request.app.state.cancellation_service


def get_ranking_service(request: Request) -> RankingService:
    return request.app.state.ranking_service
