"""
User endpoints for API v1.

Registration, login, account deactivation and the caller's own
profile.  Registering an email that belongs to an active account is
not an error: the endpoint answers 200 with an explanatory message.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status

from eventhub_api.app.api.v1.dependencies import get_user_service
from eventhub_api.app.core.errors import EventHubError, to_http_exception
from eventhub_api.app.core.security import get_current_user
from eventhub_api.app.schemas.user import MessageRead, TokenRead, UserCreate, UserLogin, UserRead
from eventhub_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/register", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def register_user(
    user: UserCreate,
    response: Response,
    service: UserService = Depends(get_user_service),
) -> MessageRead:
    """Create an account.  Answers 200 if the email is already in use."""
    created = await service.register_user(user)
    if created is None:
        response.status_code = status.HTTP_200_OK
        return MessageRead(message="Email already registered")
    return MessageRead(message="User registered successfully")


@router.post("/login", response_model=TokenRead)
async def login_user(
    credentials: UserLogin,
    service: UserService = Depends(get_user_service),
) -> TokenRead:
    """Exchange email and password for a bearer token."""
    try:
        token = await service.login(credentials.email, credentials.password)
    except EventHubError as e:
        raise to_http_exception(e) from e
    return TokenRead(token=token)


@router.patch("/delete/{user_id}", response_model=MessageRead)
async def deactivate_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
) -> MessageRead:
    """Deactivate (soft-delete) a user account."""
    try:
        await service.deactivate_user(user_id)
    except EventHubError as e:
        raise to_http_exception(e) from e
    return MessageRead(message="User account deactivated successfully")


@router.get("/me", response_model=UserRead)
async def read_current_user(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Return the caller's profile including the events they joined."""
    return await service.get_profile(current_user)
