"""
Business logic for user accounts.

Registration, credential checks and account deactivation.  Accounts
are never physically removed; deactivation sets ``is_deleted`` and the
entity store hides such accounts from every lookup, which also makes
their tokens stop working.
"""

import logging
from typing import Any, Dict, Optional

from ..core.db import EntityStore
from ..core.errors import EmailNotRegisteredError, InvalidCredentialsError, NotFoundError
from ..core.security import create_access_token, hash_password, verify_password
from ..schemas.user import UserCreate, UserRead


class UserService:
    """Account lifecycle operations backed by the ``users`` table."""

    def __init__(self, store: EntityStore, secret_key: str, token_ttl_seconds: int) -> None:
        self.store = store
        self.secret_key = secret_key
        self.token_ttl_seconds = token_ttl_seconds

    async def register_user(self, data: UserCreate) -> Optional[UserRead]:
        """Create an account, or return ``None`` if an active one already has the email.

        The lookup and insert share one write transaction, so two
        concurrent registrations with the same email cannot both succeed.
        """
        logger = logging.getLogger(__name__)
        with self.store.transaction() as conn:
            if self.store.find_one("users", {"email": data.email}, conn=conn) is not None:
                logger.info("Registration for %s rejected: email in use", data.email)
                return None
            row = self.store.insert(
                "users",
                {"username": data.username, "email": data.email, "password": hash_password(data.password)},
                conn=conn,
            )
        logger.info("Registered user %s (%s)", row["id"], data.email)
        return UserRead(id=row["id"], username=row["username"], email=row["email"])

    async def login(self, email: str, password: str) -> str:
        """Check credentials and return a signed access token."""
        user = self.store.find_one("users", {"email": email})
        if user is None:
            raise EmailNotRegisteredError()
        if not verify_password(password, user["password"]):
            logging.getLogger(__name__).info("Invalid password for %s", email)
            raise InvalidCredentialsError()
        return create_access_token({"sub": user["email"]}, self.secret_key, self.token_ttl_seconds)

    async def deactivate_user(self, user_id: int) -> None:
        """Soft-delete an active account."""
        if self.store.update("users", user_id, {"is_deleted": 1}) == 0:
            raise NotFoundError("User not found")
        logging.getLogger(__name__).info("Deactivated user %s", user_id)

    async def get_profile(self, principal: Dict[str, Any]) -> UserRead:
        """Return the principal with the ids of the active events they joined."""
        return UserRead(
            id=principal["id"],
            username=principal["username"],
            email=principal["email"],
            registered_events=self.store.registered_event_ids(principal["id"]),
        )
