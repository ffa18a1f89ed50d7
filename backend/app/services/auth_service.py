"""
Postboard Backend: Authentication Service
===========================================

What:  Registration, login, token refresh, current-user resolution and
       password changes.
How:   Credentials are checked against the bcrypt hash on the users record;
       successful logins get an HS256 bearer token whose `sub` is the user id.
Who:   Called by the auth routes and the `get_current_user` dependency.

Login answers "Invalid credentials" both for an unknown email and for a
wrong password.
"""

import logging
from datetime import timedelta
from typing import Any, Dict

from app import security
from app.config import settings
from app.exceptions import AuthenticationError, ValidationError
from app.models import user as user_queries
from app.orm import ModelRegistry, Record
from app.schemas.auth import TokenPayload
from app.schemas.resources import UserResource
from app.services.cache import TTLCache
from app.services.user_service import UserService, user_cache_prefix

logger = logging.getLogger(__name__)


class AuthService:
    """
    Business logic layer for authentication.

    Responsibilities:
        - register() / login() / refresh(): return user + bearer token
        - resolve_token(): bearer token → active user record
        - change_password(): verify the current password, store the new one

    Token lifetime comes from `settings.jwt_expires_minutes`. Tokens are
    stateless; logout does not revoke anything server-side.
    """

    def __init__(self, registry: ModelRegistry, cache: TTLCache, user_service: UserService):
        self.users = registry["users"]
        self.cache = cache
        self.user_service = user_service

    def issue_token(self, user: Record) -> Dict[str, Any]:
        """Build the `TokenPayload` body (user resource, token, lifetime)."""
        expires = timedelta(minutes=settings.jwt_expires_minutes)
        token = security.create_access_token(
            user.get_key(),
            claims={"email": user.get_attribute("email")},
            expires_delta=expires,
        )
        return TokenPayload(
            user=UserResource.from_record(user),
            access_token=token,
            expires_in=int(expires.total_seconds()),
        ).model_dump()

    async def register(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        user = await self.user_service.create_user(attributes)
        logger.info("User registered: %s", user.get_key())
        return self.issue_token(user)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Check credentials and issue a token.

        Who:     POST /api/auth/login.

        Raises:
            AuthenticationError: unknown email, wrong password or inactive account
        """
        user = await user_queries.find_by_email(self.users, email)
        if user is None or not await user_queries.verify_password(user, password):
            logger.warning("Failed login attempt for %s", email)
            raise AuthenticationError("Invalid credentials")
        if user.get_attribute("status") != "active":
            raise AuthenticationError("Account is inactive")
        logger.info("User logged in: %s", user.get_key())
        return self.issue_token(user)

    async def resolve_token(self, token: str) -> Record:
        """Decode a bearer token and load the active user it names."""
        payload = security.decode_access_token(token)
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise AuthenticationError("Invalid authentication token") from exc

        # the account may have been deleted or deactivated after issue
        user = await self.users.find(user_id)
        if user is None:
            raise AuthenticationError("User not found")
        if user.get_attribute("status") != "active":
            raise AuthenticationError("Account is inactive")
        return user

    def refresh(self, user: Record) -> Dict[str, Any]:
        return self.issue_token(user)

    async def change_password(self, user: Record, current_password: str, new_password: str) -> None:
        """
        Replace the password of `user`; the users save hook hashes it.

        Raises:
            ValidationError: `current_password` does not match (→ 422)
        """
        if not await user_queries.verify_password(user, current_password):
            raise ValidationError(
                "The current password is incorrect.", field="current_password"
            )
        user.set_attribute("password", new_password)
        await user.save()
        self.cache.invalidate_prefix(user_cache_prefix(user.get_key()))
        logger.info("Password changed for user %s", user.get_key())
