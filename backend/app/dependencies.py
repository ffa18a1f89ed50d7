"""
Postboard Backend: Route Dependencies
=======================================

What:  FastAPI dependency providers for the per-application objects built in
       the lifespan (executor, services) and the authenticated user.
How:   Everything is read from `request.app.state`; tests can override any
       provider through `app.dependency_overrides`.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.database import QueryExecutor
from app.exceptions import AuthenticationError
from app.orm import Record
from app.services.auth_service import AuthService
from app.services.post_service import PostService
from app.services.user_service import UserService

# auto_error=False so a missing header reaches our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


def get_executor(request: Request) -> QueryExecutor:
    return request.app.state.executor


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Record:
    """
    Resolve the bearer token to an active user record.

    Raises:
        AuthenticationError: header missing, token invalid/expired, user gone
                             or inactive (→ 401)
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return await auth_service.resolve_token(credentials.credentials)
