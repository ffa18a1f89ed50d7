"""
Postboard Backend: Authentication Routes
==========================================

What:  POST /api/auth/register, /login, /refresh, /logout, /password and
       GET /api/auth/me.
How:   Thin handlers: validate the body, call AuthService, wrap the result
       in the success envelope. Tokens are stateless, so logout only
       acknowledges; clients drop the token.
"""

import logging

from fastapi import APIRouter, Depends, status

from app.dependencies import get_auth_service, get_current_user
from app.orm import Record
from app.schemas.auth import ChangePasswordRequest, LoginRequest
from app.schemas.common import ApiResponse, ErrorResponse, success
from app.schemas.resources import UserResource
from app.schemas.user import UserCreate
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Register a new user",
)
async def register(
    body: UserCreate,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    data = await auth_service.register(body.to_attributes())
    return success(data, "User registered successfully")


@router.post(
    "/login",
    response_model=ApiResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Exchange credentials for a bearer token",
)
async def login(
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    data = await auth_service.login(body.email, body.password)
    return success(data, "Login successful")


@router.get("/me", response_model=ApiResponse, summary="Current user")
async def me(current_user: Record = Depends(get_current_user)) -> ApiResponse:
    return success(UserResource.from_record(current_user), "User retrieved successfully")


@router.post("/refresh", response_model=ApiResponse, summary="Issue a fresh token")
async def refresh(
    current_user: Record = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    return success(auth_service.refresh(current_user), "Token refreshed successfully")


@router.post("/logout", response_model=ApiResponse, summary="Log out")
async def logout(current_user: Record = Depends(get_current_user)) -> ApiResponse:
    logger.info("User logged out: %s", current_user.get_key())
    return success(None, "Logout successful")


@router.post(
    "/password",
    response_model=ApiResponse,
    responses={422: {"model": ErrorResponse}},
    summary="Change the current user's password",
)
async def change_password(
    body: ChangePasswordRequest,
    current_user: Record = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    await auth_service.change_password(current_user, body.current_password, body.new_password)
    return success(None, "Password changed successfully")
