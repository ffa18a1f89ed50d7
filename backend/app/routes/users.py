"""
Postboard Backend: User Routes
================================

What:  CRUD for /api/users plus GET /api/users/{id}/posts.
How:   Every route requires a bearer token. `include=posts` on the detail
       route eager-loads the posts relation into the response.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_current_user, get_user_service
from app.schemas.common import ApiResponse, ErrorResponse, success
from app.schemas.resources import UserResource
from app.schemas.user import UserCreate, UserUpdate
from app.services.user_service import UserService

router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)],
    responses={401: {"model": ErrorResponse}},
)


@router.get("", response_model=ApiResponse, summary="List users")
async def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: Optional[str] = Query(default=None, max_length=100),
    user_status: Optional[Literal["active", "inactive"]] = Query(default=None, alias="status"),
    sort: str = Query(default="created_at", description="Column to sort by"),
    order: Literal["asc", "desc"] = Query(default="desc"),
    users: UserService = Depends(get_user_service),
) -> ApiResponse:
    data = await users.list_users(
        page=page,
        limit=limit,
        status=user_status,
        search=search,
        sort_by=sort,
        sort_order=order,
    )
    return success(data, "Users retrieved successfully")


@router.get(
    "/{user_id}",
    response_model=ApiResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get one user",
)
async def get_user(
    user_id: int,
    include: Optional[str] = Query(default=None, description="Set to 'posts' to embed posts"),
    users: UserService = Depends(get_user_service),
) -> ApiResponse:
    data = await users.get_user(user_id, include_posts=include == "posts")
    return success(data, "User retrieved successfully")


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Create a user",
)
async def create_user(
    body: UserCreate,
    users: UserService = Depends(get_user_service),
) -> ApiResponse:
    user = await users.create_user(body.to_attributes())
    return success(UserResource.from_record(user), "User created successfully")


@router.put(
    "/{user_id}",
    response_model=ApiResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Update a user",
)
async def update_user(
    user_id: int,
    body: UserUpdate,
    users: UserService = Depends(get_user_service),
) -> ApiResponse:
    data = await users.update_user(user_id, body.to_attributes())
    return success(data, "User updated successfully")


@router.delete(
    "/{user_id}",
    response_model=ApiResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a user and, by cascade, their posts",
)
async def delete_user(
    user_id: int,
    users: UserService = Depends(get_user_service),
) -> ApiResponse:
    await users.delete_user(user_id)
    return success(None, "User deleted successfully")


@router.get(
    "/{user_id}/posts",
    response_model=ApiResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Posts written by a user",
)
async def get_user_posts(
    user_id: int,
    users: UserService = Depends(get_user_service),
) -> ApiResponse:
    data = await users.get_user_posts(user_id)
    return success(data, "User posts retrieved successfully")
