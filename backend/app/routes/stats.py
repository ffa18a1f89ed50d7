"""Aggregate counters for the dashboard: GET /api/stats/users and /api/stats/posts."""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_post_service, get_user_service
from app.schemas.common import ApiResponse, success
from app.services.post_service import PostService
from app.services.user_service import UserService

router = APIRouter(
    prefix="/api/stats",
    tags=["Stats"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/users", response_model=ApiResponse, summary="User counters")
async def user_stats(users: UserService = Depends(get_user_service)) -> ApiResponse:
    return success(await users.get_stats(), "User statistics retrieved successfully")


@router.get("/posts", response_model=ApiResponse, summary="Post counters")
async def post_stats(posts: PostService = Depends(get_post_service)) -> ApiResponse:
    return success(await posts.get_stats(), "Post statistics retrieved successfully")
