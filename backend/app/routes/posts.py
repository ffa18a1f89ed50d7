"""
Postboard Backend: Post Routes
================================

What:  CRUD for /api/posts plus the published/drafts scopes and publishing.
How:   Reads of published content are public; drafts and every write need a
       bearer token. New posts default to the caller as author.

Route order matters: the fixed paths `/published` and `/drafts` are declared
before `/{post_id}` so they are not parsed as ids.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_current_user, get_post_service
from app.orm import Record
from app.schemas.common import ApiResponse, ErrorResponse, success
from app.schemas.post import PostCreate, PostStatus, PostUpdate
from app.services.post_service import PostService

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.get("", response_model=ApiResponse, summary="List posts")
async def list_posts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: Optional[str] = Query(default=None, max_length=100),
    post_status: Optional[PostStatus] = Query(default=None, alias="status"),
    user_id: Optional[int] = Query(default=None, gt=0),
    sort: str = Query(default="created_at", description="Column to sort by"),
    order: Literal["asc", "desc"] = Query(default="desc"),
    include: Optional[str] = Query(default=None, description="Set to 'user' to embed authors"),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse:
    data = await posts.list_posts(
        page=page,
        limit=limit,
        status=post_status,
        user_id=user_id,
        search=search,
        sort_by=sort,
        sort_order=order,
        include_user=include == "user",
    )
    return success(data, "Posts retrieved successfully")


@router.get("/published", response_model=ApiResponse, summary="Published posts")
async def published_posts(posts: PostService = Depends(get_post_service)) -> ApiResponse:
    return success(await posts.published_posts(), "Published posts retrieved successfully")


@router.get(
    "/drafts",
    response_model=ApiResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Draft posts",
)
async def draft_posts(
    _user: Record = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse:
    return success(await posts.draft_posts(), "Draft posts retrieved successfully")


@router.get(
    "/{post_id}",
    response_model=ApiResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get one post",
)
async def get_post(
    post_id: int,
    include: Optional[str] = Query(default="user", description="'user' embeds the author"),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse:
    data = await posts.get_post(post_id, include_user=include == "user")
    return success(data, "Post retrieved successfully")


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    body: PostCreate,
    current_user: Record = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse:
    data = await posts.create_post(body.model_dump(), author_id=current_user.get_key())
    return success(data, "Post created successfully")


@router.put(
    "/{post_id}",
    response_model=ApiResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update a post",
)
async def update_post(
    post_id: int,
    body: PostUpdate,
    _user: Record = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse:
    data = await posts.update_post(post_id, body.to_attributes())
    return success(data, "Post updated successfully")


@router.delete(
    "/{post_id}",
    response_model=ApiResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete a post",
)
async def delete_post(
    post_id: int,
    _user: Record = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse:
    await posts.delete_post(post_id)
    return success(None, "Post deleted successfully")


@router.post(
    "/{post_id}/publish",
    response_model=ApiResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Publish a post",
)
async def publish_post(
    post_id: int,
    _user: Record = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> ApiResponse:
    data = await posts.publish_post(post_id)
    return success(data, "Post published successfully")
