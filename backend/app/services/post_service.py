"""
Postboard Backend: Post Service
=================================

What:  CRUD, publishing and status scopes for posts.
How:   Works on the `posts` model; the author must exist before a post can
       point at it. Each write drops the author's cached user entries,
       because those may embed the posts relation.
Who:   Called by the posts and stats route handlers.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from app.exceptions import NotFoundError, ValidationError
from app.models import post as post_queries
from app.orm import ModelRegistry, Record
from app.schemas.resources import PostResource
from app.services import listing
from app.services.cache import TTLCache
from app.services.user_service import user_cache_prefix

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {"id", "title", "status", "user_id", "created_at", "updated_at"}


class PostService:
    """
    Business logic layer for post operations.

    Responsibilities:
        - list_posts() / get_post(): reads, optionally with the author
        - create_post() / update_post() / delete_post(): author checks, writes
        - publish_post(), published_posts(), draft_posts(): status handling
        - get_stats(): cached per-status counts

    Every write calls `_forget_author`, which drops the author's cached user
    entries and "post:stats".
    """

    def __init__(self, registry: ModelRegistry, cache: TTLCache):
        self.posts = registry["posts"]
        self.users = registry["users"]
        self.cache = cache

    async def find_post(self, post_id: int) -> Record:
        post = await self.posts.find(post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=post_id)
        return post

    def _forget_author(self, user_id: Any) -> None:
        if user_id is not None:
            self.cache.invalidate_prefix(user_cache_prefix(user_id))
        self.cache.invalidate("post:stats")

    async def _ensure_author(self, user_id: int) -> None:
        if await self.users.find(user_id) is None:
            raise ValidationError(
                "The selected user does not exist.", field="user_id"
            )

    async def list_posts(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        user_id: Optional[int] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        include_user: bool = False,
    ) -> Dict[str, Any]:
        """
        Filter, search, sort and paginate posts in memory.

        Who:     GET /api/posts (public).

        Args:
            user_id:      restrict to one author (queried, not filtered)
            include_user: resolve the `user` relation for the returned page only
        """
        if sort_by not in SORTABLE_FIELDS:
            sort_by = "created_at"

        # ── Load candidates ───────────────────────────────────────────────
        if user_id is not None:
            posts = await post_queries.by_user(self.posts, user_id)
        else:
            posts = await self.posts.all()

        # ── Narrow, order and slice ───────────────────────────────────────
        posts = listing.filter_equal(posts, "status", status)
        posts = listing.search(posts, search, ("title", "content"))
        posts = listing.sort_records(posts, sort_by, sort_order)
        page_items, pagination = listing.paginate(posts, page, limit)
        if include_user:
            for post in page_items:
                await post.load("user")
        return {
            "posts": PostResource.collection(page_items),
            "pagination": pagination.model_dump(),
        }

    async def get_post(self, post_id: int, include_user: bool = True) -> Dict[str, Any]:
        post = await self.find_post(post_id)
        if include_user:
            await post.load("user")
        return PostResource.from_record(post)

    async def create_post(self, attributes: Dict[str, Any], author_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Create a post; `user_id` falls back to `author_id` (the caller).

        Raises:
            ValidationError: no author given, or the author does not exist
        """
        attributes = dict(attributes)
        if attributes.get("user_id") is None:
            attributes["user_id"] = author_id
        if attributes["user_id"] is None:
            raise ValidationError("The user id field is required.", field="user_id")
        await self._ensure_author(attributes["user_id"])

        post = await self.posts.create(attributes)
        await post.load("user")
        self._forget_author(post.get_attribute("user_id"))
        logger.info("Post created: %s by user %s", post.get_key(), post.get_attribute("user_id"))
        return PostResource.from_record(post)

    async def update_post(self, post_id: int, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update; moving a post to another author checks that
        author exists and drops the cached entries of both authors.

        Raises:
            NotFoundError:   no such post (→ 404)
            ValidationError: the new author does not exist (→ 422)
        """
        post = await self.find_post(post_id)
        previous_author = post.get_attribute("user_id")

        new_author = attributes.get("user_id")
        if new_author is not None and new_author != previous_author:
            await self._ensure_author(new_author)

        post.fill(attributes)
        await post.save()
        await post.load("user")
        self._forget_author(previous_author)
        if post.get_attribute("user_id") != previous_author:
            self._forget_author(post.get_attribute("user_id"))
        logger.info("Post updated: %s", post_id)
        return PostResource.from_record(post)

    async def delete_post(self, post_id: int) -> bool:
        post = await self.find_post(post_id)
        await post.delete()
        self._forget_author(post.get_attribute("user_id"))
        logger.info("Post deleted: %s", post_id)
        return True

    async def publish_post(self, post_id: int) -> Dict[str, Any]:
        """Set status to "published"; nothing is written if it already is."""
        post = await self.find_post(post_id)
        post.set_attribute("status", "published")
        await post.save()
        self._forget_author(post.get_attribute("user_id"))
        logger.info("Post published: %s", post_id)
        return PostResource.from_record(post)

    async def published_posts(self) -> List[Dict[str, Any]]:
        posts = await post_queries.published(self.posts)
        return PostResource.collection(
            listing.sort_records(posts, "created_at", "desc")
        )

    async def draft_posts(self) -> List[Dict[str, Any]]:
        posts = await post_queries.drafts(self.posts)
        return PostResource.collection(
            listing.sort_records(posts, "created_at", "desc")
        )

    async def get_stats(self) -> Dict[str, int]:
        """Total, per-status and last-7-days counts, cached as "post:stats"."""
        async def compute() -> Dict[str, int]:
            posts = await self.posts.all()
            week_ago = datetime.now(timezone.utc) - timedelta(days=7)
            by_status = {status: 0 for status in post_queries.POST_STATUSES}
            recent = 0
            for post in posts:
                status = post.get_attribute("status")
                if status in by_status:
                    by_status[status] += 1
                created = post.get_attribute("created_at")
                if created is not None and created > week_ago:
                    recent += 1
            return {
                "total_posts": len(posts),
                "published_posts": by_status["published"],
                "draft_posts": by_status["draft"],
                "archived_posts": by_status["archived"],
                "recent_posts": recent,
            }

        return await self.cache.remember("post:stats", compute)
