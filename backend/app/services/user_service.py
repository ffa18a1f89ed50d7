"""
Postboard Backend: User Service
=================================

What:  Business rules for users: uniqueness of email, cached lookups,
       filtered/sorted/paginated listing, statistics and deletion.
How:   Works on the `users` model from the registry; returns resource dicts
       ready for the response envelope. Lookups that miss become
       NotFoundError; storage failures propagate as StorageError.
Who:   Called by the users and auth route handlers.

Caching:
    Single-user reads are cached under "user:{id}:..." keys and the stats
    under "user:stats". Every write through this service (or PostService,
    for the posts relation) drops the affected prefix.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from app.exceptions import ConflictError, NotFoundError
from app.models import user as user_queries
from app.orm import Model, ModelRegistry, Record
from app.schemas.resources import PostResource, UserResource
from app.services import listing
from app.services.cache import TTLCache

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {"id", "name", "email", "status", "created_at", "updated_at"}


def user_cache_prefix(user_id: Any) -> str:
    return f"user:{user_id}:"


class UserService:
    """
    Business logic layer for user operations.

    Responsibilities:
        - create_user() / update_user(): email uniqueness, then save
        - get_user() / get_user_posts(): cached single-user reads
        - list_users(): in-memory filter, search, sort and paginate
        - delete_user(): delete (posts cascade) and drop cached entries
        - get_stats(): cached counts for the stats endpoint

    Args:
        registry: Model registry holding the `users` and `posts` models.
        cache:    Shared TTL cache of this application instance.
    """

    def __init__(self, registry: ModelRegistry, cache: TTLCache):
        self.users: Model = registry["users"]
        self.cache = cache

    async def find_user(self, user_id: int) -> Record:
        """Load a user or raise NotFoundError (→ 404)."""
        user = await self.users.find(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def create_user(self, attributes: Dict[str, Any]) -> Record:
        """
        Create a user after checking the email is free.

        Raises:
            ConflictError: email already registered (→ 409)
        """
        existing = await user_queries.find_by_email(self.users, attributes["email"])
        if existing is not None:
            raise ConflictError(
                "Email already exists", context={"field": "email"}
            )
        user = await self.users.create(attributes)
        self.cache.invalidate("user:stats")
        logger.info("User created: %s", user.get_key())
        return user

    async def update_user(self, user_id: int, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update to one user.

        What:    Fills the allowed fields and saves; only changed columns
                 are written.
        Who:     PUT /api/users/{id}.

        Raises:
            NotFoundError: no such user (→ 404)
            ConflictError: the new email belongs to another user (→ 409)
        """
        user = await self.find_user(user_id)

        # ── Email uniqueness ──────────────────────────────────────────────
        email = attributes.get("email")
        if email and email != user.get_attribute("email"):
            other = await user_queries.find_by_email(self.users, email)
            if other is not None and other.get_key() != user.get_key():
                raise ConflictError("Email already exists", context={"field": "email"})

        # ── Write, then drop every cached view of this user ────────────────
        user.fill(attributes)
        await user.save()
        self.cache.invalidate_prefix(user_cache_prefix(user_id))
        self.cache.invalidate("user:stats")
        logger.info("User updated: %s", user_id)
        return UserResource.from_record(user)

    async def get_user(self, user_id: int, include_posts: bool = False) -> Dict[str, Any]:
        """
        Return one user as a resource dict, optionally with its posts.

        Cached under "user:{id}:posts={bool}" until a write touches the
        user or one of its posts.

        Raises:
            NotFoundError: no such user (→ 404)
        """
        key = f"{user_cache_prefix(user_id)}posts={include_posts}"

        async def load() -> Dict[str, Any]:
            user = await self.find_user(user_id)
            if include_posts:
                await user.load("posts")
            return UserResource.from_record(user)

        return await self.cache.remember(key, load)

    async def get_user_posts(self, user_id: int) -> List[Dict[str, Any]]:
        user = await self.find_user(user_id)
        posts = await user.load("posts")
        return PostResource.collection(posts)

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Dict[str, Any]:
        """Load every user, then filter, sort and slice in memory."""
        if sort_by not in SORTABLE_FIELDS:
            sort_by = "created_at"
        users = await self.users.all()
        users = listing.filter_equal(users, "status", status)
        users = listing.search(users, search, ("name", "email"))
        users = listing.sort_records(users, sort_by, sort_order)
        page_items, pagination = listing.paginate(users, page, limit)
        logger.info("Users listed: total=%d page=%d limit=%d", pagination.total, page, limit)
        return {
            "users": UserResource.collection(page_items),
            "pagination": pagination.model_dump(),
        }

    async def delete_user(self, user_id: int) -> bool:
        """
        Delete one user; the database removes their posts with it.

        Cache invalidation:
            "user:{id}:*"  every cached view of the user
            "user:stats"   user counts
            "post:stats"   post counts, since the user's posts are gone too
        """
        user = await self.find_user(user_id)
        await user.delete()
        self.cache.invalidate_prefix(user_cache_prefix(user_id))
        self.cache.invalidate("user:stats")
        self.cache.invalidate("post:stats")
        logger.info("User deleted: %s", user_id)
        return True

    async def get_stats(self) -> Dict[str, int]:
        """Total, active, inactive and last-7-days counts, cached as "user:stats"."""
        async def compute() -> Dict[str, int]:
            users = await self.users.all()
            active = await user_queries.active(self.users)
            week_ago = datetime.now(timezone.utc) - timedelta(days=7)
            recent = [
                u for u in users
                if u.get_attribute("created_at") is not None
                and u.get_attribute("created_at") > week_ago
            ]
            return {
                "total_users": len(users),
                "active_users": len(active),
                "inactive_users": len(users) - len(active),
                "recent_users": len(recent),
            }

        return await self.cache.remember("user:stats", compute)
