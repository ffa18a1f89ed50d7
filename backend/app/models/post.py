"""
Postboard Backend: Post Schema
================================

What:  Declaration of the `posts` table and its status scopes.

Columns (see alembic/versions/002_create_posts_table.py):
    id, title, content, user_id (FK users.id, cascade delete), status,
    created_at, updated_at

Status lifecycle: draft → published → archived (any transition allowed).
"""

from typing import List

from app.orm import DATE, INTEGER, BelongsTo, Field, Model, Record, Schema

POST_STATUSES = ("draft", "published", "archived")

POSTS = Schema(
    name="posts",
    fields=(
        Field("id", INTEGER),
        Field("title"),
        Field("content"),
        Field("user_id", INTEGER),
        Field("status"),
        Field("created_at", DATE),
        Field("updated_at", DATE),
    ),
    fillable=frozenset({"title", "content", "user_id", "status"}),
    relations={"user": BelongsTo("users", "user_id")},
)


async def published(posts: Model) -> List[Record]:
    return await posts.where("status", "=", "published")


async def drafts(posts: Model) -> List[Record]:
    return await posts.where("status", "=", "draft")


async def by_user(posts: Model, user_id: int) -> List[Record]:
    return await posts.where("user_id", "=", user_id)
