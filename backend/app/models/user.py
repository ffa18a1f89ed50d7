"""
Postboard Backend: User Schema
================================

What:  Declaration of the `users` table for the persistence layer, plus its
       query helpers (lookup by email, active users) and password checks.
How:   A Schema value; passwords are bcrypt-hashed by a before-save hook
       whenever the stored value changed, and hidden from serialization.

Columns (see alembic/versions/001_create_users_table.py):
    id, name, email (unique), password (bcrypt hash), status,
    email_verified_at, created_at, updated_at
"""

import asyncio
from typing import List, Optional

from app import security
from app.orm import DATE, INTEGER, Field, HasMany, Model, Record, Schema

USER_STATUSES = ("active", "inactive")


async def hash_changed_password(user: Record) -> None:
    password = user.get_attribute("password")
    if password and password != user.original.get("password"):
        # bcrypt is CPU-bound; keep it off the event loop
        hashed = await asyncio.to_thread(security.hash_password, password)
        user.attributes["password"] = hashed


USERS = Schema(
    name="users",
    fields=(
        Field("id", INTEGER),
        Field("name"),
        Field("email"),
        Field("password"),
        Field("status"),
        Field("email_verified_at", DATE),
        Field("created_at", DATE),
        Field("updated_at", DATE),
    ),
    fillable=frozenset({"name", "email", "password", "status"}),
    hidden=frozenset({"password"}),
    relations={"posts": HasMany("posts", "user_id")},
    before_save=(hash_changed_password,),
)


async def find_by_email(users: Model, email: str) -> Optional[Record]:
    return await users.first_where("email", "=", email)


async def active(users: Model) -> List[Record]:
    return await users.where("status", "=", "active")


async def verify_password(user: Record, password: str) -> bool:
    return await asyncio.to_thread(
        security.verify_password, password, user.get_attribute("password")
    )
