"""
Postboard Backend: Domain Schemas
===================================

Every record type the application persists, and the registry factory that
binds them to a query executor.
"""

from typing import TYPE_CHECKING

from app.models.post import POSTS
from app.models.user import USERS
from app.orm import ModelRegistry

if TYPE_CHECKING:
    from app.database import QueryExecutor

SCHEMAS = (USERS, POSTS)


def build_registry(executor: "QueryExecutor") -> ModelRegistry:
    return ModelRegistry(executor, SCHEMAS)
