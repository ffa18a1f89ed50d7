"""
Postboard Backend: Active-Record Persistence Layer
====================================================

What:  Record container, attribute casting, dirty-tracking CRUD verbs and
       foreign-key relationship resolution over hand-built SQL.
How:   A Schema declares a table; a Model engine parameterized by that
       Schema issues parameterized SQL through a QueryExecutor and returns
       Records. A ModelRegistry wires models together for relations.

    registry = ModelRegistry(executor, [USERS, POSTS])
    users = registry["users"]
    ann = await users.create({"name": "Ann", "email": "ann@x.com", "password": "pw"})
    posts = await ann.load("posts")
"""

from app.orm.casts import BOOLEAN, DATE, FLOAT, INTEGER, JSON, cast_value
from app.orm.model import Model
from app.orm.record import Record
from app.orm.registry import ModelRegistry
from app.orm.relations import BelongsTo, HasMany, HasOne, belongs_to, has_many, has_one
from app.orm.schema import Field, Schema

__all__ = [
    "BOOLEAN",
    "DATE",
    "FLOAT",
    "INTEGER",
    "JSON",
    "BelongsTo",
    "Field",
    "HasMany",
    "HasOne",
    "Model",
    "ModelRegistry",
    "Record",
    "Schema",
    "belongs_to",
    "cast_value",
    "has_many",
    "has_one",
]
