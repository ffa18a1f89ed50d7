"""
Declarative record schemas.

A Schema is plain data: table name, declared fields with their cast tags,
mass-assignment and serialization rules, timestamp columns, relations and
save hooks. One generic Model engine (app.orm.model) is parameterized by a
Schema, so record types never subclass anything.

    USERS = Schema(
        name="users",
        fields=(Field("id", INTEGER), Field("name"), Field("email")),
        fillable=frozenset({"name", "email"}),
        relations={"posts": HasMany("posts", "user_id")},
    )

Columns that are not declared still load and save through the attribute
map; they just never get cast.
"""

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Mapping,
    Optional,
    Tuple,
)

from app.orm.casts import cast_value, to_storage
from app.orm.relations import Relation

if TYPE_CHECKING:
    from app.orm.record import Record

SaveHook = Callable[["Record"], Awaitable[None]]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(name: str) -> str:
    """Return `name` if it is a bare SQL identifier, else raise ValueError."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


@dataclass(frozen=True)
class Field:
    """A declared column and its optional cast tag."""

    name: str
    cast: Optional[str] = None

    def __post_init__(self) -> None:
        check_identifier(self.name)


@dataclass(frozen=True, eq=False)
class Schema:
    name: str
    fields: Tuple[Field, ...]
    table: Optional[str] = None
    primary_key: str = "id"
    fillable: FrozenSet[str] = frozenset()
    hidden: FrozenSet[str] = frozenset()
    timestamps: bool = True
    created_at_column: str = "created_at"
    updated_at_column: str = "updated_at"
    relations: Mapping[str, Relation] = field(default_factory=dict)
    before_save: Tuple[SaveHook, ...] = ()

    def __post_init__(self) -> None:
        # the registry key doubles as table name unless one is given
        if self.table is None:
            object.__setattr__(self, "table", self.name)
        check_identifier(self.table)
        check_identifier(self.primary_key)
        check_identifier(self.created_at_column)
        check_identifier(self.updated_at_column)

    @cached_property
    def casts(self) -> Dict[str, str]:
        return {f.name: f.cast for f in self.fields if f.cast}

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def cast(self, key: str, value: Any) -> Any:
        return cast_value(self.casts.get(key), value)

    def dehydrate(self, key: str, value: Any) -> Any:
        return to_storage(self.casts.get(key), value)

    def is_fillable(self, key: str) -> bool:
        return not self.fillable or key in self.fillable
