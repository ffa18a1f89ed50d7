"""
Relationship resolution by foreign-key equality.

Each relation is one `where(key, "=", value)` query against the related
model, run on first access and cached on the record under the relation
name for the rest of the instance's life. Attribute changes never clear
that cache; reload the record to see fresh related data. There is no
eager loading, so listing N records with a relation costs N queries.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Union

if TYPE_CHECKING:
    from app.orm.model import Model
    from app.orm.record import Record

logger = logging.getLogger(__name__)


async def belongs_to(
    record: "Record",
    related: "Model",
    foreign_key: str,
    owner_key: str = "id",
) -> Optional["Record"]:
    """The single owner row whose `owner_key` equals the record's `foreign_key`."""
    value = record.get_attribute(foreign_key)
    if value is None:
        return None
    matches = await related.where(owner_key, "=", value)
    return matches[0] if matches else None


async def has_many(
    record: "Record",
    related: "Model",
    foreign_key: str,
    local_key: Optional[str] = None,
) -> List["Record"]:
    """Every related row whose `foreign_key` equals the record's local key."""
    value = record.get_attribute(local_key or record.schema.primary_key)
    if value is None:
        return []
    return await related.where(foreign_key, "=", value)


async def has_one(
    record: "Record",
    related: "Model",
    foreign_key: str,
    local_key: Optional[str] = None,
) -> Optional["Record"]:
    """First match of the equivalent has_many query, or None."""
    matches = await has_many(record, related, foreign_key, local_key)
    return matches[0] if matches else None


@dataclass(frozen=True)
class BelongsTo:
    """
    Declared on a schema: `relations={"user": BelongsTo("users", "user_id")}`.

    `related` is the target table name, looked up in the model registry at
    resolve time.
    """

    related: str
    foreign_key: str
    owner_key: str = "id"

    async def resolve(self, record: "Record") -> Optional["Record"]:
        model = record.model.related_model(self.related)
        return await belongs_to(record, model, self.foreign_key, self.owner_key)


@dataclass(frozen=True)
class HasMany:
    related: str
    foreign_key: str
    local_key: Optional[str] = None

    async def resolve(self, record: "Record") -> List["Record"]:
        model = record.model.related_model(self.related)
        return await has_many(record, model, self.foreign_key, self.local_key)


@dataclass(frozen=True)
class HasOne:
    related: str
    foreign_key: str
    local_key: Optional[str] = None

    async def resolve(self, record: "Record") -> Optional["Record"]:
        model = record.model.related_model(self.related)
        return await has_one(record, model, self.foreign_key, self.local_key)


Relation = Union[BelongsTo, HasMany, HasOne]


async def load_relation(record: "Record", name: str) -> Any:
    """
    Resolve relation `name` declared on the record's schema, once.

    Raises KeyError if the schema declares no such relation.
    """
    if name in record.relations:
        return record.relations[name]
    try:
        relation = record.schema.relations[name]
    except KeyError:
        raise KeyError(
            f"{record.schema.name} has no relation named '{name}'"
        ) from None
    logger.debug("Resolving %s.%s for key %r", record.schema.name, name, record.get_key())
    value = await relation.resolve(record)
    record.relations[name] = value
    return value
