"""
Record: one loaded or pending row with cast attributes.

A Record owns its attribute map, the `original` snapshot used for dirty
tracking, the `persisted` flag and the relation cache. SQL lives in the
Model it belongs to; the record only decides *what* to write.

Lifecycle:
    model.new({...})      → persisted=False, original={}
    model.hydrate(row)    → persisted=True,  original == attributes
    await record.save()   → INSERT (new) or UPDATE of dirty fields only
    await record.delete() → DELETE by key, persisted=False
"""

import logging
import math
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from app.exceptions import NotFoundError, PreconditionError
from app.orm.relations import load_relation

if TYPE_CHECKING:
    from app.orm.model import Model
    from app.orm.schema import Schema

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def same_value(left: Any, right: Any) -> bool:
    """Equality for dirty tracking; NaN (a failed numeric cast) equals NaN."""
    if left is right or left == right:
        return True
    return (
        isinstance(left, float)
        and isinstance(right, float)
        and math.isnan(left)
        and math.isnan(right)
    )


class Record:
    """
    In-memory representation of one row of a collection.

    Attributes:
        attributes: Current field values, cast on write.
        original:   Snapshot from the last load/save; never touched elsewhere.
        persisted:  True when a stored row backs this record.
        relations:  Resolved relations by name; filled lazily, never invalidated.
    """

    def __init__(
        self,
        model: "Model",
        attributes: Optional[Mapping[str, Any]] = None,
        *,
        persisted: bool = False,
    ):
        self._model = model
        self.attributes: Dict[str, Any] = {}
        for key, value in (attributes or {}).items():
            self.attributes[key] = model.schema.cast(key, value)
        self.persisted = persisted
        self.original: Dict[str, Any] = dict(self.attributes) if persisted else {}
        self.relations: Dict[str, Any] = {}

    # ── Identity ──────────────────────────────────────────────────────────

    @property
    def model(self) -> "Model":
        return self._model

    @property
    def schema(self) -> "Schema":
        return self._model.schema

    def get_key(self) -> Any:
        return self.attributes.get(self.schema.primary_key)

    # ── Attribute store ───────────────────────────────────────────────────

    def get_attribute(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def set_attribute(self, key: str, value: Any) -> "Record":
        self.attributes[key] = self.schema.cast(key, value)
        return self

    def fill(self, attributes: Mapping[str, Any]) -> "Record":
        """
        Mass-assign every key allowed by the schema's fillable set.

        Disallowed keys are dropped without error; validate beforehand if a
        strict contract is needed.
        """
        for key, value in attributes.items():
            if self.schema.is_fillable(key):
                self.set_attribute(key, value)
        return self

    def get_dirty(self) -> Dict[str, Any]:
        """Fields whose value differs from `original`, primary key excluded."""
        pk = self.schema.primary_key
        return {
            key: value
            for key, value in self.attributes.items()
            if key != pk
            and (key not in self.original or not same_value(self.original[key], value))
        }

    def is_dirty(self, *keys: str) -> bool:
        dirty = self.get_dirty()
        if not keys:
            return bool(dirty)
        return any(key in dirty for key in keys)

    # ── Persistence ───────────────────────────────────────────────────────

    async def save(self) -> "Record":
        """
        Insert a new record, or update only the dirty fields of a stored one.

        A stored record with nothing dirty issues no statement at all and its
        updated timestamp is left alone. Storage failures propagate as
        StorageError and leave the record as it was before the call; hook
        output (e.g. the password hash) is discarded with it.
        """
        schema = self.schema
        pending = dict(self.attributes)
        try:
            for hook in schema.before_save:
                await hook(self)

            if self.persisted:
                dirty = self.get_dirty()
                if not dirty:
                    return self
                if schema.timestamps:
                    now = utcnow()
                    self.attributes[schema.updated_at_column] = now
                    dirty[schema.updated_at_column] = now
                await self._model.perform_update(self, dirty)
            else:
                if schema.timestamps:
                    now = utcnow()
                    self.attributes[schema.created_at_column] = now
                    self.attributes[schema.updated_at_column] = now
                await self._model.perform_insert(self)
                self.persisted = True
        except Exception:
            # hooks and timestamps only stick once the row is written
            self.attributes = pending
            raise

        self.original = dict(self.attributes)
        return self

    async def delete(self) -> bool:
        if not self.persisted:
            raise PreconditionError(
                "Cannot delete a record that does not exist",
                context={"table": self.schema.table},
            )
        await self._model.perform_delete(self)
        self.persisted = False
        return True

    async def refresh(self) -> "Record":
        """Reload attributes from storage and drop cached relations."""
        if not self.persisted:
            raise PreconditionError(
                "Cannot refresh a record that does not exist",
                context={"table": self.schema.table},
            )
        fresh = await self._model.find(self.get_key())
        if fresh is None:
            raise NotFoundError(resource=self.schema.name, resource_id=self.get_key())
        self.attributes = dict(fresh.attributes)
        self.original = dict(fresh.attributes)
        self.relations = {}
        return self

    # ── Relations ─────────────────────────────────────────────────────────

    async def load(self, name: str) -> Any:
        """Resolve a declared relation, querying only on first access."""
        return await load_relation(self, name)

    def relation_loaded(self, name: str) -> bool:
        return name in self.relations

    # ── Serialization ─────────────────────────────────────────────────────

    def to_serializable(self) -> Dict[str, Any]:
        """Attributes minus hidden fields, with loaded relations flattened."""
        data = {
            key: value
            for key, value in self.attributes.items()
            if key not in self.schema.hidden
        }
        for name, value in self.relations.items():
            if isinstance(value, list):
                data[name] = [
                    item.to_serializable() if isinstance(item, Record) else item
                    for item in value
                ]
            elif isinstance(value, Record):
                data[name] = value.to_serializable()
            else:
                data[name] = value
        return data

    def __repr__(self) -> str:
        state = "persisted" if self.persisted else "new"
        return f"<Record {self.schema.name}({self.schema.primary_key}={self.get_key()!r}) {state}>"
