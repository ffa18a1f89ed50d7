"""
Model: the generic persistence engine for one Schema.

Builds parameterized SQL for a single table and materializes rows into
Records. Table and column names come from the Schema (validated
identifiers); every value travels as a bound `?` parameter through the
QueryExecutor.

Statement shapes:
    SELECT * FROM t WHERE pk = ? LIMIT 1           find / find_or_fail
    SELECT * FROM t                                all
    SELECT * FROM t WHERE col <op> ?               where
    INSERT INTO t (a, b) VALUES (?, ?)             save (new)
    UPDATE t SET a = ? WHERE pk = ?                save (dirty fields only)
    DELETE FROM t WHERE pk = ?                     delete / destroy
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from app.exceptions import NotFoundError
from app.orm.record import Record
from app.orm.schema import Schema, check_identifier

if TYPE_CHECKING:
    from app.database import QueryExecutor
    from app.orm.registry import ModelRegistry

logger = logging.getLogger(__name__)

OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE"})


def normalize_operator(operator: str) -> str:
    normalized = " ".join(str(operator).split()).upper()
    if normalized not in OPERATORS:
        raise ValueError(f"Unsupported comparison operator: {operator!r}")
    return normalized


class Model:
    """
    CRUD verbs for one collection.

    Args:
        schema:   Declaration of the table this model maps.
        executor: Anything with `async execute(sql, params) -> QueryResult`.
        registry: Used to look up the targets of declared relations.
    """

    def __init__(
        self,
        schema: Schema,
        executor: "QueryExecutor",
        registry: Optional["ModelRegistry"] = None,
    ):
        self.schema = schema
        self.executor = executor
        self.registry = registry

    @property
    def table(self) -> str:
        return self.schema.table

    def related_model(self, name: str) -> "Model":
        if self.registry is None:
            raise LookupError(f"Model '{self.schema.name}' is not attached to a registry")
        return self.registry[name]

    # ── Construction ──────────────────────────────────────────────────────

    def new(self, attributes: Optional[Mapping[str, Any]] = None) -> Record:
        """A pending record, mass-assigned through the fillable rules."""
        return Record(self).fill(attributes or {})

    def hydrate(self, row: Mapping[str, Any]) -> Record:
        return Record(self, row, persisted=True)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def find(self, key: Any) -> Optional[Record]:
        """At most one row by primary key; None when nothing matches."""
        pk = self.schema.primary_key
        result = await self.executor.execute(
            f"SELECT * FROM {self.table} WHERE {pk} = ? LIMIT 1", [key]
        )
        if not result.rows:
            return None
        return self.hydrate(result.rows[0])

    async def find_or_fail(self, key: Any) -> Record:
        """
        Like find(), but a miss is an error.

        Raises:
            NotFoundError: carries the schema name and the key (→ 404)
        """
        record = await self.find(key)
        if record is None:
            raise NotFoundError(resource=self.schema.name, resource_id=key)
        return record

    async def all(self) -> List[Record]:
        """Every row, unpaginated; callers slice the list themselves."""
        result = await self.executor.execute(f"SELECT * FROM {self.table}", [])
        return [self.hydrate(row) for row in result.rows]

    async def where(self, column: str, operator: str, value: Any) -> List[Record]:
        """
        Single-predicate fetch in database order.

        The value is always bound; `column` and `operator` are interpolated
        and so are checked first.

        Raises:
            ValueError: `column` is not a plain identifier, or `operator` is
                        not one of =, !=, <>, <, <=, >, >=, like, not like
        """
        check_identifier(column)
        op = normalize_operator(operator)
        result = await self.executor.execute(
            f"SELECT * FROM {self.table} WHERE {column} {op} ?",
            [self.schema.dehydrate(column, value)],
        )
        return [self.hydrate(row) for row in result.rows]

    async def first_where(self, column: str, operator: str, value: Any) -> Optional[Record]:
        matches = await self.where(column, operator, value)
        return matches[0] if matches else None

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, attributes: Mapping[str, Any]) -> Record:
        """new() + save(); keys outside `fillable` are dropped."""
        record = self.new(attributes)
        return await record.save()

    async def destroy(self, key: Any) -> bool:
        """Delete by key; False when there was no such row."""
        record = await self.find(key)
        if record is None:
            return False
        return await record.delete()

    async def perform_insert(self, record: Record) -> None:
        """
        INSERT every current attribute of `record`.

        A None primary key is left out of the column list so storage can
        generate it; the generated `insert_id` is then written back to the
        record. Called by Record.save() only.
        """
        pk = self.schema.primary_key
        values: Dict[str, Any] = {
            key: self.schema.dehydrate(key, value)
            for key, value in record.attributes.items()
            if not (key == pk and value is None)
        }
        for column in values:
            check_identifier(column)

        if values:
            columns = ", ".join(values)
            placeholders = ", ".join("?" for _ in values)
            sql = f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {self.table} DEFAULT VALUES"
        result = await self.executor.execute(sql, list(values.values()))

        if record.get_key() is None:
            if result.insert_id is None:
                logger.warning("Insert into %s returned no generated key", self.table)
            else:
                record.set_attribute(pk, result.insert_id)
        logger.debug("Inserted %s %r", self.table, record.get_key())

    async def perform_update(self, record: Record, dirty: Mapping[str, Any]) -> None:
        """UPDATE the `dirty` columns of the row keyed by the record's primary key."""
        pk = self.schema.primary_key
        for column in dirty:
            check_identifier(column)
        assignments = ", ".join(f"{column} = ?" for column in dirty)
        params = [self.schema.dehydrate(key, value) for key, value in dirty.items()]
        params.append(record.get_key())
        await self.executor.execute(
            f"UPDATE {self.table} SET {assignments} WHERE {pk} = ?", params
        )
        logger.debug("Updated %s %r fields=%s", self.table, record.get_key(), sorted(dirty))

    async def perform_delete(self, record: Record) -> None:
        pk = self.schema.primary_key
        await self.executor.execute(
            f"DELETE FROM {self.table} WHERE {pk} = ?", [record.get_key()]
        )
        logger.debug("Deleted %s %r", self.table, record.get_key())

    def __repr__(self) -> str:
        return f"<Model {self.schema.name} table={self.table}>"
