"""
Postboard Backend: Query Executor
===================================

What:  Async SQLAlchemy engine factory plus the QueryExecutor the ORM talks to.
How:   The ORM hands over SQL text with positional `?` placeholders and a
       parameter list. The executor rewrites the placeholders into named
       SQLAlchemy binds (`:p0`, `:p1`, ...), runs the statement on a pooled
       connection and returns a QueryResult (rows, insert id, row count).
Who:   Created once in the FastAPI lifespan and stored on `app.state`; used
       by the model registry and the health check.
When:  Engine at startup, one connection per statement (or per transaction).

Parameter Binding:
    Values are ALWAYS bound, never formatted into the SQL string. Only table
    and column identifiers are interpolated by the ORM, and those come from
    static schema declarations.

Transactions:
    `async with executor.transaction():` pins one connection to the current
    task through a ContextVar. Every execute() inside the block reuses it;
    the block commits on success and rolls back on any exception. The ORM
    never opens a transaction on its own.

Errors:
    Any SQLAlchemyError is re-raised as StorageError with the driver error
    chained as __cause__. Nothing is retried here.
"""

import itertools
import logging
import re
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import DateTime, bindparam, event, text
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.sql.elements import TextClause

from app.config import settings
from app.exceptions import StorageError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\?")


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Build the async engine from settings.

    Pool sizing is only passed for server databases; SQLite's pool class
    does not accept it.
    """
    url = database_url or settings.database_url
    options: Dict[str, Any] = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    engine = create_async_engine(url, **options)
    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    # SQLite leaves ON DELETE CASCADE inert unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@dataclass
class QueryResult:
    """Materialized outcome of one statement."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    insert_id: Optional[Any] = None
    rowcount: int = 0

    @classmethod
    def from_cursor(cls, result: CursorResult) -> "QueryResult":
        if result.returns_rows:
            rows = [dict(row) for row in result.mappings().all()]
            return cls(rows=rows, rowcount=len(rows))
        return cls(insert_id=result.lastrowid, rowcount=result.rowcount)


def bind_positional(sql: str, params: Sequence[Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite `?` placeholders into `:pN` named binds.

    Raises ValueError when the placeholder count and parameter count differ.
    """
    params = list(params)
    counter = itertools.count()
    names: List[str] = []

    def _replace(_match: "re.Match[str]") -> str:
        name = f"p{next(counter)}"
        names.append(name)
        return f":{name}"

    rewritten = _PLACEHOLDER.sub(_replace, sql)
    if len(names) != len(params):
        raise ValueError(
            f"Statement has {len(names)} placeholders but {len(params)} parameters"
        )
    return rewritten, dict(zip(names, params))


def build_clause(statement: str, binds: Dict[str, Any]) -> TextClause:
    """Wrap the statement, typing datetime binds so each dialect formats them."""
    clause = text(statement)
    typed = [
        bindparam(name, type_=DateTime(timezone=True))
        for name, value in binds.items()
        if isinstance(value, datetime)
    ]
    if typed:
        clause = clause.bindparams(*typed)
    return clause


class QueryExecutor:
    """
    Thin async facade over an SQLAlchemy engine.

    The only I/O surface of the persistence layer. Tests swap it for an
    AsyncMock with the same `execute` signature.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._connection: ContextVar[Optional[AsyncConnection]] = ContextVar(
            f"postboard_connection_{id(self)}", default=None
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """
        Run one parameterized statement.

        Args:
            sql:    SQL text with `?` placeholders.
            params: Values bound positionally to the placeholders.

        Returns:
            QueryResult with rows for SELECTs, insert id / rowcount otherwise.

        Raises:
            StorageError: the database rejected or failed the statement.
        """
        statement, binds = bind_positional(sql, params)
        clause = build_clause(statement, binds)
        logger.debug("SQL: %s | params=%r", sql, list(params))
        try:
            active = self._connection.get()
            if active is not None:
                result = await active.execute(clause, binds)
                return QueryResult.from_cursor(result)
            async with self._engine.begin() as conn:
                result = await conn.execute(clause, binds)
                return QueryResult.from_cursor(result)
        except SQLAlchemyError as exc:
            logger.error("Query failed: %s | %s", sql, exc)
            raise StorageError(original=exc, context={"sql": sql}) from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["QueryExecutor"]:
        """
        Begin/commit/rollback pass-through.

        Nested blocks join the outer transaction instead of opening a new one.
        """
        if self._connection.get() is not None:
            yield self
            return
        try:
            async with self._engine.begin() as conn:
                token = self._connection.set(conn)
                try:
                    yield self
                finally:
                    self._connection.reset(token)
        except SQLAlchemyError as exc:
            logger.error("Transaction failed: %s", exc)
            raise StorageError(original=exc) from exc

    async def ping(self) -> bool:
        """Lightweight connectivity probe used by /health."""
        try:
            await self.execute("SELECT 1")
        except StorageError:
            return False
        return True

    async def dispose(self) -> None:
        """Close every pooled connection. Called on application shutdown."""
        await self._engine.dispose()
