import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from fastapi import Request
from sqlalchemy import inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import Executable

from catalog.exceptions import PoolExhaustedError

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()

Statement = Union[str, Executable]


@dataclass
class QueryResult:
    """Outcome of a single statement: returned rows or affected-row count."""
    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    lastrowid: Optional[int] = None


class ConnectionGate:
    """
    Admission control in front of the engine pool.

    At most `capacity` statements run at once. Further callers wait in a
    queue of at most `queue_limit` entries (0 means unbounded); once the
    queue is full, acquisition fails immediately with PoolExhaustedError.
    """

    def __init__(self, capacity: int, queue_limit: int = 0):
        self.capacity = capacity
        self.queue_limit = queue_limit
        self._semaphore = asyncio.Semaphore(capacity)
        self._waiting = 0

    @property
    def waiting(self) -> int:
        return self._waiting

    @asynccontextmanager
    async def slot(self):
        if self._semaphore.locked():
            if self.queue_limit and self._waiting >= self.queue_limit:
                raise PoolExhaustedError(self.capacity, self._waiting)
            self._waiting += 1
            try:
                await self._semaphore.acquire()
            finally:
                self._waiting -= 1
        else:
            await self._semaphore.acquire()
        try:
            yield
        finally:
            self._semaphore.release()


def _preview(statement: Executable, limit: int = 100) -> str:
    sql = " ".join(str(statement).split())
    return sql if len(sql) <= limit else sql[:limit] + "..."


def _driver_error_code(exc: BaseException) -> Any:
    orig = getattr(exc, "orig", None)
    args = getattr(orig, "args", None)
    return args[0] if args else None


class RelationalDatabase:
    """
    Thin async access layer for the relational store.

    Every call to execute_query() runs in its own short transaction, so
    each statement is committed individually.
    """

    def __init__(self, engine: AsyncEngine, pool_size: int = 20, queue_limit: int = 100):
        self.engine = engine
        self.gate = ConnectionGate(pool_size, queue_limit)

    @classmethod
    def from_url(
        cls,
        url: str,
        pool_size: int = 20,
        queue_limit: int = 100,
        **engine_kwargs,
    ) -> "RelationalDatabase":
        options: dict[str, Any] = {"pool_pre_ping": True}
        if make_url(url).get_backend_name() != "sqlite":
            options.update(pool_size=pool_size, max_overflow=0)
        options.update(engine_kwargs)
        engine = create_async_engine(url, **options)
        return cls(engine, pool_size=pool_size, queue_limit=queue_limit)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def execute_query(
        self,
        statement: Statement,
        parameters: Optional[Union[dict, list[dict]]] = None,
    ) -> QueryResult:
        """
        Execute one parameterized statement.

        Args:
            statement: SQL text with named binds, or a SQLAlchemy executable
            parameters: Bind values (a list of dicts runs an executemany)

        Returns:
            QueryResult with rows for SELECT-like statements, rowcount and
            lastrowid otherwise

        Raises:
            PoolExhaustedError: If no connection slot could be queued for
            SQLAlchemyError: Any driver failure, after being logged
        """
        if isinstance(statement, str):
            statement = text(statement)

        logger.debug(f"Executing query: {_preview(statement)}")
        logger.debug(f"Parameters: {parameters}")

        try:
            async with self.gate.slot():
                async with self.engine.begin() as conn:
                    result = await conn.execute(statement, parameters)
                    if result.returns_rows:
                        rows = [dict(row) for row in result.mappings()]
                        outcome = QueryResult(rows=rows, rowcount=len(rows))
                    else:
                        outcome = QueryResult(rowcount=result.rowcount)
                        if getattr(statement, "is_insert", False):
                            outcome.lastrowid = result.lastrowid
        except (SQLAlchemyError, PoolExhaustedError) as e:
            logger.error(
                f"Query failed: {type(e).__name__} "
                f"(code={_driver_error_code(e)}): {e} | "
                f"query={_preview(statement, limit=1000)} | params={parameters}"
            )
            raise

        logger.debug(f"Query OK, rows: {outcome.rowcount}")
        return outcome

    async def check_connection(self) -> bool:
        """Open a connection and run SELECT 1. Never raises."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Relational store not available: {e}")
            return False

    async def describe_table(self, table_name: str) -> Optional[list[dict[str, Any]]]:
        """
        Reflect the columns of a table.

        Returns:
            Column dicts as produced by the SQLAlchemy inspector, each with an
            extra `primary_key` flag, or None if the table does not exist
        """
        def _describe(sync_conn):
            inspector = inspect(sync_conn)
            if not inspector.has_table(table_name):
                return None
            pk = inspector.get_pk_constraint(table_name) or {}
            pk_columns = set(pk.get("constrained_columns") or [])
            return [
                dict(column, primary_key=column["name"] in pk_columns)
                for column in inspector.get_columns(table_name)
            ]

        async with self.gate.slot():
            async with self.engine.connect() as conn:
                return await conn.run_sync(_describe)

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_relational_db(request: Request) -> RelationalDatabase:
    """Dependency returning the relational store bound to the running app."""
    return request.app.state.relational_db
