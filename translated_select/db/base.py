"""
translated_select Store — SQLAlchemy-backed storage collaborator.

Provides:
- ReferenceStore: executes SQLAlchemy Core statements, reflects tables,
  and wraps every driver failure in StoreOperationError.

Statements run on their own connection and commit on their own
(autocommit per statement) unless a transaction() block is open on the
current thread, in which case they share its connection.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional

from sqlalchemy import MetaData, Table, create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Executable

from translated_select.engine.errors import StoreOperationError

logger = logging.getLogger("translated_select.db.base")


class ReferenceStore:
    """
    Relational store used by the attribute components.

    Usage:
        store = ReferenceStore.from_url("sqlite:///metamodels.db")
        colors = store.table("tl_colors")
        rows = store.fetch_all(select(colors).where(colors.c.lang == "de"))
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._metadata = MetaData()
        self._tables: Dict[str, Table] = {}
        self._reflect_lock = threading.Lock()
        self._local = threading.local()

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> "ReferenceStore":
        """Create a store with its own engine."""
        return cls(create_engine(url, **engine_kwargs))

    @property
    def engine(self) -> Engine:
        return self._engine

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def table(self, name: str) -> Table:
        """Reflect (once) and return the named table."""
        if name in self._tables:
            return self._tables[name]
        with self._reflect_lock:
            if name not in self._tables:
                try:
                    self._tables[name] = Table(name, self._metadata, autoload_with=self._engine)
                except SQLAlchemyError as exc:
                    raise StoreOperationError(
                        f"Could not load table '{name}': {exc}",
                        table=name,
                        operation="reflect",
                    ) from exc
                logger.debug(f"Reflected table {name}")
        return self._tables[name]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def fetch_all(self, stmt: Executable) -> List[Dict[str, Any]]:
        """Run a SELECT and return every row as a column-name keyed dict."""
        return self._run(stmt, "select", lambda r: [dict(row._mapping) for row in r])

    def fetch_column(self, stmt: Executable, key: str) -> List[Any]:
        """Run a SELECT and return a single column of every row."""
        return self._run(stmt, "select", lambda r: [row._mapping[key] for row in r])

    def execute(self, stmt: Executable) -> int:
        """Run a data-changing statement and return the affected row count."""
        return self._run(stmt, "execute", lambda r: r.rowcount)

    def _run(self, stmt: Executable, operation: str, consume):
        conn: Optional[Connection] = getattr(self._local, "connection", None)
        try:
            if conn is not None:
                return consume(conn.execute(stmt))
            with self._engine.begin() as own:
                return consume(own.execute(stmt))
        except SQLAlchemyError as exc:
            raise StoreOperationError(
                f"Store operation failed: {exc}",
                operation=operation,
                statement=str(stmt),
            ) from exc

    @contextmanager
    def transaction(self) -> Generator[Connection, None, None]:
        """
        Run every statement issued on this thread inside one transaction.

        Usage:
            with store.transaction():
                resolver.set_translated_values(values, "de")
        """
        if getattr(self._local, "connection", None) is not None:
            # Nested blocks join the outer transaction.
            yield self._local.connection
            return
        try:
            conn = self._engine.connect()
            trans = conn.begin()
        except SQLAlchemyError as exc:
            raise StoreOperationError(
                f"Could not open transaction: {exc}", operation="begin",
            ) from exc
        self._local.connection = conn
        try:
            yield conn
            trans.commit()
        except Exception:
            trans.rollback()
            raise
        finally:
            self._local.connection = None
            conn.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def health_check(self) -> bool:
        """Check if the engine can connect."""
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning(f"Store health check failed: {exc}")
            return False

    def dispose(self) -> None:
        """Close the connection pool."""
        self._engine.dispose()
