"""
translated_select Store Session Management.

Single entry point for initialising the process-wide ReferenceStore plus a
context manager for callers that want a batch of writes to be atomic.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy.engine import Connection

from translated_select.db.base import ReferenceStore
from translated_select.engine.config import DatabaseConfig
from translated_select.engine.logging import log, log_system_event

_store: Optional[ReferenceStore] = None


def init_store(
    db_url: str,
    pool_pre_ping: bool = True,
    echo: bool = False,
) -> ReferenceStore:
    """
    Create the process-wide ReferenceStore.

    Args:
        db_url:        SQLAlchemy connection URL.
        pool_pre_ping: SQLAlchemy engine pool_pre_ping.
        echo:          Log every emitted statement through SQLAlchemy's logger.

    Returns:
        The initialised store (also available via get_store()).
    """
    global _store
    if _store is not None:
        _store.dispose()
    _store = ReferenceStore.from_url(db_url, pool_pre_ping=pool_pre_ping, echo=echo)
    log(log_system_event("store_initialized", details={"dialect": _store.engine.dialect.name}))
    return _store


def init_store_from_config(config: DatabaseConfig) -> ReferenceStore:
    return init_store(config.url, pool_pre_ping=config.pool_pre_ping, echo=config.echo)


def get_store() -> ReferenceStore:
    """Get the process-wide store."""
    if _store is None:
        raise RuntimeError("Store not initialized. Call init_store() first.")
    return _store


@contextmanager
def store_scope() -> Generator[Connection, None, None]:
    """
    Context manager running every statement of the block in one transaction
    on the process-wide store, with commit/rollback.

    Usage:
        with store_scope():
            attribute.set_data_for(values)
    """
    with get_store().transaction() as conn:
        yield conn


def close_store() -> None:
    """Dispose the process-wide store. Used during shutdown."""
    global _store
    if _store is not None:
        _store.dispose()
        _store = None
