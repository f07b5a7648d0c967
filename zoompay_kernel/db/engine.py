"""
Module: zoompay_kernel.db.engine
Responsibility: The process-wide SQLAlchemy engine and session factory for
    the document tables, plus a transactional ``session_scope`` for scripts.
Architecture position: Kernel > DB.  Imports db/base.py and logging only;
    ``create_tables`` reaches the module ORM registry lazily.

Backends:
    - PostgreSQL (psycopg2) in production: pooled connections, READ
      COMMITTED, lifecycle transitions take explicit row locks.
    - SQLite for local use and tests.  An in-memory URL is pinned to a
      single shared connection, otherwise each session would see its own
      empty database.

Failure modes:
    - RuntimeError from get_engine/get_session before init_engine_from_url().
"""

import atexit
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from zoompay_kernel.db.base import Base
from zoompay_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Database engine not initialized; call init_engine_from_url() first"


def _sqlite_options(url: URL) -> dict[str, Any]:
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


def _server_options(
    pool_size: int, max_overflow: int, pool_timeout: int, pool_recycle: int
) -> dict[str, Any]:
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
        "pool_recycle": pool_recycle,
        "pool_pre_ping": True,
        "isolation_level": "READ COMMITTED",
    }


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the engine for ``database_url`` and make it the process default.

    Pool settings apply to server databases only.  Calling again replaces
    the previous engine without disposing it; use ``reset_engine()`` for that.
    """
    global _engine, _sessions

    url = make_url(database_url)
    backend = url.get_backend_name()
    if backend == "sqlite":
        options = _sqlite_options(url)
    else:
        options = _server_options(pool_size, max_overflow, pool_timeout, pool_recycle)

    _engine = create_engine(url, echo=echo, **options)
    _sessions = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "backend": backend,
            "database": url.database,
            "pooled": backend != "sqlite",
        },
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session() -> Session:
    """A new session bound to the default engine.  The caller closes it."""
    if _sessions is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _sessions()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Commit on success, roll back and re-raise on error, always close.

        with session_scope() as session:
            store = make_document_store(session)
            ...
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("session_scope_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create the receipts, vouchers and users tables if they do not exist."""
    from zoompay_modules._orm_registry import import_all_orm_models

    import_all_orm_models()
    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop every document table.  Tests and throwaway databases only."""
    Base.metadata.drop_all(get_engine())
    logger.info("tables_dropped")


def reset_engine() -> None:
    """Dispose the default engine and forget the session factory."""
    global _engine, _sessions
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None


atexit.register(reset_engine)
