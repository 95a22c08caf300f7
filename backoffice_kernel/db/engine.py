"""
Module: backoffice_kernel.db.engine
Responsibility: Process-wide SQLAlchemy engine and session factory for the
    key-value draft store, plus a transactional ``session_scope``.
Architecture position: Kernel > DB.  May import from db/base.py and, inside
    ``create_tables``, the ORM models so their tables are registered.

Invariants enforced:
    - SQLite URLs (file or ``sqlite://`` in-memory) use a single shared
      connection through ``StaticPool``, so an in-memory store keeps its
      rows between sessions.
    - Sessions never expire loaded objects on commit.

Failure modes:
    - RuntimeError from any accessor called before ``init_engine_from_url``.
"""

import atexit
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backoffice_kernel.db.base import Base
from backoffice_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_NOT_INITIALIZED = "Database engine is not initialized; call init_engine_from_url() first"

_engine: Engine | None = None
_factory: sessionmaker[Session] | None = None


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine and session factory, replacing any previous ones.

    Args:
        database_url: SQLAlchemy URL, e.g. ``sqlite://`` or
            ``sqlite:///drafts.db``.
        echo: Log every SQL statement.
    """
    global _engine, _factory

    reset_engine()

    url = make_url(database_url)
    options: dict = {"echo": echo}
    if url.get_backend_name() == "sqlite":
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True

    _engine = create_engine(url, **options)
    _factory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "database": url.database or ":memory:"},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _factory


def get_session() -> Session:
    """A new session from the configured factory."""
    return get_session_factory()()


@contextmanager
def session_scope(factory: sessionmaker[Session] | None = None) -> Iterator[Session]:
    """
    One transaction: commit on normal exit, roll back and re-raise otherwise.

    Usage:
        with session_scope() as session:
            session.add(entry)
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """Create every table registered on ``Base``."""
    import backoffice_kernel.models  # noqa: F401

    Base.metadata.create_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _factory = None


atexit.register(reset_engine)
