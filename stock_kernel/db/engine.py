"""
Module: stock_kernel.db.engine
Responsibility: Own the process-wide SQLAlchemy engine and session factory
    that hold the snapshot document, and provide ``session_scope`` for
    commit-or-rollback units of work.
Architecture position: Kernel > DB.  Imports only db/base.py and, lazily,
    the models package so that their tables register on ``Base.metadata``.

Invariants enforced:
    - An in-memory SQLite database is reachable from every session and
      thread (one shared connection through StaticPool).
    - ``session_scope`` never leaves a session open: it commits on normal
      exit, rolls back on error, and always closes.

Failure modes:
    - RuntimeError when a session or the engine is requested before
      ``init_engine_from_url``.
"""

import atexit
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from stock_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_NOT_READY = "Database engine not initialized; call init_engine_from_url() first."

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _engine_options(database_url: str, pool_pre_ping: bool) -> dict[str, Any]:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {"pool_pre_ping": pool_pre_ping}


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_pre_ping: bool = True,
) -> Engine:
    """
    Create the engine for ``database_url`` (e.g. ``sqlite:///plant.db``, or
    ``sqlite://`` for an in-memory database) and bind a session factory to
    it.  Calling again replaces the previous engine.
    """
    global _engine, _session_factory

    reset_engine()
    _engine = create_engine(
        database_url, echo=echo, **_engine_options(database_url, pool_pre_ping)
    )
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "database": _engine.url.database},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_READY)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError(_NOT_READY)
    return _session_factory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope(
    session_factory: sessionmaker[Session] | None = None,
) -> Iterator[Session]:
    """
    Unit of work over one session::

        with session_scope() as session:
            session.add(row)

    The caller's exception is re-raised after rollback.
    """
    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("session_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from stock_kernel.db.base import Base
    import stock_kernel.models  # noqa: F401  (registers app_state)

    return Base.metadata


def create_tables(engine: Engine | None = None) -> None:
    _metadata().create_all(engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    """Drop every table. Tests only."""
    _metadata().drop_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose the current engine, if any, and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(reset_engine)
