"""SQLAlchemy engine factory and session helpers.

This module provides:

* ``create_shipyard_engine``  -- Create a SA engine from a URL with sane
  per-backend defaults.
* ``ShipyardSession``         -- A ``Session`` subclass with
  ``expire_on_commit=False``.
* ``shipyard_session_factory`` -- ``sessionmaker`` producing ``ShipyardSession``.
* ``create_schema``           -- ``metadata.create_all`` for every table.
* ``begin_write``             -- Mark a session transaction as a writer.

SQLite has no row-level locks, so ``SELECT ... FOR UPDATE`` is dropped by
the SQLite compiler.  Transactions started through :func:`begin_write` are
opened with ``BEGIN IMMEDIATE``, which takes the database write lock up
front; concurrent writers wait up to ``busy_timeout`` seconds for it.  All
other transactions use a plain ``BEGIN``, so readers keep working against
the WAL while a writer holds the lock.

Tags:
    shipyard-core, orm, sqlalchemy, session, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shipyard.core.orm.base import ShipyardBase

WRITE_OPTION = "shipyard_write"


def create_shipyard_engine(
    url: str = "sqlite:///shipyard.db",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    busy_timeout: float = 30.0,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql+psycopg://…``, etc.)
    echo:
        If ``True``, log all SQL.
    pool_size:
        Connection pool size (ignored for SQLite).
    busy_timeout:
        Seconds a SQLite connection waits for the write lock.
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if url.startswith("sqlite"):
        connect_args = kwargs.setdefault("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", busy_timeout)
        in_memory = url in ("sqlite://", "sqlite:///:memory:")
        if in_memory:
            # One shared connection, otherwise every checkout sees an empty database
            kwargs.setdefault("poolclass", StaticPool)

        engine = _sa_create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            # Hand transaction control to the "begin" listener below
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _begin(conn: Any) -> None:
            if conn.get_execution_options().get(WRITE_OPTION):
                conn.exec_driver_sql("BEGIN IMMEDIATE")
            else:
                conn.exec_driver_sql("BEGIN")

        return engine

    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size

    return _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class ShipyardSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Rows read inside a committed transaction stay usable afterwards, which
    is what the repositories rely on when mapping rows to dataclasses.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def shipyard_session_factory(engine: Engine) -> sessionmaker[ShipyardSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``ShipyardSession`` instances."""
    return sessionmaker(bind=engine, class_=ShipyardSession)


def create_schema(engine: Engine) -> None:
    """Create every shipyard table that does not exist yet."""
    import shipyard.core.orm.tables  # noqa: F401

    ShipyardBase.metadata.create_all(engine)


def begin_write(session: Session) -> None:
    """Open *session*'s transaction as a writer.

    Must be the first thing done inside ``session.begin()``.  On SQLite the
    transaction then starts with ``BEGIN IMMEDIATE``; other backends ignore
    the flag.
    """
    session.connection(execution_options={WRITE_OPTION: True})
