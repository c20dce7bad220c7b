"""
Per-application release version assignment.

:meth:`VersionSequencer.next_version` takes an exclusive lock for the
application, then reads its current maximum version in a separate statement
and returns max + 1.  It must run inside the transaction that then inserts
the release row: the lock is held until that transaction commits or rolls
back.  A second creator for the same application blocks on the lock; once
it is granted, the ``max()`` read is a new statement and so, under READ
COMMITTED, sees the row the first creator committed.  Reading the maximum
from the locking statement itself would not: PostgreSQL re-checks only the
rows that statement's snapshot already saw.

Lock strategies
---------------
``rows`` (default)
    ``SELECT id FROM releases WHERE app_id = :app FOR UPDATE``, then
    ``SELECT max(version) ...``.  Only existing rows can be locked: for an
    application with no releases yet there is nothing to lock, and two
    concurrent first releases can both compute version 1.  On backends with
    row locks the loser then fails on ``uq_releases_app_version``.

``app``
    Ensures a row for the application exists in ``app_locks`` and locks it
    ``FOR UPDATE`` before reading the maximum.  Covers the first release as
    well, at the cost of one row per application.

On SQLite ``FOR UPDATE`` is not rendered; release inserts run in
``BEGIN IMMEDIATE`` transactions instead (see :mod:`shipyard.core.orm.session`),
which serialises all writers under either strategy.

Tags:
    releases, versioning, locking, transactions
"""

from __future__ import annotations

from sqlalchemy import Select, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shipyard.core.logging import get_logger
from shipyard.core.orm.tables import AppLockTable, ReleaseTable
from shipyard.core.settings import LockStrategy

logger = get_logger(__name__)


def lock_releases_stmt(app_name: str) -> Select:
    """Existing release rows of *app_name*, locked `FOR UPDATE`."""
    return (
        select(ReleaseTable.id)
        .where(ReleaseTable.app_id == app_name)
        .with_for_update()
    )


def max_version_stmt(app_name: str) -> Select:
    """Highest version of *app_name*, or NULL when it has no releases."""
    return select(func.max(ReleaseTable.version)).where(ReleaseTable.app_id == app_name)


class VersionSequencer:
    """Assigns strictly increasing versions to an application's releases."""

    def __init__(self, lock_strategy: LockStrategy = LockStrategy.ROWS) -> None:
        self.lock_strategy = LockStrategy(lock_strategy)

    def next_version(self, session: Session, app_name: str) -> int:
        """Return the next version for *app_name*.

        Must be called inside the session's open transaction; the locks it
        takes are released when that transaction ends.  Storage errors
        propagate unchanged.
        """
        if self.lock_strategy is LockStrategy.APP:
            self._lock_app(session, app_name)
        else:
            session.execute(lock_releases_stmt(app_name)).all()

        current = session.scalar(max_version_stmt(app_name))

        version = (current or 0) + 1
        logger.debug("version_assigned", app=app_name, version=version, previous=current)
        return version

    def _lock_app(self, session: Session, app_name: str) -> None:
        """Create the app's lock row if needed, then lock it."""
        dialect = session.get_bind().dialect.name
        if dialect in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
            session.execute(
                insert(AppLockTable)
                .values(app_id=app_name)
                .on_conflict_do_nothing(index_elements=["app_id"])
            )
        elif session.get(AppLockTable, app_name) is None:
            try:
                with session.begin_nested():
                    session.add(AppLockTable(app_id=app_name))
            except IntegrityError:
                # Another creator inserted it first; the lock below waits for them
                pass

        session.execute(
            select(AppLockTable.app_id)
            .where(AppLockTable.app_id == app_name)
            .with_for_update()
        )
