"""Release persistence.

:class:`ReleaseStore` is the only writer of the ``releases`` table.  Each
call opens its own session from the injected ``sessionmaker``; ``create``
is the single place where a transaction spans more than one statement
(version read under lock + insert).

Tags:
    releases, repository, sqlalchemy
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from shipyard.core.logging import get_logger
from shipyard.core.models import Release
from shipyard.core.orm.session import begin_write
from shipyard.core.orm.tables import ReleaseTable
from shipyard.releases.sequencer import VersionSequencer

logger = get_logger(__name__)


def _row_to_release(row: ReleaseTable) -> Release:
    return Release(
        id=row.id,
        version=row.version,
        app_name=row.app_id,
        config_id=row.config_id,
        slug_id=row.slug_id,
        created_at=row.created_at,
    )


class ReleaseStore:
    """Stores and retrieves releases; versions come from a :class:`VersionSequencer`."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        sequencer: VersionSequencer | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.sequencer = sequencer or VersionSequencer()

    def create(self, release: Release) -> Release:
        """Assign the next version to *release* and insert it, atomically.

        ``release.version`` and ``release.created_at`` are set on the passed
        object.  If the transaction fails they are reset to ``None`` before
        the storage exception is re-raised, so the caller never holds a
        version that was not committed.
        """
        try:
            with self._session_factory() as session, session.begin():
                begin_write(session)
                release.version = self.sequencer.next_version(session, release.app_name)
                release.created_at = datetime.now(UTC)
                session.add(
                    ReleaseTable(
                        id=release.id,
                        app_id=release.app_name,
                        version=release.version,
                        config_id=release.config_id,
                        slug_id=release.slug_id,
                        created_at=release.created_at,
                    )
                )
        except Exception:
            logger.warning(
                "release_create_failed",
                app=release.app_name,
                attempted_version=release.version,
                exc_info=True,
            )
            release.version = None
            release.created_at = None
            raise

        logger.info(
            "release_created",
            app=release.app_name,
            release_id=release.id,
            version=release.version,
        )
        return release

    def get(self, release_id: str) -> Release | None:
        """Fetch a release by id."""
        with self._session_factory() as session:
            row = session.get(ReleaseTable, release_id)
            return _row_to_release(row) if row is not None else None

    def find_by_app(self, app_name: str, limit: int | None = None) -> list[Release]:
        """Releases of *app_name*, most recent first.

        ``limit=1`` gives the "most recent only" view.
        """
        stmt = (
            select(ReleaseTable)
            .where(ReleaseTable.app_id == app_name)
            .order_by(ReleaseTable.version.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session_factory() as session:
            return [_row_to_release(row) for row in session.scalars(stmt)]

    def head(self, app_name: str) -> Release | None:
        """The release with the highest version, or ``None`` if the app has none."""
        releases = self.find_by_app(app_name, limit=1)
        return releases[0] if releases else None

    def previous(self, release: Release) -> Release | None:
        """The highest-version release of the same app below ``release.version``."""
        if release.version is None:
            return self.head(release.app_name)
        stmt = (
            select(ReleaseTable)
            .where(
                ReleaseTable.app_id == release.app_name,
                ReleaseTable.version < release.version,
            )
            .order_by(ReleaseTable.version.desc())
            .limit(1)
        )
        with self._session_factory() as session:
            row = session.scalars(stmt).first()
            return _row_to_release(row) if row is not None else None
