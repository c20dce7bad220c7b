"""SQLAlchemy table definitions for releases, processes and app locks.

``releases`` carries ``UNIQUE(app_id, version)``.  The constraint is a
backstop: versions are assigned under a row lock by
:class:`~shipyard.releases.sequencer.VersionSequencer`, and the constraint
only turns a lost race (possible for an app's very first release under the
``rows`` lock strategy) into an ``IntegrityError`` instead of a duplicate.

Tags:
    shipyard-core, orm, sqlalchemy, tables

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

import datetime

from sqlalchemy import BigInteger, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shipyard.core.orm.base import ShipyardBase


class ReleaseTable(ShipyardBase):
    __tablename__ = "releases"
    __table_args__ = (
        UniqueConstraint("app_id", "version", name="uq_releases_app_version"),
    )

    id: Mapped[str] = mapped_column(primary_key=True)
    app_id: Mapped[str] = mapped_column(nullable=False)
    version: Mapped[int] = mapped_column(nullable=False)
    config_id: Mapped[str] = mapped_column(nullable=False)
    slug_id: Mapped[str] = mapped_column(nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(nullable=False)

    # --- relationships ---
    processes: Mapped[list[ProcessTable]] = relationship(
        "ProcessTable", back_populates="release"
    )


class ProcessTable(ShipyardBase):
    __tablename__ = "processes"
    __table_args__ = (
        UniqueConstraint("release_id", "type", name="uq_processes_release_type"),
    )

    id: Mapped[str] = mapped_column(primary_key=True)
    release_id: Mapped[str] = mapped_column(
        ForeignKey("releases.id"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(nullable=False)
    command: Mapped[str] = mapped_column(nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False, default=0)
    cpu_share: Mapped[int] = mapped_column(nullable=False)
    memory: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # --- relationships ---
    release: Mapped[ReleaseTable] = relationship(
        "ReleaseTable", back_populates="processes"
    )


class AppLockTable(ShipyardBase):
    """One row per application, locked by the ``app`` lock strategy."""

    __tablename__ = "app_locks"

    app_id: Mapped[str] = mapped_column(primary_key=True)


__all__ = [
    "ReleaseTable",
    "ProcessTable",
    "AppLockTable",
]
