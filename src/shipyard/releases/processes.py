"""SQLAlchemy-backed :class:`~shipyard.core.protocols.ProcessStore`.

Process rows are written once, right after their release, and never
updated; each ``create`` is its own short transaction.

Tags:
    releases, processes, repository, sqlalchemy
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from shipyard.core.models import Constraints, Formation, Process
from shipyard.core.orm.session import begin_write
from shipyard.core.orm.tables import ProcessTable


def _row_to_process(row: ProcessTable) -> Process:
    return Process(
        id=row.id,
        release_id=row.release_id,
        type=row.type,
        command=row.command,
        quantity=row.quantity,
        constraints=Constraints(cpu_share=row.cpu_share, memory=row.memory),
    )


class ProcessRepository:
    """CRUD for the ``processes`` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def all(self, release_id: str) -> Formation:
        """The formation stored for *release_id*; empty if it has none."""
        stmt = select(ProcessTable).where(ProcessTable.release_id == release_id)
        with self._session_factory() as session:
            return {row.type: _row_to_process(row) for row in session.scalars(stmt)}

    def create(self, process: Process) -> Process:
        """Insert one process row.  ``process.release_id`` must be set."""
        if process.release_id is None:
            raise ValueError(f"process {process.type!r} has no release_id")
        with self._session_factory() as session, session.begin():
            begin_write(session)
            session.add(
                ProcessTable(
                    id=process.id,
                    release_id=process.release_id,
                    type=process.type,
                    command=process.command,
                    quantity=process.quantity,
                    cpu_share=process.constraints.cpu_share,
                    memory=process.constraints.memory,
                )
            )
        return process
