"""Release subsystem: version assignment, formation derivation, orchestration.

Architecture::

    service.py      ReleaseService    create / find_by_app / head
    store.py        ReleaseStore      releases table, composes VersionSequencer
    sequencer.py    VersionSequencer  max(version) + 1 under row lock
    formation.py    FormationBuilder  previous formation + slug process types
    processes.py    ProcessRepository processes table (ProcessStore)
"""

from shipyard.releases.formation import FormationBuilder
from shipyard.releases.processes import ProcessRepository
from shipyard.releases.sequencer import VersionSequencer
from shipyard.releases.service import ReleaseService
from shipyard.releases.store import ReleaseStore

__all__ = [
    "FormationBuilder",
    "ProcessRepository",
    "ReleaseService",
    "ReleaseStore",
    "VersionSequencer",
]
