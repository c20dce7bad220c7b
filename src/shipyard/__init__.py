"""
Shipyard - immutable releases, per-app versioning and formation derivation.
"""

__version__ = "0.1.0"

from shipyard.container import ShipyardContainer  # noqa: E402
from shipyard.core import (  # noqa: E402
    App,
    Config,
    Constraints,
    Formation,
    Process,
    Release,
    ReleaseIncompleteError,
    Slug,
)
from shipyard.releases import (  # noqa: E402
    FormationBuilder,
    ProcessRepository,
    ReleaseService,
    ReleaseStore,
    VersionSequencer,
)

__all__ = [
    "ShipyardContainer",
    "App",
    "Config",
    "Constraints",
    "Formation",
    "Process",
    "Release",
    "ReleaseIncompleteError",
    "Slug",
    "FormationBuilder",
    "ProcessRepository",
    "ReleaseService",
    "ReleaseStore",
    "VersionSequencer",
]
