"""Shipyard Core -- primitives shared by the release subsystem.

Architecture::

    errors.py       Structured error hierarchy (ShipyardError, ReleaseIncompleteError)
    logging.py      structlog configuration + get_logger
    settings.py     ShipyardSettings (pydantic-settings, SHIPYARD_* env vars)
    models.py       Release / Process / Formation / App / Config / Slug dataclasses
    protocols.py    ReleaseRepository, ProcessStore, Scheduler contracts
    orm/            SQLAlchemy 2.0 tables, engine factory, sessions
"""

from shipyard.core.errors import (
    ErrorCategory,
    ErrorContext,
    ReleaseError,
    ReleaseIncompleteError,
    SchedulingError,
    ShipyardError,
)
from shipyard.core.models import (
    App,
    Config,
    Constraints,
    Formation,
    Process,
    Release,
    Slug,
)
from shipyard.core.protocols import ProcessStore, ReleaseRepository, Scheduler

__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ReleaseError",
    "ReleaseIncompleteError",
    "SchedulingError",
    "ShipyardError",
    "App",
    "Config",
    "Constraints",
    "Formation",
    "Process",
    "Release",
    "Slug",
    "ProcessStore",
    "ReleaseRepository",
    "Scheduler",
]
