"""Domain models for releases and formations.

Manifesto:
    The release subsystem passes the same handful of records between the
    store, the formation builder and the scheduler hand-off.  Plain
    dataclasses keep those records typed without tying them to the ORM:
    ``shipyard.core.orm.tables`` maps them to rows, everything else only
    sees these objects.

Tags:
    shipyard-core, models, dataclasses, data-model

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .settings import GiB


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Inputs owned by other subsystems
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class App:
    """An application; releases are scoped to its name."""

    name: str


@dataclass(frozen=True, slots=True)
class Config:
    """An immutable configuration snapshot (environment variables)."""

    id: str
    app_name: str = ""
    vars: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Slug:
    """A built artifact and the process types it declares.

    ``process_types`` maps process type name to its start command.
    """

    id: str
    image: str = ""
    process_types: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# releases
# ---------------------------------------------------------------------------


@dataclass
class Release:
    """A Config + Slug pair for an App, with a per-app version.

    ``version`` is ``None`` until :class:`~shipyard.releases.store.ReleaseStore`
    assigns it inside the creating transaction.
    """

    app_name: str
    config_id: str
    slug_id: str
    id: str = field(default_factory=new_id)
    version: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "app": self.app_name,
            "config_id": self.config_id,
            "slug_id": self.slug_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


# ---------------------------------------------------------------------------
# processes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Constraints:
    """Resource limits applied to every instance of a process type."""

    cpu_share: int = 256
    memory: int = GiB


DEFAULT_CONSTRAINTS = Constraints()


@dataclass
class Process:
    """One process type of a formation."""

    type: str
    command: str
    quantity: int = 0
    constraints: Constraints = DEFAULT_CONSTRAINTS
    release_id: str | None = None
    id: str = field(default_factory=new_id)


# Formation: process type name -> Process, scoped to a single release.
Formation = dict[str, Process]


__all__ = [
    "new_id",
    "App",
    "Config",
    "Slug",
    "Release",
    "Constraints",
    "DEFAULT_CONSTRAINTS",
    "Process",
    "Formation",
]
