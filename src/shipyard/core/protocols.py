"""
Collaborator protocols for the release subsystem.

:class:`~shipyard.releases.service.ReleaseService` depends on three
capabilities, each behind its own narrow protocol so tests (and other
deployments) can substitute fakes:

    ReleaseRepository  : create / find_by_app / head / previous
    ProcessStore       : all(release_id) / create(process)
    Scheduler          : schedule_release(release, config, slug, formation)

Any object with the right shape satisfies a protocol; no registration or
inheritance needed.

Tags:
    protocol, contracts, scheduler, process-store, shipyard-core
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import Config, Formation, Process, Release, Slug


@runtime_checkable
class ReleaseRepository(Protocol):
    """Persistence for release records."""

    def create(self, release: Release) -> Release:
        """Assign the next version and persist *release* atomically."""
        ...

    def find_by_app(self, app_name: str, limit: int | None = None) -> list[Release]:
        """Releases of *app_name*, most recent first."""
        ...

    def head(self, app_name: str) -> Release | None:
        """Highest-version release of *app_name*, or ``None``."""
        ...

    def previous(self, release: Release) -> Release | None:
        """Highest-version release of the same app below *release*."""
        ...


@runtime_checkable
class ProcessStore(Protocol):
    """Persistence for formations."""

    def all(self, release_id: str) -> Formation:
        """Load the formation stored for *release_id* (empty if none)."""
        ...

    def create(self, process: Process) -> Process:
        """Persist one process row."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Hand-off to the cluster scheduler.

    Implementations raise on failure, preferably with
    :class:`~shipyard.core.errors.SchedulingError` so the refusal can say
    whether a retry makes sense.  The release subsystem performs no retry
    and no compensation.
    """

    def schedule_release(
        self,
        release: Release,
        config: Config,
        slug: Slug,
        formation: Formation,
    ) -> None:
        ...


__all__ = [
    "ReleaseRepository",
    "ProcessStore",
    "Scheduler",
]
