"""
Release orchestration.

:meth:`ReleaseService.create` runs the whole release pipeline::

    1. build Release(app, config, slug)          version unset
    2. releases.create(release)                  version assigned + committed
    3. releases.previous(release)                prior release, if any
       processes.all(previous.id)                its formation
    4. builder.derive(prior formation, slug.process_types)
    5. processes.create(p) for each derived p    tagged with release.id
    6. scheduler.schedule_release(release, config, slug, formation)

Only step 2 is transactional.  Steps 3-6 run after the release is committed
and are not rolled back: if step 5 fails part-way, the release and the
processes written so far stay persisted; if step 6 fails, release and
formation stay persisted.  Both raise :class:`ReleaseIncompleteError`
carrying the committed release.  Nothing is retried or deleted; re-running
the failed step is the caller's decision.

The scheduler is only called after the release transaction has committed.

Tags:
    releases, orchestration, service, scheduler
"""

from __future__ import annotations

from shipyard.core.errors import ReleaseIncompleteError, is_retryable
from shipyard.core.logging import LogContext, get_logger
from shipyard.core.models import App, Config, Formation, Release, Slug
from shipyard.core.protocols import ProcessStore, ReleaseRepository, Scheduler
from shipyard.releases.formation import FormationBuilder

logger = get_logger(__name__)


class ReleaseService:
    """Creates releases and hands them to the scheduler.

    Parameters:
        releases: Release persistence (usually a
            :class:`~shipyard.releases.store.ReleaseStore`).
        processes: Formation persistence.
        scheduler: Hand-off to the cluster scheduler.
        builder: Formation derivation; defaults to a :class:`FormationBuilder`
            with quantity 0 for new process types.
    """

    def __init__(
        self,
        releases: ReleaseRepository,
        processes: ProcessStore,
        scheduler: Scheduler,
        builder: FormationBuilder | None = None,
    ) -> None:
        self.releases = releases
        self.processes = processes
        self.scheduler = scheduler
        self.builder = builder or FormationBuilder()

    def create(self, app: App, config: Config, slug: Slug) -> Release:
        """Create a release of *slug* with *config* for *app* and schedule it.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: the release could not be
                persisted; nothing was written.
            ReleaseIncompleteError: the release was persisted but its
                formation or the scheduler hand-off failed.  For a failed
                hand-off, ``retryable`` follows the scheduler's error (see
                :func:`~shipyard.core.errors.is_retryable`), so a
                :class:`~shipyard.core.errors.SchedulingError` keeps its verdict.
        """
        release = Release(app_name=app.name, config_id=config.id, slug_id=slug.id)
        release = self.releases.create(release)

        with LogContext(app=app.name, release_id=release.id, version=release.version):
            try:
                formation = self._create_formation(release, slug)
            except Exception as exc:
                logger.error("formation_failed", error=str(exc))
                raise ReleaseIncompleteError(
                    f"release v{release.version} of {app.name} persisted "
                    f"but its formation could not be stored: {exc}",
                    release=release,
                    stage="formation",
                    cause=exc,
                ) from exc

            try:
                self.scheduler.schedule_release(release, config, slug, formation)
            except Exception as exc:
                retryable = is_retryable(exc)
                logger.error("schedule_failed", error=str(exc), retryable=retryable)
                raise ReleaseIncompleteError(
                    f"release v{release.version} of {app.name} persisted "
                    f"but scheduling failed: {exc}",
                    release=release,
                    stage="schedule",
                    cause=exc,
                    retryable=retryable,
                ) from exc

            logger.info("release_scheduled", processes=sorted(formation))
        return release

    def find_by_app(self, app: App, limit: int | None = None) -> list[Release]:
        """Releases of *app*, most recent first."""
        return self.releases.find_by_app(app.name, limit=limit)

    def head(self, app: App) -> Release | None:
        """Current release of *app*, or ``None``."""
        return self.releases.head(app.name)

    def _create_formation(self, release: Release, slug: Slug) -> Formation:
        existing: Formation = {}
        previous = self.releases.previous(release)
        if previous is not None:
            existing = self.processes.all(previous.id)

        formation = self.builder.derive(existing, slug.process_types)
        logger.debug(
            "formation_derived",
            previous_release=previous.id if previous else None,
            carried=sorted(set(formation) & set(existing)),
            added=sorted(set(formation) - set(existing)),
            dropped=sorted(set(existing) - set(formation)),
        )

        for process in formation.values():
            process.release_id = release.id
            self.processes.create(process)

        return formation
