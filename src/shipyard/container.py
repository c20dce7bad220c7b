"""
Lazy-initialised dependency container.

:class:`ShipyardContainer` builds the engine, session factory, stores and
formation builder from :class:`~shipyard.core.settings.ShipyardSettings` on
first access.  The scheduler is the one collaborator it cannot build; pass
it to :meth:`ShipyardContainer.release_service`.

Usage::

    from shipyard import ShipyardContainer

    with ShipyardContainer() as c:
        c.create_schema()
        service = c.release_service(my_scheduler)
        release = service.create(app, config, slug)
"""

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from shipyard.core.logging import configure_logging
from shipyard.core.models import Constraints
from shipyard.core.orm.session import (
    create_schema,
    create_shipyard_engine,
    shipyard_session_factory,
)
from shipyard.core.protocols import Scheduler
from shipyard.core.settings import ShipyardSettings, get_settings
from shipyard.releases.formation import FormationBuilder
from shipyard.releases.processes import ProcessRepository
from shipyard.releases.sequencer import VersionSequencer
from shipyard.releases.service import ReleaseService
from shipyard.releases.store import ReleaseStore


class ShipyardContainer:
    """Lazy-initialised dependency container.

    Components are created on first property access and disposed via
    :meth:`close` (or the context-manager protocol).
    """

    def __init__(self, settings: ShipyardSettings | None = None) -> None:
        self._settings = settings
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._release_store: ReleaseStore | None = None
        self._process_store: ProcessRepository | None = None
        self._builder: FormationBuilder | None = None

    # ── Properties (lazy) ────────────────────────────────────────

    @property
    def settings(self) -> ShipyardSettings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            s = self.settings
            self._engine = create_shipyard_engine(
                s.database_url,
                echo=s.database_echo,
                pool_size=s.database_pool_size,
                busy_timeout=s.sqlite_busy_timeout,
            )
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = shipyard_session_factory(self.engine)
        return self._session_factory

    @property
    def release_store(self) -> ReleaseStore:
        if self._release_store is None:
            self._release_store = ReleaseStore(
                self.session_factory,
                VersionSequencer(self.settings.lock_strategy),
            )
        return self._release_store

    @property
    def process_store(self) -> ProcessRepository:
        if self._process_store is None:
            self._process_store = ProcessRepository(self.session_factory)
        return self._process_store

    @property
    def formation_builder(self) -> FormationBuilder:
        if self._builder is None:
            s = self.settings
            self._builder = FormationBuilder(
                default_quantity=s.default_quantity,
                default_quantities=s.default_quantities,
                default_constraints=Constraints(
                    cpu_share=s.default_cpu_share, memory=s.default_memory
                ),
            )
        return self._builder

    # ── Factories ────────────────────────────────────────────────

    def release_service(self, scheduler: Scheduler) -> ReleaseService:
        """Build a :class:`ReleaseService` handing releases to *scheduler*."""
        return ReleaseService(
            releases=self.release_store,
            processes=self.process_store,
            scheduler=scheduler,
            builder=self.formation_builder,
        )

    def create_schema(self) -> None:
        create_schema(self.engine)

    def configure_logging(self) -> None:
        """Apply the logging settings to structlog."""
        configure_logging(
            level=self.settings.log_level,
            json_format=self.settings.log_format == "json",
        )

    # ── Lifecycle ────────────────────────────────────────────────

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._release_store = None
            self._process_store = None

    def __enter__(self) -> ShipyardContainer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
