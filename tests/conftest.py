"""
Shared pytest fixtures for shipyard tests.

This module provides:
- In-memory and file-backed SQLite engines with the schema created
- Release and process stores bound to those engines
- Fake scheduler / process store collaborators for orchestration tests
- Settings cache cleanup for test isolation
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from shipyard.core.models import App, Config, Formation, Process, Release, Slug
from shipyard.core.orm import create_schema, create_shipyard_engine, shipyard_session_factory
from shipyard.core.settings import clear_settings_cache
from shipyard.releases import ProcessRepository, ReleaseStore


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop cached settings and any SHIPYARD_* variables from the host."""
    import os

    for key in list(os.environ):
        if key.startswith("SHIPYARD_"):
            monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with all tables created."""
    eng = create_shipyard_engine("sqlite:///:memory:")
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def file_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """File-backed SQLite engine, for tests that use several connections."""
    eng = create_shipyard_engine(f"sqlite:///{tmp_path / 'shipyard.db'}")
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return shipyard_session_factory(engine)


@pytest.fixture
def store(session_factory: sessionmaker[Session]) -> ReleaseStore:
    return ReleaseStore(session_factory)


@pytest.fixture
def process_repo(session_factory: sessionmaker[Session]) -> ProcessRepository:
    return ProcessRepository(session_factory)


# =============================================================================
# Domain samples
# =============================================================================


@pytest.fixture
def app() -> App:
    return App(name="acme-api")


@pytest.fixture
def config(app: App) -> Config:
    return Config(id="cfg-1", app_name=app.name, vars={"RAILS_ENV": "production"})


@pytest.fixture
def slug() -> Slug:
    return Slug(
        id="slug-1",
        image="registry.local/acme-api:1",
        process_types={"web": "./bin/web", "worker": "./bin/worker"},
    )


# =============================================================================
# Collaborator fakes
# =============================================================================


class FakeScheduler:
    """Records every hand-off; raises ``error`` instead when it is set."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[Release, Config, Slug, Formation]] = []

    def schedule_release(
        self, release: Release, config: Config, slug: Slug, formation: Formation
    ) -> None:
        if self.error is not None:
            raise self.error
        self.calls.append((release, config, slug, formation))


class FlakyProcessStore:
    """Delegates to a real store but fails on the ``fail_on``-th create (1-based)."""

    def __init__(self, inner: Any, fail_on: int) -> None:
        self.inner = inner
        self.fail_on = fail_on
        self.created = 0

    def all(self, release_id: str) -> Formation:
        return self.inner.all(release_id)

    def create(self, process: Process) -> Process:
        if self.created + 1 == self.fail_on:
            raise RuntimeError("process store unavailable")
        self.created += 1
        return self.inner.create(process)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def failing_scheduler() -> FakeScheduler:
    return FakeScheduler(error=ConnectionError("scheduler unreachable"))


@pytest.fixture
def flaky_process_store(process_repo: ProcessRepository):
    """Factory: ``flaky_process_store(fail_on=2)`` fails the second create."""

    def _make(fail_on: int) -> FlakyProcessStore:
        return FlakyProcessStore(process_repo, fail_on)

    return _make
