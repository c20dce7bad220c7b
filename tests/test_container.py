"""Tests for shipyard.container."""

from __future__ import annotations

import pytest

from shipyard import ShipyardContainer
from shipyard.core.settings import LockStrategy, ShipyardSettings


@pytest.fixture
def container():
    c = ShipyardContainer(ShipyardSettings(database_url="sqlite:///:memory:"))
    c.create_schema()
    yield c
    c.close()


class TestContainer:
    def test_components_are_cached(self, container):
        assert container.engine is container.engine
        assert container.release_store is container.release_store
        assert container.process_store is container.process_store

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("SHIPYARD_LOCK_STRATEGY", "app")
        c = ShipyardContainer()
        assert c.settings.lock_strategy is LockStrategy.APP
        assert c.release_store.sequencer.lock_strategy is LockStrategy.APP

    def test_builder_uses_settings_defaults(self):
        settings = ShipyardSettings(
            database_url="sqlite:///:memory:",
            default_quantities={"web": 2},
            default_cpu_share=512,
        )
        builder = ShipyardContainer(settings).formation_builder
        assert builder.quantity_for("web") == 2
        assert builder.quantity_for("worker") == 0
        assert builder.default_constraints.cpu_share == 512

    def test_release_service_end_to_end(self, container, scheduler, app, config, slug):
        service = container.release_service(scheduler)

        first = service.create(app, config, slug)
        second = service.create(app, config, slug)

        assert (first.version, second.version) == (1, 2)
        assert service.head(app).id == second.id
        assert set(container.process_store.all(second.id)) == {"web", "worker"}
        assert len(scheduler.calls) == 2

    def test_close_resets_components(self, container):
        engine = container.engine
        container.close()
        assert container.engine is not engine

    def test_context_manager(self):
        with ShipyardContainer(ShipyardSettings(database_url="sqlite://")) as c:
            c.create_schema()
            assert c.release_store.head("api") is None
