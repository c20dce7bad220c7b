"""Tests for shipyard.releases.processes."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from shipyard.core.models import Constraints, Process, Release
from shipyard.releases.processes import ProcessRepository
from shipyard.releases.store import ReleaseStore


@pytest.fixture
def release(store: ReleaseStore) -> Release:
    return store.create(Release(app_name="api", config_id="c", slug_id="s"))


class TestProcessRepository:
    def test_all_empty(self, process_repo: ProcessRepository, release: Release):
        assert process_repo.all(release.id) == {}

    def test_round_trip_formation(self, process_repo: ProcessRepository, release: Release):
        big = Constraints(cpu_share=512, memory=6 * 1024**3)
        process_repo.create(Process(type="web", command="w", quantity=2, release_id=release.id))
        process_repo.create(
            Process(type="worker", command="k", quantity=1, constraints=big, release_id=release.id)
        )

        f = process_repo.all(release.id)

        assert set(f) == {"web", "worker"}
        assert f["web"].quantity == 2
        assert f["worker"].constraints == big
        assert f["worker"].release_id == release.id

    def test_scoped_to_release(self, process_repo: ProcessRepository, store: ReleaseStore, release):
        other = store.create(Release(app_name="api", config_id="c", slug_id="s"))
        process_repo.create(Process(type="web", command="w", release_id=release.id))

        assert process_repo.all(other.id) == {}

    def test_requires_release_id(self, process_repo: ProcessRepository):
        with pytest.raises(ValueError):
            process_repo.create(Process(type="web", command="w"))

    def test_unknown_release_rejected(self, process_repo: ProcessRepository):
        with pytest.raises(IntegrityError):
            process_repo.create(Process(type="web", command="w", release_id="missing"))

    def test_type_unique_per_release(self, process_repo: ProcessRepository, release: Release):
        process_repo.create(Process(type="web", command="w", release_id=release.id))
        with pytest.raises(IntegrityError):
            process_repo.create(Process(type="web", command="w2", release_id=release.id))
