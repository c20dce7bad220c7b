"""Tests for shipyard.releases.store."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from shipyard.core.models import Release
from shipyard.releases.store import ReleaseStore


def _release(app: str = "api", config: str = "c1", slug: str = "s1") -> Release:
    return Release(app_name=app, config_id=config, slug_id=slug)


class StuckSequencer:
    """Always hands out version 1."""

    def next_version(self, session, app_name: str) -> int:
        return 1


class TestCreate:
    def test_first_release_is_version_one(self, store: ReleaseStore):
        r = store.create(_release())
        assert r.version == 1
        assert r.created_at is not None

    def test_sequential_versions_have_no_gaps(self, store: ReleaseStore):
        versions = [store.create(_release()).version for _ in range(5)]
        assert versions == [1, 2, 3, 4, 5]

    def test_mutates_passed_release(self, store: ReleaseStore):
        r = _release()
        returned = store.create(r)
        assert returned is r
        assert r.version == 1

    def test_per_app_sequences(self, store: ReleaseStore):
        store.create(_release("api"))
        store.create(_release("api"))
        assert store.create(_release("web")).version == 1
        assert store.create(_release("api")).version == 3

    def test_persists_references(self, store: ReleaseStore):
        r = store.create(_release(config="cfg-9", slug="slug-9"))
        loaded = store.get(r.id)
        assert loaded is not None
        assert (loaded.version, loaded.config_id, loaded.slug_id) == (1, "cfg-9", "slug-9")

    def test_duplicate_version_rejected_and_reset(self, session_factory):
        store = ReleaseStore(session_factory, sequencer=StuckSequencer())
        store.create(_release())

        dup = _release()
        with pytest.raises(IntegrityError):
            store.create(dup)

        assert dup.version is None
        assert dup.created_at is None
        assert store.get(dup.id) is None
        assert len(store.find_by_app("api")) == 1


class TestReads:
    def test_head_none_for_unknown_app(self, store: ReleaseStore):
        assert store.head("nope") is None

    def test_head_is_highest_version(self, store: ReleaseStore):
        for _ in range(3):
            last = store.create(_release())
        head = store.head("api")
        assert head is not None
        assert head.id == last.id
        assert head.version == 3

    def test_find_by_app_most_recent_first(self, store: ReleaseStore):
        for _ in range(3):
            store.create(_release())
        store.create(_release("other"))

        assert [r.version for r in store.find_by_app("api")] == [3, 2, 1]

    def test_find_by_app_limit(self, store: ReleaseStore):
        for _ in range(3):
            store.create(_release())
        assert [r.version for r in store.find_by_app("api", limit=1)] == [3]

    def test_find_by_app_empty(self, store: ReleaseStore):
        assert store.find_by_app("api") == []

    def test_get_missing(self, store: ReleaseStore):
        assert store.get("missing") is None

    def test_previous(self, store: ReleaseStore):
        first = store.create(_release())
        second = store.create(_release())
        third = store.create(_release())

        assert store.previous(third).id == second.id
        assert store.previous(second).id == first.id
        assert store.previous(first) is None

    def test_previous_of_unversioned_is_head(self, store: ReleaseStore):
        store.create(_release())
        head = store.create(_release())
        assert store.previous(_release()).id == head.id

    def test_to_dict(self, store: ReleaseStore):
        r = store.create(_release(config="c", slug="s"))
        d = r.to_dict()
        assert d["id"] == r.id
        assert d["version"] == 1
        assert d["app"] == "api"
        assert (d["config_id"], d["slug_id"]) == ("c", "s")
        assert isinstance(d["created_at"], str)
