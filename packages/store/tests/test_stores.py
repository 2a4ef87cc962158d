"""Tests for relops-store repository-list caches."""

from __future__ import annotations

import json
import os
import time
from datetime import datetime, timedelta, timezone

from relops_store.file import DEFAULT_TTL, FileRepoCache
from relops_store.models import RepoCache
from relops_store.noop import NoOpRepoCache


def _age(path, days):
    """Set the modification time of `path` to `days` ago."""
    stamp = time.time() - days * 24 * 60 * 60
    os.utime(path, (stamp, stamp))


# ---------------------------------------------------------------------------
# RepoCache
# ---------------------------------------------------------------------------


class TestRepoCache:
    def test_fresh_within_ttl(self):
        now = datetime(2024, 5, 15, tzinfo=timezone.utc)
        cache = RepoCache(repos=["a"], fetched_at=now - timedelta(days=13))
        assert cache.is_fresh(timedelta(days=14), now=now)

    def test_expired_at_ttl(self):
        now = datetime(2024, 5, 15, tzinfo=timezone.utc)
        cache = RepoCache(repos=["a"], fetched_at=now - timedelta(days=14))
        assert not cache.is_fresh(timedelta(days=14), now=now)


# ---------------------------------------------------------------------------
# NoOpRepoCache
# ---------------------------------------------------------------------------


class TestNoOpRepoCache:
    def test_load_always_misses(self):
        cache = NoOpRepoCache()
        cache.save(["yast-core"])
        assert cache.load() is None

    def test_close_does_not_raise(self):
        NoOpRepoCache().close()


# ---------------------------------------------------------------------------
# FileRepoCache
# ---------------------------------------------------------------------------


class TestFileRepoCache:
    def test_default_ttl_is_two_weeks(self):
        assert DEFAULT_TTL == timedelta(days=14)

    def test_missing_file_is_a_miss(self, tmp_path):
        assert FileRepoCache(tmp_path / "cache.json").load() is None

    def test_save_and_load(self, tmp_path):
        cache = FileRepoCache(tmp_path / "cache.json")
        cache.save(["yast-core", "yast-yast2"])

        loaded = cache.load()
        assert loaded.repos == ["yast-core", "yast-yast2"]
        assert loaded.fetched_at <= datetime.now(timezone.utc)

    def test_file_is_plain_json_array(self, tmp_path):
        path = tmp_path / "cache.json"
        FileRepoCache(path).save(["yast-core"])
        assert json.loads(path.read_text()) == ["yast-core"]

    def test_save_replaces_previous_list(self, tmp_path):
        cache = FileRepoCache(tmp_path / "cache.json")
        cache.save(["yast-core", "yast-old"])
        cache.save(["yast-core"])
        assert cache.load().repos == ["yast-core"]

    def test_fresh_file_is_used(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text('["yast-core"]')
        _age(path, 13)
        assert FileRepoCache(path).load().repos == ["yast-core"]

    def test_expired_file_is_a_miss(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text('["yast-core"]')
        _age(path, 15)
        assert FileRepoCache(path).load() is None

    def test_custom_ttl(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text('["yast-core"]')
        _age(path, 2)
        assert FileRepoCache(path, ttl=timedelta(days=1)).load() is None

    def test_unreadable_json_is_a_miss(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json")
        assert FileRepoCache(path).load() is None

    def test_wrong_shape_is_a_miss(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text('{"repos": ["yast-core"]}')
        assert FileRepoCache(path).load() is None

    def test_save_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "cache.json"
        FileRepoCache(path).save(["yast-core"])
        assert path.exists()
