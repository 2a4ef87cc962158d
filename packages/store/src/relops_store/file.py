"""FileRepoCache — repository names cached in a local JSON file.

Listing an organization's repositories costs two API calls and counts
against the anonymous GitHub rate limit, while the set changes rarely. The
file holds a plain JSON array of names; its modification time is the fetch
time, so `touch` extends the cache and deleting the file forces a refetch.

There is no locking: two syncs running in the same directory may race on
the file.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from relops_store.base import BaseRepoCache
from relops_store.models import RepoCache

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=14)


class FileRepoCache(BaseRepoCache):
    """Stores the repository list in a JSON file that expires after `ttl`."""

    def __init__(self, path: str | Path, ttl: timedelta = DEFAULT_TTL):
        self._path = Path(path)
        self._ttl = ttl

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> RepoCache | None:
        if not self._path.is_file():
            return None

        fetched_at = datetime.fromtimestamp(self._path.stat().st_mtime, tz=timezone.utc)
        cache = RepoCache(fetched_at=fetched_at)
        if not cache.is_fresh(self._ttl):
            logger.debug("Repository cache %s expired (fetched %s)", self._path, fetched_at)
            return None

        try:
            repos = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable repository cache %s: %s", self._path, e)
            return None
        if not isinstance(repos, list) or not all(isinstance(r, str) for r in repos):
            logger.warning("Ignoring malformed repository cache %s", self._path)
            return None

        cache.repos = repos
        return cache

    def save(self, repos: list[str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(list(repos)), encoding="utf-8")
