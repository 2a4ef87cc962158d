"""No-op cache — used with `relops sync --no-cache`.

Every load() is a miss and save() discards the list, so the repository
list is fetched from GitHub on every run and nothing is written to disk.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relops_store.base import BaseRepoCache

if TYPE_CHECKING:
    from relops_store.models import RepoCache


class NoOpRepoCache(BaseRepoCache):
    def load(self) -> RepoCache | None:
        return None

    def save(self, repos: list[str]) -> None:
        pass  # intentional no-op
