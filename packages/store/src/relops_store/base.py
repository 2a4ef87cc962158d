"""Abstract repository-list cache interface.

The sync command depends on BaseRepoCache, not on a concrete backend, so
the file cache can be swapped for the no-op one (`--no-cache`) without
touching the sync logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relops_store.models import RepoCache


class BaseRepoCache(ABC):
    """Persistence for the list of an organization's repository names."""

    @abstractmethod
    def load(self) -> RepoCache | None:
        """Return the cached list, or None when it is missing or expired.

        Never raises on unreadable content; that is a cache miss.
        """

    @abstractmethod
    def save(self, repos: list[str]) -> None:
        """Replace the cached list with `repos`."""

    def close(self) -> None:
        """Release any resources held by the cache.

        Default is a no-op so callers can always call close() safely.
        """
