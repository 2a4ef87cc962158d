"""Repository-list cache data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone


@dataclass
class RepoCache:
    """A cached list of repository names and when it was fetched."""

    repos: list[str] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_fresh(self, ttl: timedelta, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - self.fetched_at < ttl
