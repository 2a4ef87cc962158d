"""Mirror an organization's repositories into a local directory.

Every run converges the directory: repositories already present are
updated (checkout the default branch, prune, rebase pull), missing ones are
cloned over SSH. Running it twice in a row changes nothing the second time.

Git failures are not interpreted. A failing command is logged and the run
moves on; re-running the sync is the recovery path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from relops_core.git import run_git

logger = logging.getLogger(__name__)

GitRunner = Callable[[Sequence[str], str], int]


@dataclass
class SyncAction:
    repo: str
    action: str  # "update" | "clone"
    cwd: str
    commands: list[list[str]] = field(default_factory=list)


def resolve_repo_names(cache, fetch: Callable[[], list[str]], *, refresh: bool = False) -> list[str]:
    """Return the cached repository names, or fetch and cache them on a miss.

    `cache` is any relops_store repo cache; a refetch replaces its content.
    """
    if not refresh:
        cached = cache.load()
        if cached is not None:
            logger.debug("Using %d cached repository names from %s", len(cached.repos), cached.fetched_at)
            return list(cached.repos)

    repos = sorted(fetch())
    cache.save(repos)
    return repos


def filter_ignored(repos: Iterable[str], ignore: Iterable[str]) -> list[str]:
    """Drop ignored names (case-insensitive), keeping the input order."""
    ignored = {name.casefold() for name in ignore}
    return [repo for repo in repos if repo.casefold() not in ignored]


def clone_url(host: str, org: str, repo: str) -> str:
    return f"git@{host}:{org}/{repo}.git"


def plan_actions(
    repos: Iterable[str],
    workdir: str | Path,
    *,
    host: str,
    org: str,
    default_branch: str,
) -> list[SyncAction]:
    """Decide per repository (sorted by name) whether to update or clone it."""
    root = Path(workdir)
    actions = []
    for repo in sorted(repos):
        if (root / repo).exists():
            actions.append(
                SyncAction(
                    repo=repo,
                    action="update",
                    cwd=str(root / repo),
                    commands=[
                        ["checkout", "-q", default_branch],
                        ["fetch", "--prune"],
                        ["pull", "--rebase"],
                    ],
                )
            )
        else:
            actions.append(
                SyncAction(
                    repo=repo,
                    action="clone",
                    cwd=str(root),
                    commands=[["clone", clone_url(host, org, repo)]],
                )
            )
    return actions


def apply_action(action: SyncAction, runner: GitRunner | None = None) -> list[int]:
    """Run every command of an action and return their exit statuses."""
    runner = runner or run_git
    return [runner(command, action.cwd) for command in action.commands]


def converge(
    actions: Iterable[SyncAction],
    runner: GitRunner | None = None,
    announce: Callable[[SyncAction], None] | None = None,
) -> dict[str, list[int]]:
    results = {}
    for action in actions:
        if announce is not None:
            announce(action)
        results[action.repo] = apply_action(action, runner)
    return results
