from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from github import GithubException

from relops_core.errors import ReleaseToolError

logger = logging.getLogger(__name__)

# Default message of a merge done with the "Merge" button on GitHub.
_MERGE_MESSAGE_RE = re.compile(r"Merge pull request #(\d+) from")


@dataclass
class PullRequestRef:
    """The pull request a checked out commit belongs to."""

    number: int
    merge_commit_sha: str | None = None


def pr_number_from_merge_message(log_line: str) -> int | None:
    """Return the PR number embedded in a default merge commit message, or None."""
    match = _MERGE_MESSAGE_RE.search(log_line)
    return int(match.group(1)) if match else None


def get_closed_pulls(repo):
    """Return the first page of closed pull requests, most recently updated first."""
    try:
        return repo.get_pulls(state="closed", sort="updated", direction="desc").get_page(0)
    except GithubException as exc:
        raise ReleaseToolError(f"Cannot list closed pull requests: {exc.status} {exc.data}") from exc


def find_pull_by_merge_commit(pulls: Iterable, commit: str) -> PullRequestRef | None:
    for pull in pulls:
        if pull.merge_commit_sha == commit:
            return PullRequestRef(number=pull.number, merge_commit_sha=pull.merge_commit_sha)
    return None


def resolve_pull_request(
    *,
    last_commit_line: str,
    head_sha: str,
    list_closed_pulls: Callable[[], Iterable],
) -> PullRequestRef:
    """Find the pull request for the current checkout.

    Rules (first match wins):
    - The last commit is a default GitHub merge commit: take the number from
      its message, no API call.
    - Otherwise look for a closed pull request whose merge commit is HEAD.
    """
    number = pr_number_from_merge_message(last_commit_line)
    if number is not None:
        logger.debug("Pull request #%d found in merge commit message", number)
        return PullRequestRef(number=number, merge_commit_sha=head_sha)

    pull = find_pull_by_merge_commit(list_closed_pulls(), head_sha)
    if pull is None:
        raise ReleaseToolError("Cannot find the respective pull request")
    logger.debug("Pull request #%d matched by merge commit %s", pull.number, head_sha)
    return pull


def post_comment(repo, number: int, body: str):
    """Post an issue comment on a pull request, raising ReleaseToolError on rejection."""
    try:
        return repo.get_issue(number).create_comment(body)
    except GithubException as exc:
        raise ReleaseToolError(f"Error {exc.status}: {exc.data}") from exc
