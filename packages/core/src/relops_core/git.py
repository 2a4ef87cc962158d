"""Helpers around the local git CLI.

Two flavours:
- `_git()` captures output and raises ReleaseToolError on failure. Used for
  queries whose answer the caller needs (remote URL, HEAD commit, last log line).
- `run_git()` lets git write to the terminal and only reports the exit status.
  Used by the repository sync, where a failing pull must not stop the run.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from relops_core.errors import ReleaseToolError

logger = logging.getLogger(__name__)


def _git(*args: str, cwd: str | None = None) -> str:
    command = ["git", *args]
    try:
        result = subprocess.run(command, capture_output=True, text=True, cwd=cwd)
    except FileNotFoundError as exc:
        raise ReleaseToolError("git is not installed or not in PATH") from exc

    if result.returncode != 0:
        details = (result.stderr or result.stdout or "").strip()
        raise ReleaseToolError(f"Command failed: {' '.join(command)}\n{details}".rstrip())
    return result.stdout


def remote_url(remote: str = "origin", cwd: str | None = None) -> str:
    """Return the configured URL of a git remote."""
    return _git("config", "--get", f"remote.{remote}.url", cwd=cwd).strip()


def head_commit(cwd: str | None = None) -> str:
    """Return the full SHA of the checked out commit."""
    return _git("rev-parse", "HEAD", cwd=cwd).strip()


def last_commit_oneline(cwd: str | None = None) -> str:
    """Return `git log -n 1 --oneline` for the checked out commit."""
    return _git("log", "-n", "1", "--oneline", cwd=cwd).strip()


def run_git(args: Sequence[str], cwd: str | None = None) -> int:
    """Run a git command with inherited stdio and return its exit status."""
    command = ["git", *args]
    logger.debug("Running %s in %s", " ".join(command), cwd or ".")
    try:
        result = subprocess.run(command, cwd=cwd)
    except FileNotFoundError as exc:
        raise ReleaseToolError("git is not installed or not in PATH") from exc

    if result.returncode != 0:
        logger.warning("%s exited with status %d in %s", " ".join(command), result.returncode, cwd or ".")
    return result.returncode
