from __future__ import annotations

import re

from github import Auth, Github, GithubException

from relops_core.errors import ReleaseToolError

# git@github.com:yast/yast-core.git  →  yast/yast-core
_SSH_REMOTE_RE = re.compile(r"^git@[^:/\s]+:(?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$")
# https://github.com/yast/yast-core.git  →  yast/yast-core
_HTTPS_REMOTE_RE = re.compile(r"^https://[^/\s]+/(?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$")

REPOS_PER_PAGE = 100


def parse_remote_url(url: str) -> str:
    """Return the `owner/name` slug of an SSH or HTTPS git remote URL."""
    url = url.strip()
    for pattern in (_SSH_REMOTE_RE, _HTTPS_REMOTE_RE):
        match = pattern.match(url)
        if match:
            return match.group("slug")
    raise ReleaseToolError(f"Cannot parse the repository name from git remote URL {url!r}")


def get_client(token: str | None = None, base_url: str = "https://api.github.com") -> Github:
    auth = Auth.Token(token) if token else None
    # No retries: a failed call surfaces immediately and the CI job is re-run instead.
    # Lazy objects: only list and comment calls reach the API, never a plain GET of
    # the organization, repository or issue they hang off.
    return Github(auth=auth, base_url=base_url, per_page=REPOS_PER_PAGE, retry=None, lazy=True)


def get_repo(gh: Github, repo_name: str):
    try:
        return gh.get_repo(repo_name)
    except GithubException as exc:
        raise ReleaseToolError(f"Cannot read repository {repo_name}: {exc.status} {exc.data}") from exc


def fetch_org_repo_names(gh: Github, org: str, pages: int = 2) -> list[str]:
    """Return the sorted repository names of an organization.

    Reads only the first `pages` pages of REPOS_PER_PAGE entries each, one
    request per page.
    """
    names: list[str] = []
    try:
        repos = gh.get_organization(org).get_repos()
        for page in range(pages):
            names.extend(repo.name for repo in repos.get_page(page))
    except GithubException as exc:
        raise ReleaseToolError(f"Cannot list repositories of {org}: {exc.status} {exc.data}") from exc
    return sorted(names)
