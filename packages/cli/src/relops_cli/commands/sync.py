"""sync command — clone or update every repository of the organization."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import click
from rich.console import Console

from relops_cli.errors import reported_errors
from relops_core.gh.repository import fetch_org_repo_names, get_client
from relops_core.sync import SyncAction, converge, filter_ignored, plan_actions, resolve_repo_names

console = Console()


def _build_repo_cache(config: dict, workdir: Path, enabled: bool):
    """Instantiate the repository-list cache.

    --no-cache → NoOpRepoCache (always fetch, never write)
    (default)  → FileRepoCache at `repo_cache`, relative to the workdir
    """
    if not enabled:
        from relops_store.noop import NoOpRepoCache

        return NoOpRepoCache()

    from relops_store.file import FileRepoCache

    return FileRepoCache(
        workdir / config["repo_cache"],
        ttl=timedelta(days=config["repo_cache_ttl_days"]),
    )


def _announce(action: SyncAction) -> None:
    verb = "Updating" if action.action == "update" else "Cloning"
    console.print(f"{verb} {action.repo}...", highlight=False)


@click.command("sync")
@click.option(
    "--workdir",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Directory holding the repository checkouts.",
)
@click.option("--refresh", is_flag=True, help="Refetch the repository list even if the cache is fresh.")
@click.option("--no-cache", "no_cache", is_flag=True, help="Neither read nor write the repository list cache.")
@click.option("--dry-run", is_flag=True, help="Print what would be done without running git.")
@click.pass_context
def sync_cmd(ctx, workdir: str, refresh: bool, no_cache: bool, dry_run: bool):
    """Clone missing repositories and update existing ones.

    Existing checkouts get the default branch checked out, stale remote
    branches pruned and a rebase pull. Git errors are reported and the sync
    continues with the next repository; re-run to retry.
    """
    config = ctx.obj["config"]
    root = Path(workdir)
    root.mkdir(parents=True, exist_ok=True)

    cache = _build_repo_cache(config, root, enabled=not no_cache)
    gh = get_client(config.get("github_token"), base_url=config["github_api_url"])

    with reported_errors():
        try:
            repos = resolve_repo_names(cache, lambda: fetch_org_repo_names(gh, config["org"]), refresh=refresh)
        finally:
            cache.close()
        console.print(f"Found {len(repos)} {config['org']} repositories")

        ignore = config.get("ignore") or []
        repos = filter_ignored(repos, ignore)
        console.print(f"Ignoring {len(ignore)} retired repositories, using {len(repos)} repositories")

        actions = plan_actions(
            repos,
            root,
            host=config["git_host"],
            org=config["org"],
            default_branch=config["default_branch"],
        )

        if dry_run:
            for action in actions:
                for command in action.commands:
                    line = f"[dim]{action.cwd}$[/dim] git {' '.join(command)}"
                    console.print(line, highlight=False, soft_wrap=True)
            return

        converge(actions, announce=_announce)
