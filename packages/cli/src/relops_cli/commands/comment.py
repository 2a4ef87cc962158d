"""comment command — report a CI result on the pull request of the current checkout.

Typical Jenkins usage after a merge to master:

    rake osc:sr | tee rake_output
    relops comment --log rake_output
"""

from __future__ import annotations

import click
from rich.console import Console

from relops_cli.errors import reported_errors
from relops_core import git
from relops_core.comment import JobInfo, failure_message, log_message, success_message
from relops_core.gh.pull_request import get_closed_pulls, post_comment, resolve_pull_request
from relops_core.gh.repository import get_client, get_repo, parse_remote_url

console = Console()


def _build_message(*, failed: bool, success: bool, log_path: str | None, job: JobInfo) -> str:
    selected = [name for name, given in (("--failed", failed), ("--success", success), ("--log", log_path)) if given]
    if len(selected) > 1:
        raise click.UsageError(f"Options {', '.join(selected)} are mutually exclusive.")

    if failed:
        return failure_message(job)
    if success:
        return success_message(job)
    if log_path:
        return log_message(log_path, job)
    return ""


@click.command("comment")
@click.option("--dry-run", "-d", is_flag=True, help="Dry run (do not send the comment).")
@click.option("--failed", "-f", is_flag=True, help="Report build failure.")
@click.option("--success", "-s", is_flag=True, help="Report successful build.")
@click.option(
    "--log",
    "-l",
    "log_path",
    metavar="FILE",
    default=None,
    help="Report success and link the submit request found in the log file.",
)
@click.pass_context
def comment_cmd(ctx, dry_run: bool, failed: bool, success: bool, log_path: str | None):
    """Post a CI status comment to the pull request of the current commit.

    The pull request is taken from the default merge commit message, or
    found among the closed pull requests by its merge commit.

    \b
    Environment variables:
      GH_TOKEN             GitHub token (required unless --dry-run)
      BUILD_DISPLAY_NAME   CI job name shown in the comment
      BUILD_URL            CI job URL linked from the comment
    """
    config = ctx.obj["config"]
    token = config.get("github_token")
    job = JobInfo(name=config.get("job_name", ""), url=config.get("job_url", ""))

    with reported_errors():
        message = _build_message(failed=failed, success=success, log_path=log_path, job=job)
        if not message:
            raise click.ClickException("Cannot build a comment message")

        if not token and not dry_run:
            raise click.ClickException("No GitHub token found. Set GH_TOKEN or run `gh auth login` first.")

        repo_name = parse_remote_url(git.remote_url())
        gh = get_client(token, base_url=config["github_api_url"])
        # Lazy repository: a default merge commit needs no API call to find the PR.
        repo = get_repo(gh, repo_name)

        pull = resolve_pull_request(
            last_commit_line=git.last_commit_oneline(),
            head_sha=git.head_commit(),
            list_closed_pulls=lambda: get_closed_pulls(repo),
        )

        pull_url = f"https://{config['git_host']}/{repo_name}/pull/{pull.number}"
        console.print(f"Pull request: {pull_url}", highlight=False, soft_wrap=True)
        console.print(f"Comment: {message}", markup=False, emoji=False, highlight=False, soft_wrap=True)

        if dry_run:
            return

        post_comment(repo, pull.number, message)
        console.print("[green]Comment posted.[/green]")
