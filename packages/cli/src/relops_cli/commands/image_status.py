"""image-status command — Docker Hub build results per image tag."""

from __future__ import annotations

import click
import requests
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from relops_core.docker_image import ImageStatusCache, ImageStatusReport, fetch_image_status

console = Console()


def _print_report(report: ImageStatusReport) -> None:
    if report.has_error():
        console.print(report.error, style="red", markup=False, highlight=False, soft_wrap=True)
        return

    table = Table(title=Text(f"Builds — {report.image}"), show_header=True, header_style="bold cyan")
    table.add_column("Tag", style="bold")
    table.add_column("Status", width=10)

    for build in report.builds:
        style = "red" if build.failure else "green"
        table.add_row(Text(build.tag or ""), f"[{style}]{build.status.value}[/{style}]")

    console.print(table)
    if report.success():
        console.print(f"[green]{escape(report.image)}: all {len(report.builds)} tags OK[/green]")
    else:
        console.print(f"[red]{escape(report.image)}: {report.issues()} failing tags[/red]")
    console.print(f"  Dashboard: {escape(report.url)}", highlight=False)
    console.print(f"  Builds:    {escape(report.builds_url)}", highlight=False)


@click.command("image-status")
@click.argument("images", nargs=-1)
@click.option(
    "--fail-on-issues",
    is_flag=True,
    help="Exit with status 1 when any image has a failing tag.",
)
@click.pass_context
def image_status_cmd(ctx, images: tuple[str, ...], fail_on_issues: bool):
    """Show the latest Docker Hub build result of every tag of IMAGES.

    Images default to the `images` list in .relops.yml. An image whose
    build history cannot be downloaded is reported, but not counted as a
    failure.
    """
    config = ctx.obj["config"]
    images = images or tuple(config.get("images") or ())
    if not images:
        raise click.UsageError("No images given. Pass IMAGE arguments or set 'images' in .relops.yml.")

    session = requests.Session()
    reports = ImageStatusCache(
        lambda image: fetch_image_status(image, base_url=config["docker_hub_url"], session=session)
    )

    for image in images:
        if image in reports:
            continue
        _print_report(reports.get(image))

    summary = Table(title="Summary", show_header=True, header_style="bold cyan")
    summary.add_column("Image", style="bold")
    summary.add_column("Tags", justify="right")
    summary.add_column("Issues", justify="right")
    summary.add_column("State")

    failing = 0
    for image in dict.fromkeys(images):
        report = reports.get(image)
        if report.has_error():
            state = "[yellow]unknown[/yellow]"
        elif report.success():
            state = "[green]ok[/green]"
        else:
            state = "[red]failing[/red]"
            failing += 1
        summary.add_row(Text(image), str(len(report.builds)), str(report.issues()), state)

    console.print(summary)

    if fail_on_issues and failing:
        raise click.ClickException(f"{failing} image(s) with failing builds")
