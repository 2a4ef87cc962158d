from __future__ import annotations

from contextlib import contextmanager

import click

from relops_core.errors import ReleaseToolError


@contextmanager
def reported_errors():
    """Turn ReleaseToolError into a ClickException (message on stderr, exit status 1)."""
    try:
        yield
    except ReleaseToolError as exc:
        raise click.ClickException(str(exc)) from exc
