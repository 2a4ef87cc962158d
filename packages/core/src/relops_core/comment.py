"""Status comment messages for CI jobs.

The log mode parses the output of `rake osc:sr`, which contains the build
service API in use and the id of the submit request it created, e.g.:

    osc -A 'https://api.opensuse.org/' sr ...
    created request id 4242

Both patterns are anchored to the start of a line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from relops_core.errors import ReleaseToolError

SUBMIT_API_RE = re.compile(r"^osc -A '([^']*)'", re.MULTILINE)
SUBMIT_REQUEST_RE = re.compile(r"^created request id ([0-9]+)", re.MULTILINE)

IBS_API_URL = "https://api.suse.de/"
IBS_HOST = "build.suse.de"
OBS_HOST = "build.opensuse.org"


@dataclass(frozen=True)
class JobInfo:
    """CI job shown in the comment (Jenkins BUILD_DISPLAY_NAME / BUILD_URL)."""

    name: str = ""
    url: str = ""


@dataclass(frozen=True)
class SubmitRequest:
    context: str  # "OBS" | "IBS"
    request_id: str
    url: str


def success_message(job: JobInfo) -> str:
    return f":heavy_check_mark: [Jenkins job #{job.name}]({job.url}) successfully finished."


def failure_message(job: JobInfo) -> str:
    return f":x: [Jenkins job #{job.name}]({job.url}) failed."


def parse_submit_request(log: str) -> SubmitRequest | None:
    """Return the submit request created in a build log, or None if there is none."""
    api_match = SUBMIT_API_RE.search(log)
    if not api_match:
        return None
    request_match = SUBMIT_REQUEST_RE.search(log)
    if not request_match:
        return None

    if api_match.group(1) == IBS_API_URL:
        context, link_host = "IBS", IBS_HOST
    else:
        context, link_host = "OBS", OBS_HOST

    request_id = request_match.group(1)
    return SubmitRequest(
        context=context,
        request_id=request_id,
        url=f"https://{link_host}/request/show/{request_id}",
    )


def submit_request_message(request: SubmitRequest, job: JobInfo) -> str:
    jenkins = f" by [Jenkins job {job.name}]({job.url})" if job.url else ""
    return (
        f":heavy_check_mark: Created {request.context} submit "
        f"[request #{request.request_id}]({request.url}){jenkins}."
    )


def log_message(log_path: str | Path, job: JobInfo) -> str:
    """Build the comment for a build log; falls back to the success message without a submit request."""
    path = Path(log_path)
    if not path.is_file():
        raise ReleaseToolError(f"File {log_path} does not exist!")

    request = parse_submit_request(path.read_text(encoding="utf-8", errors="replace"))
    if request is None:
        return success_message(job)
    return submit_request_message(request, job)
