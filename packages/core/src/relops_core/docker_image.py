"""Docker Hub build status for container images.

One request per image reads the build history (newest first). Images are
rebuilt often, so the same tag shows up many times; only the latest result
per tag counts.

A failed download is a soft error: the report carries the message and no
builds, and still counts as successful. A broken status page must not be
reported as a broken build.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://hub.docker.com"
BUILD_HISTORY_PAGE_SIZE = 100
_REQUEST_TIMEOUT = 30


class BuildStatus(str, Enum):
    # Docker Hub reports failures with negative codes; everything else
    # (finished, queued, building) is treated as not failed.
    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def from_raw(cls, raw) -> BuildStatus:
        if isinstance(raw, int) and not isinstance(raw, bool) and raw < 0:
            return cls.FAILURE
        return cls.SUCCESS


@dataclass
class BuildRecord:
    image: str
    tag: str
    status: BuildStatus
    raw_status: object = None
    base_url: str = DEFAULT_BASE_URL

    @property
    def failure(self) -> bool:
        return self.status is BuildStatus.FAILURE

    @property
    def url(self) -> str:
        """Builds page of the image the record belongs to."""
        return f"{self.base_url}/r/{self.image}/builds/"


@dataclass
class ImageStatusReport:
    """Build status of one image, derived from its build history."""

    image: str
    base_url: str = DEFAULT_BASE_URL
    builds: list[BuildRecord] = field(default_factory=list)
    error: str | None = None

    def has_error(self) -> bool:
        return bool(self.error)

    def success(self) -> bool:
        return not any(build.failure for build in self.builds)

    def issues(self) -> int:
        return sum(1 for build in self.builds if build.failure)

    @property
    def url(self) -> str:
        return f"{self.base_url}/r/{self.image}/"

    @property
    def builds_url(self) -> str:
        return f"{self.base_url}/r/{self.image}/builds/"


def build_history_url(image: str, base_url: str = DEFAULT_BASE_URL) -> str:
    return f"{base_url}/v2/repositories/{image}/buildhistory/?page_size={BUILD_HISTORY_PAGE_SIZE}"


def download(url: str, session: requests.Session | None = None) -> str:
    """Return the response body, or an empty string when the download fails."""
    http = session or requests
    try:
        response = http.get(url, timeout=_REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        logger.debug("GET %s failed: %s", url, exc)
        return ""
    if not response.ok:
        logger.debug("GET %s returned %s", url, response.status_code)
        return ""
    return response.text


def parse_build_history(image: str, body: str, base_url: str = DEFAULT_BASE_URL) -> list[BuildRecord]:
    """Map a build history document to one BuildRecord per tag.

    The first entry of each tag wins; the API order is kept as is.
    Raises ValueError when the document has no `results` list.
    """
    document = json.loads(body)
    results = document.get("results") if isinstance(document, dict) else None
    if not isinstance(results, list):
        raise ValueError("missing 'results' list")

    records: dict[str, BuildRecord] = {}
    for result in results:
        if not isinstance(result, dict):
            continue
        tag = result.get("dockertag_name")
        if tag in records:
            continue
        raw_status = result.get("status")
        records[tag] = BuildRecord(
            image=image,
            tag=tag,
            status=BuildStatus.from_raw(raw_status),
            raw_status=raw_status,
            base_url=base_url,
        )
    return list(records.values())


def fetch_image_status(
    image: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    session: requests.Session | None = None,
) -> ImageStatusReport:
    report = ImageStatusReport(image=image, base_url=base_url)
    url = build_history_url(image, base_url)

    body = download(url, session)
    if not body:
        report.error = f"Cannot download {url}"
        logger.error(report.error)
        return report

    try:
        report.builds = parse_build_history(image, body, base_url)
    except ValueError as exc:
        # json.JSONDecodeError is a ValueError too.
        report.error = f"Cannot parse {url}: {exc}"
        logger.error(report.error)
    return report


class ImageStatusCache:
    """Per-process memo of image reports; each image is fetched once on first access."""

    def __init__(self, fetch: Callable[[str], ImageStatusReport]):
        self._fetch = fetch
        self._reports: dict[str, ImageStatusReport] = {}

    def get(self, image: str) -> ImageStatusReport:
        if image not in self._reports:
            self._reports[image] = self._fetch(image)
        return self._reports[image]

    def __contains__(self, image: str) -> bool:
        return image in self._reports
