"""Tests for the Docker Hub build-status aggregator."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from relops_core.docker_image import (
    BuildStatus,
    ImageStatusCache,
    ImageStatusReport,
    build_history_url,
    download,
    fetch_image_status,
    parse_build_history,
)

IMAGE = "yastdevel/ruby"


def _history(*entries):
    return json.dumps({"results": [{"dockertag_name": tag, "status": status} for tag, status in entries]})


def _session(body="", ok=True, status_code=200):
    session = MagicMock()
    session.get.return_value = MagicMock(text=body, ok=ok, status_code=status_code)
    return session


# ---------------------------------------------------------------------------
# BuildStatus
# ---------------------------------------------------------------------------


class TestBuildStatus:
    def test_negative_status_is_failure(self):
        assert BuildStatus.from_raw(-1) is BuildStatus.FAILURE
        assert BuildStatus.from_raw(-4) is BuildStatus.FAILURE

    def test_non_negative_status_is_success(self):
        assert BuildStatus.from_raw(0) is BuildStatus.SUCCESS
        assert BuildStatus.from_raw(10) is BuildStatus.SUCCESS

    def test_missing_or_odd_status_is_not_failure(self):
        assert BuildStatus.from_raw(None) is BuildStatus.SUCCESS
        assert BuildStatus.from_raw("-1") is BuildStatus.SUCCESS


# ---------------------------------------------------------------------------
# parse_build_history
# ---------------------------------------------------------------------------


class TestParseBuildHistory:
    def test_keeps_first_entry_per_tag(self):
        body = _history(("latest", -1), ("sle15", 10), ("latest", 10), ("sle15", -1))

        builds = parse_build_history(IMAGE, body)

        assert [b.tag for b in builds] == ["latest", "sle15"]
        assert builds[0].failure is True
        assert builds[0].raw_status == -1
        assert builds[1].failure is False

    def test_keeps_api_order(self):
        body = _history(("b", 10), ("a", 10), ("c", 10))
        assert [b.tag for b in parse_build_history(IMAGE, body)] == ["b", "a", "c"]

    def test_records_point_to_parent_image(self):
        builds = parse_build_history(IMAGE, _history(("latest", 10)))
        assert builds[0].image == IMAGE

    def test_record_url_is_image_builds_page(self):
        builds = parse_build_history(IMAGE, _history(("latest", 10)))
        assert builds[0].url == "https://hub.docker.com/r/yastdevel/ruby/builds/"

    def test_record_url_follows_base_url(self):
        builds = parse_build_history(IMAGE, _history(("latest", 10)), base_url="http://hub.test")
        assert builds[0].url == "http://hub.test/r/yastdevel/ruby/builds/"

    def test_empty_results(self):
        assert parse_build_history(IMAGE, json.dumps({"results": []})) == []

    def test_missing_results_raises(self):
        with pytest.raises(ValueError):
            parse_build_history(IMAGE, json.dumps({"detail": "Not found"}))


# ---------------------------------------------------------------------------
# ImageStatusReport
# ---------------------------------------------------------------------------


class TestImageStatusReport:
    def test_success_and_issues_rollup(self):
        builds = parse_build_history(IMAGE, _history(("a", -1), ("b", 10), ("c", -1)))
        report = ImageStatusReport(image=IMAGE, builds=builds)

        assert report.success() is False
        assert report.issues() == 2

    def test_all_passing(self):
        builds = parse_build_history(IMAGE, _history(("a", 10), ("b", 0)))
        report = ImageStatusReport(image=IMAGE, builds=builds)

        assert report.success() is True
        assert report.issues() == 0

    def test_empty_report_is_vacuously_successful(self):
        report = ImageStatusReport(image=IMAGE)
        assert report.success() is True
        assert report.issues() == 0
        assert report.has_error() is False

    def test_urls(self):
        report = ImageStatusReport(image=IMAGE)
        assert report.url == "https://hub.docker.com/r/yastdevel/ruby/"
        assert report.builds_url == "https://hub.docker.com/r/yastdevel/ruby/builds/"


# ---------------------------------------------------------------------------
# download / fetch_image_status
# ---------------------------------------------------------------------------


def test_build_history_url():
    assert (
        build_history_url(IMAGE)
        == "https://hub.docker.com/v2/repositories/yastdevel/ruby/buildhistory/?page_size=100"
    )


class TestDownload:
    def test_returns_body(self):
        assert download("https://example.test", _session("{}")) == "{}"

    def test_http_error_returns_empty(self):
        assert download("https://example.test", _session("nope", ok=False, status_code=404)) == ""

    def test_transport_error_returns_empty(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("boom")
        assert download("https://example.test", session) == ""


class TestFetchImageStatus:
    def test_requests_build_history(self):
        session = _session(_history(("latest", 10)))

        fetch_image_status(IMAGE, session=session)

        url = session.get.call_args.args[0]
        assert url.endswith("/v2/repositories/yastdevel/ruby/buildhistory/?page_size=100")

    def test_successful_fetch(self):
        report = fetch_image_status(IMAGE, session=_session(_history(("latest", -1), ("latest", 10))))

        assert report.error is None
        assert len(report.builds) == 1
        assert report.success() is False
        assert report.issues() == 1

    def test_empty_body_is_soft_error(self, caplog):
        report = fetch_image_status(IMAGE, session=_session(""))

        assert report.has_error()
        assert report.error.startswith("Cannot download https://hub.docker.com/v2/repositories/yastdevel/ruby")
        assert report.builds == []
        assert report.success() is True
        assert report.issues() == 0
        assert "Cannot download" in caplog.text

    def test_invalid_json_is_soft_error(self):
        report = fetch_image_status(IMAGE, session=_session("<html>"))

        assert report.has_error()
        assert report.builds == []
        assert report.success() is True

    def test_custom_base_url(self):
        session = _session(_history(("latest", 10)))

        report = fetch_image_status(IMAGE, base_url="https://registry.test", session=session)

        assert session.get.call_args.args[0].startswith("https://registry.test/v2/")
        assert report.url == "https://registry.test/r/yastdevel/ruby/"
        assert report.builds[0].url == "https://registry.test/r/yastdevel/ruby/builds/"


# ---------------------------------------------------------------------------
# ImageStatusCache
# ---------------------------------------------------------------------------


class TestImageStatusCache:
    def test_fetches_each_image_once(self):
        fetch = MagicMock(side_effect=lambda image: ImageStatusReport(image=image))
        cache = ImageStatusCache(fetch)

        first = cache.get("a/one")
        second = cache.get("a/one")
        cache.get("a/two")

        assert first is second
        assert [c.args[0] for c in fetch.call_args_list] == ["a/one", "a/two"]

    def test_contains(self):
        cache = ImageStatusCache(lambda image: ImageStatusReport(image=image))
        assert "a/one" not in cache
        cache.get("a/one")
        assert "a/one" in cache
