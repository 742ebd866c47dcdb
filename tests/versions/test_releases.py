"""Tests for the latest-release lookup."""

import time

import pytest
import requests

from ring_insight.versions import (
    HttpReleaseNotes,
    ReleaseLookup,
    latest_release,
    locate_latest_release,
    resolve,
)

NOTES_6_8 = """\
# Release notes for 6.8.40

## Components versions for DSE 6.8.40

# Release notes for 6.8.39
"""


class TestPinnedLines:
    """Lines with a pinned final patch never hit the network."""

    def test_pinned_upgrade_available(self, fake_notes):
        """An old 3.11 patch has the pinned release as latest."""
        source = fake_notes("unused")
        lookup = latest_release(resolve("3.11.4"), source=source)
        assert lookup.latest.release == "3.11.16"
        assert lookup.confident
        assert lookup.upgrade_available
        assert source.calls == []

    def test_pinned_already_latest(self):
        """Running the pinned release means no upgrade."""
        lookup = resolve("4.0.12").latest_release()
        assert not lookup.upgrade_available

    def test_newer_than_pinned_is_not_an_upgrade(self):
        """A node ahead of the pinned release is never told to move back."""
        lookup = latest_release(resolve("3.11.17"))
        assert lookup.latest.release == "3.11.16"
        assert not lookup.upgrade_available

    def test_patch_numbers_compare_numerically(self):
        lookup = ReleaseLookup(resolve("3.11.4"), resolve("3.11.16"))
        assert lookup.upgrade_available
        assert resolve("3.11.16").release_key == (3, 11, 16)
        assert resolve("4.0-rc1").release_key == (4, 0)


class TestReleaseNotesLookup:
    """Lines published in release-notes files."""

    def test_first_heading_wins(self, fake_notes):
        """The newest entry is the first heading of the line."""
        source = fake_notes(NOTES_6_8)
        lookup = latest_release(resolve("6.8.20", managed=True), source=source)
        assert lookup.latest.release == "6.8.40"
        assert lookup.latest.line == "6.8"
        assert lookup.confident
        assert source.calls == ["DSE_6.8_Release_Notes.md"]

    def test_fetch_failure_degrades(self, fake_notes):
        """A failing source means 'no newer release known'."""
        source = fake_notes(error=requests.ConnectionError("unreachable"))
        current = resolve("6.8.20", managed=True)
        lookup = latest_release(current, source=source)
        assert lookup.confident is False
        assert lookup.latest is current
        assert not lookup.upgrade_available
        assert "unreachable" in lookup.reason

    def test_missing_heading_degrades(self, fake_notes):
        """Notes without a heading for the line degrade."""
        lookup = latest_release(resolve("5.1.10", managed=True), source=fake_notes(NOTES_6_8))
        assert lookup.confident is False

    def test_timeout_degrades(self):
        """A source slower than the timeout degrades."""

        class SlowNotes:
            def fetch(self, notes_file, timeout):
                time.sleep(1.0)
                return NOTES_6_8

        lookup = latest_release(resolve("6.8.20", managed=True), source=SlowNotes(), timeout=0.05)
        assert lookup.confident is False
        assert "timeout" in lookup.reason


class TestLocateLatestRelease:
    def test_locates_release(self):
        lines = NOTES_6_8.splitlines()
        assert locate_latest_release(lines, "# Release notes for 6.8.") == "6.8.40"

    def test_raises_without_heading(self):
        with pytest.raises(ValueError):
            locate_latest_release(["nothing here"], "# Release notes for 6.8.")


class TestHttpReleaseNotes:
    """HTTP source, with the session patched out."""

    def test_fetch_builds_url(self, monkeypatch):
        """The notes file is fetched relative to the base URL."""
        seen = {}

        class FakeResponse:
            text = NOTES_6_8

            def raise_for_status(self):
                pass

        def fake_get(self, url, timeout):
            seen["url"] = url
            seen["timeout"] = timeout
            return FakeResponse()

        monkeypatch.setattr(requests.Session, "get", fake_get)
        text = HttpReleaseNotes("https://example.invalid/notes").fetch("DSE_6.8_Release_Notes.md", 2.0)
        assert text == NOTES_6_8
        assert seen == {"url": "https://example.invalid/notes/DSE_6.8_Release_Notes.md", "timeout": 2.0}

    def test_http_error_propagates(self, monkeypatch):
        """HTTP errors are raised for latest_release to degrade on."""

        class FailingResponse:
            def raise_for_status(self):
                raise requests.HTTPError("404")

        monkeypatch.setattr(requests.Session, "get", lambda self, url, timeout: FailingResponse())
        with pytest.raises(requests.HTTPError):
            HttpReleaseNotes().fetch("missing.md", 1.0)
