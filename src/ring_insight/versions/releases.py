"""
Latest-release lookup for a release line.

Most lines have a pinned final patch release. Lines still receiving patches
publish their history in an upstream release-notes markdown file whose
newest entry is the first ``# Release notes for X.Y.Z`` heading. The lookup
is advisory: any failure degrades to "own release is the latest known"
with ``confident=False``.
"""

from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from ..logging_config import get_logger
from .descriptor import VersionDescriptor
from .resolver import resolve

logger = get_logger(__name__)

RELEASE_NOTES_BASE_URL = "https://raw.githubusercontent.com/datastax/release-notes/master/"


class ReleaseNotesSource(Protocol):
    """Supplies the raw text of an upstream release-notes file."""

    def fetch(self, notes_file: str, timeout: float) -> str:
        """
        Return the markdown text of ``notes_file``.

        Args:
            notes_file: File name, e.g. "DSE_6.8_Release_Notes.md"
            timeout: Seconds before giving up

        Returns:
            Markdown text of the release notes
        """
        ...


class HttpReleaseNotes:
    """Fetch release notes over HTTP from the public release-notes repository."""

    def __init__(self, base_url: str = RELEASE_NOTES_BASE_URL):
        self.base_url = base_url.rstrip("/") + "/"

    def fetch(self, notes_file: str, timeout: float) -> str:
        with requests.Session() as session:
            response = session.get(self.base_url + notes_file, timeout=timeout)
            response.raise_for_status()
            return response.text


@dataclass(frozen=True)
class ReleaseLookup:
    """Outcome of a latest-release lookup.

    Attributes:
        current: Descriptor the lookup was made for
        latest: Descriptor of the newest known patch on the same line
        confident: False when the lookup failed and ``latest`` is ``current``
        reason: Why the lookup degraded, if it did
    """

    current: VersionDescriptor
    latest: VersionDescriptor
    confident: bool = True
    reason: Optional[str] = None

    @property
    def upgrade_available(self) -> bool:
        """True only when the latest release is strictly newer than the running one."""
        return self.latest.release_key > self.current.release_key


def locate_latest_release(lines: list[str], heading_prefix: str) -> str:
    """Release number from the first heading starting with ``heading_prefix``.

    Raises:
        ValueError: If no such heading exists
    """
    for line in lines:
        if line.startswith(heading_prefix):
            return line.strip().rsplit(" ", 1)[-1]
    raise ValueError(f"no '{heading_prefix}' heading in release notes")


def latest_release(
    descriptor: VersionDescriptor,
    source: Optional[ReleaseNotesSource] = None,
    timeout: float = 10.0,
) -> ReleaseLookup:
    """Resolve the newest published patch of ``descriptor``'s line.

    Args:
        descriptor: Descriptor whose line is looked up
        source: Release-notes supplier; defaults to HttpReleaseNotes
        timeout: Upper bound in seconds on the whole fetch

    Returns:
        ReleaseLookup, degraded rather than raising on any failure
    """
    managed = descriptor.is_managed

    if descriptor.pinned_latest_release is not None:
        return ReleaseLookup(descriptor, resolve(descriptor.pinned_latest_release, managed))

    if descriptor.release_notes_file is None:
        return _degraded(descriptor, f"no release source for line {descriptor.line}")

    source = source or HttpReleaseNotes()
    heading = f"# Release notes for {descriptor.line}."

    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(source.fetch, descriptor.release_notes_file, timeout)
        text = future.result(timeout=timeout)
        release = locate_latest_release(text.splitlines(), heading)
    except concurrent.futures.TimeoutError:
        return _degraded(descriptor, f"release notes lookup exceeded {timeout}s timeout")
    except Exception as e:
        return _degraded(descriptor, f"release notes lookup failed: {e}")
    finally:
        executor.shutdown(wait=False)

    return ReleaseLookup(descriptor, resolve(release, managed))


def _degraded(descriptor: VersionDescriptor, reason: str) -> ReleaseLookup:
    logger.warning(f"Latest release for {descriptor.product.value} {descriptor.line} unknown: {reason}")
    return ReleaseLookup(descriptor, descriptor, confident=False, reason=reason)
