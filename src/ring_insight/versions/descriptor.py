"""Version descriptor: the behavior facts of one database release line."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .releases import ReleaseLookup, ReleaseNotesSource

MIB = 1024 * 1024

_LEADING_DIGITS = re.compile(r"\d+")


class Product(Enum):
    """Database product family a release string belongs to."""

    COMMUNITY = "cassandra"
    MANAGED = "dse"


class PartitionWarningFormat(Enum):
    """How a release line logs the size of an oversized partition."""

    ROW = "row"  # "large row ks/tbl:key (123 bytes)"
    BYTES = "bytes"  # "partition ks/tbl:key (123 bytes)"
    HUMAN = "human"  # "partition ks/tbl:key (105.1MiB)"


class WarningDialect(Enum):
    """Wording used for tombstone and batch warnings."""

    COMMUNITY = "community"
    MANAGED = "managed"


@dataclass(frozen=True)
class VersionDescriptor:
    """Immutable set of version-dependent facts for one release string.

    Descriptors are never constructed directly by callers: they come from
    ``resolve()``, which copies the template of the matching release line
    and stamps the raw release string on it. Two descriptors with the same
    ``(product, release)`` always carry identical facts.

    Attributes:
        product: Community or managed distribution
        release: Raw release string as reported by the node
        line: Release-line key the string resolved to (e.g. "3.11")
        recognized: False when no prefix matched and the newest line was assumed
    """

    product: Product
    release: str
    line: str
    recognized: bool = True

    # Capability flags
    supports_read_repair: bool = True
    supports_vnodes: bool = True
    supports_incremental_repair: bool = False
    supports_off_heap_memtables: bool = True
    supports_thrift: bool = True
    supports_credential_validity_setting: bool = False
    is_legacy_stage_model: bool = True
    is_safe_to_use_udt: bool = True
    is_community_maintained: bool = False
    show_chunk_length_kb_note: bool = False
    should_disable_debug_logging: bool = False
    show_upgrade_to_4: bool = True

    # Numeric recommendations and thresholds
    recommended_vnode_count: int = 16
    large_partition_threshold_bytes: int = 100 * MIB
    batch_size_warn_threshold_kb: int = 5

    # String facts
    default_permissions_validity: str = "2000"
    max_partition_size_metric: str = "MaxPartitionSize"
    mean_partition_size_metric: str = "MeanPartitionSize"
    estimated_row_count_metric: str = "EstimatedPartitionCount"
    lcs_default_sstable_size_mb: str = "160"
    lcs_default_fan_out_size: str = "10"
    recommended_os_settings_link: str = (
        "https://docs.datastax.com/en/cassandra-oss/3.x/cassandra/install/installRecommendSettings.html"
    )

    # Log wording
    partition_warning_format: PartitionWarningFormat = PartitionWarningFormat.HUMAN
    tombstone_dialect: WarningDialect = WarningDialect.COMMUNITY
    batch_dialect: WarningDialect = WarningDialect.COMMUNITY

    # Latest patch on this line: pinned, or published in an upstream release-notes file
    pinned_latest_release: Optional[str] = None
    release_notes_file: Optional[str] = None

    @property
    def is_managed(self) -> bool:
        return self.product is Product.MANAGED

    @property
    def release_major_minor(self) -> str:
        """Major.minor part of a three-part release ("3.11.14" -> "3.11")."""
        if self.release.count(".") == 2:
            return self.release.rsplit(".", 1)[0]
        return self.release

    @property
    def release_key(self) -> tuple[int, ...]:
        """Numeric parts of the release for ordering ("3.11.14" -> (3, 11, 14)).

        Stops at the first part that is not purely numeric, so "4.0-rc1"
        gives (4, 0).
        """
        parts: list[int] = []
        for part in self.release.split("."):
            match = _LEADING_DIGITS.match(part)
            if match is None:
                break
            parts.append(int(match.group()))
            if match.end() != len(part):
                break
        return tuple(parts)

    @property
    def batch_size_warn_threshold_bytes(self) -> int:
        return self.batch_size_warn_threshold_kb * 1024

    def latest_release(
        self,
        source: Optional[ReleaseNotesSource] = None,
        timeout: float = 10.0,
    ) -> ReleaseLookup:
        """Newest published patch on this descriptor's line.

        Advisory only: never raises. See ``releases.latest_release``.
        """
        from .releases import latest_release

        return latest_release(self, source=source, timeout=timeout)

    def __str__(self) -> str:
        return self.release
