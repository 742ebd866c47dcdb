"""Version resolution: release strings to behavior descriptors."""

from .descriptor import (
    PartitionWarningFormat,
    Product,
    VersionDescriptor,
    WarningDialect,
)
from .releases import (
    HttpReleaseNotes,
    ReleaseLookup,
    ReleaseNotesSource,
    latest_release,
    locate_latest_release,
)
from .resolver import newest_line, resolve

__all__ = [
    "Product",
    "PartitionWarningFormat",
    "WarningDialect",
    "VersionDescriptor",
    "resolve",
    "newest_line",
    "ReleaseLookup",
    "ReleaseNotesSource",
    "HttpReleaseNotes",
    "latest_release",
    "locate_latest_release",
]
