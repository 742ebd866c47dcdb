"""Release-line table.

Each line is a ``VersionDescriptor`` template derived from its parent line
with ``dataclasses.replace``; only the facts that differ are spelled out.
Adding a release line means adding one template and one prefix entry.
"""

from __future__ import annotations

from dataclasses import replace

from .descriptor import PartitionWarningFormat, Product, VersionDescriptor, WarningDialect

_OSS_3_0_SETTINGS = (
    "https://docs.datastax.com/en/cassandra-oss/3.0/cassandra/install/installRecommendSettings.html"
)
_DSE_SETTINGS = (
    "https://docs.datastax.com/en/dse/{}/dse-dev/datastax_enterprise/config/configRecommendedSettings.html"
)

# === Community lines ===

_BASE = VersionDescriptor(product=Product.COMMUNITY, release="", line="")

C1_2 = replace(
    _BASE,
    line="1.2",
    supports_off_heap_memtables=False,
    supports_vnodes=False,
    is_safe_to_use_udt=False,
    show_chunk_length_kb_note=True,
    max_partition_size_metric="MaxRowSize",
    mean_partition_size_metric="MeanRowSize",
    estimated_row_count_metric="EstimatedRowCount",
    partition_warning_format=PartitionWarningFormat.ROW,
    pinned_latest_release="1.2.19",
)
C2_0 = replace(
    C1_2,
    line="2.0",
    supports_vnodes=True,
    pinned_latest_release="2.0.17",
)
C2_1 = replace(
    C2_0,
    line="2.1",
    supports_off_heap_memtables=True,
    max_partition_size_metric="MaxPartitionSize",
    mean_partition_size_metric="MeanPartitionSize",
    estimated_row_count_metric="EstimatedPartitionCount",
    partition_warning_format=PartitionWarningFormat.BYTES,
    pinned_latest_release="2.1.22",
)
C2_2 = replace(
    C2_1,
    line="2.2",
    pinned_latest_release="2.2.19",
)
C3_0 = replace(
    C2_2,
    line="3.0",
    supports_off_heap_memtables=False,
    show_chunk_length_kb_note=False,
    is_community_maintained=True,
    recommended_os_settings_link=_OSS_3_0_SETTINGS,
    pinned_latest_release="3.0.29",
)
C3_X = replace(
    C2_2,
    line="3.x",
    is_safe_to_use_udt=True,
    show_chunk_length_kb_note=False,
    partition_warning_format=PartitionWarningFormat.HUMAN,
    pinned_latest_release="3.11.16",
)
C3_11 = replace(
    C3_X,
    line="3.11",
    is_community_maintained=True,
    pinned_latest_release="3.11.16",
)
C4_0 = replace(
    C3_11,
    line="4.0",
    supports_read_repair=False,
    supports_thrift=False,
    supports_credential_validity_setting=True,
    supports_incremental_repair=True,
    pinned_latest_release="4.0.12",
)
C4_1 = replace(
    C4_0,
    line="4.1",
    show_upgrade_to_4=False,
    pinned_latest_release="4.1.4",
)

# === Managed lines ===

D4_8 = replace(
    C2_2,
    product=Product.MANAGED,
    line="4.8",
    is_community_maintained=False,
    recommended_os_settings_link=_DSE_SETTINGS.format("5.1"),
    pinned_latest_release="4.8.16",
)
D5_0 = replace(
    C3_X,
    product=Product.MANAGED,
    line="5.0",
    supports_off_heap_memtables=False,
    recommended_os_settings_link=_DSE_SETTINGS.format("5.1"),
    pinned_latest_release="5.0.16",
)
D5_1 = replace(
    C3_11,
    product=Product.MANAGED,
    line="5.1",
    is_community_maintained=True,
    supports_credential_validity_setting=True,
    recommended_os_settings_link=_DSE_SETTINGS.format("5.1"),
    pinned_latest_release=None,
    release_notes_file="DSE_5.1_Release_Notes.md",
)
D6_0 = replace(
    D5_1,
    line="6.0",
    is_community_maintained=False,
    is_legacy_stage_model=False,
    supports_thrift=False,
    recommended_os_settings_link=_DSE_SETTINGS.format("6.0"),
    pinned_latest_release="6.0.19",
    release_notes_file=None,
)
D6_7 = replace(
    D6_0,
    line="6.7",
    pinned_latest_release="6.7.17",
)
D6_8 = replace(
    D6_0,
    line="6.8",
    supports_read_repair=False,
    is_community_maintained=True,
    recommended_os_settings_link=_DSE_SETTINGS.format("6.8"),
    tombstone_dialect=WarningDialect.MANAGED,
    batch_dialect=WarningDialect.MANAGED,
    pinned_latest_release=None,
    release_notes_file="DSE_6.8_Release_Notes.md",
)

# Prefix tables. Order here is irrelevant: the resolver checks the longest
# prefix first.
PREFIXES: dict[Product, list[tuple[str, VersionDescriptor]]] = {
    Product.COMMUNITY: [
        ("1.", C1_2),
        ("2.0", C2_0),
        ("2.1", C2_1),
        ("2.2", C2_2),
        ("3.0", C3_0),
        ("3.11", C3_11),
        ("3.", C3_X),
        ("4.0", C4_0),
        ("4.1", C4_1),
    ],
    Product.MANAGED: [
        ("4.", D4_8),
        ("5.0", D5_0),
        ("5.1", D5_1),
        ("6.0", D6_0),
        ("6.7", D6_7),
        ("6.8", D6_8),
    ],
}

NEWEST: dict[Product, VersionDescriptor] = {
    Product.COMMUNITY: C4_1,
    Product.MANAGED: D6_8,
}
