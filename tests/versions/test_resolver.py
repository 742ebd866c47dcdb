"""Tests for release string resolution."""

from dataclasses import FrozenInstanceError

import pytest

from ring_insight.versions import (
    PartitionWarningFormat,
    Product,
    WarningDialect,
    newest_line,
    resolve,
)
from ring_insight.versions.table import PREFIXES


class TestLongestPrefix:
    """The most specific release line wins."""

    @pytest.mark.parametrize(
        "release,line",
        [
            ("1.2.9", "1.2"),
            ("2.0.17", "2.0"),
            ("2.1.20", "2.1"),
            ("2.2.8", "2.2"),
            ("3.0.24", "3.0"),
            ("3.11.14", "3.11"),
            ("3.10", "3.x"),
            ("3.7.1", "3.x"),
            ("4.0.5", "4.0"),
            ("4.1.2", "4.1"),
        ],
    )
    def test_community_lines(self, release, line):
        """Community releases resolve to their line."""
        descriptor = resolve(release)
        assert descriptor.line == line
        assert descriptor.product is Product.COMMUNITY
        assert descriptor.recognized

    @pytest.mark.parametrize(
        "release,line",
        [
            ("4.8.16", "4.8"),
            ("5.0.15", "5.0"),
            ("5.1.30", "5.1"),
            ("6.0.18", "6.0"),
            ("6.7.15", "6.7"),
            ("6.8.33", "6.8"),
        ],
    )
    def test_managed_lines(self, release, line):
        """Managed releases resolve to their line."""
        descriptor = resolve(release, managed=True)
        assert descriptor.line == line
        assert descriptor.product is Product.MANAGED

    def test_3_11_beats_3_prefix(self):
        """'3.11' is longer than '3.' and wins."""
        assert resolve("3.11.1").line == "3.11"

    def test_every_table_prefix_resolves_to_itself(self):
        """Each table entry is the longest match for its own prefix."""
        for product, entries in PREFIXES.items():
            managed = product is Product.MANAGED
            for prefix, template in entries:
                assert resolve(prefix + "9", managed).line == template.line

    def test_release_string_is_kept(self):
        """The raw release string is stamped on the descriptor."""
        assert resolve("3.11.14").release == "3.11.14"
        assert str(resolve("3.11.14")) == "3.11.14"


class TestFallback:
    """Unrecognized strings resolve to the newest known line."""

    def test_unknown_community_release(self):
        """Unknown community release assumes 4.1."""
        descriptor = resolve("9.9.9")
        assert descriptor.line == newest_line().line == "4.1"
        assert descriptor.recognized is False
        assert descriptor.release == "9.9.9"

    def test_unknown_managed_release(self):
        """Unknown managed release assumes 6.8."""
        descriptor = resolve("7.0.0", managed=True)
        assert descriptor.line == newest_line(managed=True).line == "6.8"
        assert descriptor.product is Product.MANAGED
        assert descriptor.recognized is False

    def test_empty_release_never_none(self):
        """An empty string still yields a full descriptor."""
        descriptor = resolve("")
        assert descriptor is not None
        assert descriptor.line == "4.1"
        assert descriptor.max_partition_size_metric == "MaxPartitionSize"

    def test_same_product_differs_by_managed_flag(self):
        """'4.0.1' is community 4.0 but managed 4.8."""
        assert resolve("4.0.1").line == "4.0"
        assert resolve("4.0.1", managed=True).line == "4.8"


class TestDescriptorFacts:
    """Version-dependent facts."""

    def test_major_minor(self):
        """Three-part release strings drop the patch level."""
        assert resolve("3.11.14").release_major_minor == "3.11"
        assert resolve("4.0").release_major_minor == "4.0"

    def test_row_metrics_on_1_2(self):
        """1.2 exposes row-named partition metrics."""
        descriptor = resolve("1.2.19")
        assert descriptor.max_partition_size_metric == "MaxRowSize"
        assert descriptor.estimated_row_count_metric == "EstimatedRowCount"
        assert descriptor.partition_warning_format is PartitionWarningFormat.ROW
        assert descriptor.supports_vnodes is False

    def test_partition_formats(self):
        """Partition warnings changed format at 2.1 and 3.x."""
        assert resolve("2.1.22").partition_warning_format is PartitionWarningFormat.BYTES
        assert resolve("3.11.4").partition_warning_format is PartitionWarningFormat.HUMAN

    def test_4_0_capabilities(self):
        """4.0 dropped read repair chance and thrift."""
        descriptor = resolve("4.0.3")
        assert descriptor.supports_read_repair is False
        assert descriptor.supports_thrift is False
        assert descriptor.supports_incremental_repair is True
        assert descriptor.show_upgrade_to_4 is True
        assert resolve("4.1.0").show_upgrade_to_4 is False

    @pytest.mark.parametrize("release", ["2.2.19", "3.0.29", "3.11.4", "4.0.3"])
    def test_debug_logging_kept(self, release):
        """No community line asks for the async debug log to be disabled."""
        assert resolve(release).should_disable_debug_logging is False

    def test_managed_6_8_dialects(self):
        """DSE 6.8 words tombstone and batch warnings differently."""
        descriptor = resolve("6.8.20", managed=True)
        assert descriptor.tombstone_dialect is WarningDialect.MANAGED
        assert descriptor.batch_dialect is WarningDialect.MANAGED
        assert descriptor.is_legacy_stage_model is False
        assert descriptor.is_managed

    def test_batch_threshold_bytes(self):
        """Batch threshold is configured in kB."""
        assert resolve("3.11.4").batch_size_warn_threshold_bytes == 5 * 1024

    def test_descriptor_is_immutable(self):
        """Descriptors cannot be changed after resolution."""
        with pytest.raises(FrozenInstanceError):
            resolve("3.11.4").supports_vnodes = False

    def test_resolution_is_cached(self):
        """The same release string yields the same descriptor."""
        assert resolve("3.11.4") is resolve("3.11.4")
        assert resolve("3.11.4") == resolve("3.11.4")
