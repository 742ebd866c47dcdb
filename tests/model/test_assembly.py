"""Tests for cluster assembly from node artifact bundles."""

import pytest

from ring_insight.exceptions import EmptyClusterError, ErrorCode
from ring_insight.load_errors import ALL_NODES, LoadErrorLog
from ring_insight.model import (
    DSE_YAML,
    UNKNOWN,
    NodeArtifacts,
    Workload,
    assemble_cluster,
    build_node,
)


class TestEmptyInput:
    def test_no_bundles_is_fatal(self):
        """Zero nodes is reported, never an empty success."""
        with pytest.raises(EmptyClusterError):
            assemble_cluster([])


class TestMissingArtifacts:
    """Missing artifacts keep their sentinels and are reported."""

    def test_bare_bundle(self):
        """Every absent artifact is a RI100 load error."""
        errors = LoadErrorLog()
        node = build_node(NodeArtifacts(name="a", release="3.11.4"), errors)

        assert node.name == "a"
        assert node.info.load_bytes == -1
        assert node.datacenter == UNKNOWN
        assert node.logs == ()
        assert node.status_rows == ()
        assert len(node.sstables) == 0
        missing = [e.reason for e in errors.with_code(ErrorCode.RI100)]
        assert len(missing) == 8
        assert "cassandra.yaml missing" in missing
        assert all(e.node == "a" for e in errors)

    def test_healthy_bundle_has_no_errors(self, node_bundle):
        errors = LoadErrorLog()
        build_node(node_bundle("a"), errors)
        assert len(errors) == 0


class TestUnparsableArtifacts:
    """Unparsable artifacts are treated like missing ones."""

    def test_loader_marker(self, node_bundle):
        """A loader's unparsable marker becomes RI101 with the reason."""
        artifacts = NodeArtifacts.from_dict(
            {
                "name": "a",
                "release": "3.11.4",
                "status": {"unparsable": "bad header"},
                "configs": {"cassandra.yaml": {"num_tokens": 16}},
            }
        )
        errors = LoadErrorLog()
        node = build_node(artifacts, errors)
        unparsable = errors.with_code(ErrorCode.RI101)
        assert len(unparsable) == 1
        assert "bad header" in unparsable[0].reason
        assert node.status_rows == ()
        assert node.setting("num_tokens") == "16"

    def test_conversion_failure(self, node_bundle):
        """A structurally wrong artifact never raises to the caller."""
        errors = LoadErrorLog()
        node = build_node(node_bundle("a", status=[{"address": "10.0.0.1"}]), errors)
        assert node.status_rows == ()
        assert errors.first(ErrorCode.RI101) is not None


class TestVersions:
    def test_missing_release(self, node_bundle):
        """No release string assumes the newest line."""
        errors = LoadErrorLog()
        node = build_node(node_bundle("a", release=None), errors)
        assert node.version.line == "4.1"
        assert errors.first(ErrorCode.RI201) is not None

    def test_unrecognized_release(self, node_bundle):
        """An unknown release is a recorded approximation."""
        errors = LoadErrorLog()
        node = build_node(node_bundle("a", release="9.9.9"), errors)
        assert node.version.recognized is False
        assert "9.9.9" in errors.first(ErrorCode.RI200).reason

    def test_managed_detected_from_dse_yaml(self, node_bundle):
        """A dse.yaml source marks the node as managed."""
        node = build_node(
            node_bundle("a", release="6.8.20", configs={"cassandra.yaml": {}, DSE_YAML: {}}),
            LoadErrorLog(),
        )
        assert node.is_managed
        assert node.version.line == "6.8"


class TestNodeFacts:
    def test_positional_name(self, node_bundle):
        """A nameless node gets a positional name."""
        errors = LoadErrorLog()
        node = build_node(node_bundle(None, listen_address=None), errors, index=2)
        assert node.name == "node-3"
        assert errors.first(ErrorCode.RI102) is not None

    def test_datacenter_from_own_status_row(self, node_bundle):
        """Info without a datacenter borrows it from the status listing."""
        status = [
            {"status": "UN", "address": "a", "datacenter": "east", "rack": "r2"},
            {"status": "UN", "address": "b", "datacenter": "west", "rack": "r1"},
        ]
        node = build_node(node_bundle("a", info={}, status=status), LoadErrorLog())
        assert node.datacenter == "east"
        assert node.rack == "r2"

    def test_workloads_from_gossip(self, node_bundle):
        """Managed nodes read their workloads from their own gossip state."""
        gossip = {"/a": {"dse_options": '{"workloads": "CassandraSearch", "graph": true}'}}
        node = build_node(
            node_bundle("a", release="6.8.20", managed=True, gossip=gossip), LoadErrorLog()
        )
        assert node.workloads == {Workload.CASSANDRA, Workload.SEARCH, Workload.GRAPH}

    def test_human_readable_load(self, node_bundle):
        node = build_node(node_bundle("a", info={"load": "1.5 GiB"}), LoadErrorLog())
        assert node.info.load_bytes == int(1.5 * 1024 ** 3)


class TestClusterChecks:
    """Cluster-level checks run after every node is built."""

    def test_input_order_kept(self, node_bundle):
        cluster = assemble_cluster([node_bundle(n) for n in ("c", "a", "b")], workers=3)
        assert cluster.node_names == ["c", "a", "b"]

    def test_duplicate_names_renamed(self, node_bundle):
        """Duplicate folders are kept under a suffixed name."""
        cluster = assemble_cluster([node_bundle("a"), node_bundle("a")])
        assert cluster.node_names == ["a", "a#2"]
        assert cluster.load_errors.first(ErrorCode.RI102).node == "a"

    def test_status_count_mismatch(self, node_bundle):
        """More nodes in the status listing than folders is reported."""
        status = [
            {"status": "UN", "address": "a"},
            {"status": "UN", "address": "b"},
            {"status": "DN", "address": "c"},
        ]
        cluster = assemble_cluster([node_bundle("a", status=status)])
        mismatch = cluster.load_errors.first(ErrorCode.RI103)
        assert mismatch.node == ALL_NODES
        assert "3 nodes" in mismatch.reason
        assert "c" in cluster.load_errors.first(ErrorCode.RI104).reason
        assert [row.address for row in cluster.downed_nodes()] == ["c"]

    def test_shared_error_log(self, node_bundle):
        """A caller-supplied log collects every error."""
        errors = LoadErrorLog()
        cluster = assemble_cluster([node_bundle("a", ring=None)], load_errors=errors)
        assert cluster.load_errors is errors
        assert len(errors.for_node("a")) == 1
