"""Build a ClusterSnapshot from per-node artifact bundles.

Nodes are built independently on a thread pool. A missing or unparsable
artifact never drops its node: the node keeps sentinel values for that
artifact and a load error is recorded.
"""

from __future__ import annotations

import json
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Any, Callable, Iterable, Optional, TypeVar

from ..config import ExecutionProfile
from ..exceptions import ArtifactError, EmptyClusterError
from ..exceptions.taxonomy import ErrorCode
from ..load_errors import ALL_NODES, LoadErrorLog
from ..logging_config import get_logger
from ..logs.entry import parse_log_lines
from ..metrics.formatting import parse_human_bytes
from ..versions import resolve
from .artifacts import CASSANDRA_YAML, DSE_YAML, NodeArtifacts, Unparsable
from .cluster import ClusterSnapshot
from .node import (
    UNKNOWN,
    GossipState,
    NodeInfo,
    NodeSnapshot,
    RingEntry,
    StatusRow,
    Workload,
)
from .sstables import SSTableStatistics, parse_statistics_dump

logger = get_logger(__name__)

_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

T = TypeVar("T")


def assemble_cluster(
    bundles: Iterable[NodeArtifacts],
    profile: Optional[ExecutionProfile] = None,
    workers: Optional[int] = None,
    load_errors: Optional[LoadErrorLog] = None,
) -> ClusterSnapshot:
    """
    Build the cluster snapshot.

    Args:
        bundles: One artifact bundle per node
        profile: Execution profile; defaults when None
        workers: Thread pool size (None = auto-detect)
        load_errors: Shared collection to append to; a new one when None

    Returns:
        ClusterSnapshot with nodes in input order

    Raises:
        EmptyClusterError: If no bundles were supplied
    """
    bundles = list(bundles)
    if not bundles:
        raise EmptyClusterError()

    if load_errors is None:
        load_errors = LoadErrorLog()

    max_workers = min(workers or _DEFAULT_WORKERS, len(bundles))
    built: list[Optional[NodeSnapshot]] = [None] * len(bundles)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(build_node, bundle, load_errors, index): index
            for index, bundle in enumerate(bundles)
        }
        for future in as_completed(futures):
            built[futures[future]] = future.result()

    nodes = _unique_names([node for node in built if node is not None], load_errors)
    cluster = ClusterSnapshot(nodes, profile, load_errors)
    _check_topology(cluster)
    logger.debug(f"Assembled cluster of {len(cluster)} nodes with {len(load_errors)} load errors")
    return cluster


def build_node(artifacts: NodeArtifacts, load_errors: LoadErrorLog, index: int = 0) -> NodeSnapshot:
    """Build one node snapshot, recording every degraded artifact."""
    name = artifacts.name or artifacts.listen_address
    if not name:
        name = f"node-{index + 1}"
        load_errors.add(name, "node name missing, positional name used", ErrorCode.RI102)
    listen_address = artifacts.listen_address or name

    managed = artifacts.managed or DSE_YAML in artifacts.configs
    release = artifacts.release
    if release is None or isinstance(release, Unparsable):
        load_errors.add(name, "release version missing, newest known line assumed", ErrorCode.RI201)
        release = ""
    version = resolve(str(release), managed)
    if release and not version.recognized:
        load_errors.add(
            name,
            f"release '{release}' not recognized, treated as {version.product.value} {version.line}",
            ErrorCode.RI200,
        )

    def load(artifact: str, raw: Any, convert: Callable[[Any], T], sentinel: T) -> T:
        return _load(name, artifact, raw, convert, sentinel, load_errors)

    info = load("info", artifacts.info, _to_info, NodeInfo())
    status_rows = load("status", artifacts.status, _to_status_rows, ())
    ring = load("ring", artifacts.ring, _to_ring, ())
    gossip = load("gossip", artifacts.gossip, _to_gossip, {})
    logs = load("logs", artifacts.logs, lambda raw: tuple(parse_log_lines(_lines(raw), name)), ())
    metrics = load("metrics", artifacts.metrics, _to_metrics, {})
    sstables = load(
        "sstable statistics", artifacts.sstable_statistics, _to_sstables, SSTableStatistics()
    )
    configs = _to_configs(name, artifacts.configs, load_errors)

    own_row = next((row for row in status_rows if row.address == listen_address), None)
    if own_row is not None and info.datacenter == UNKNOWN:
        info = replace(info, datacenter=own_row.datacenter, rack=own_row.rack)

    workloads = frozenset({Workload.CASSANDRA})
    if managed:
        own_gossip = gossip.get(listen_address) or gossip.get(name)
        if own_gossip is not None:
            workloads = own_gossip.workloads()

    return NodeSnapshot(
        name=name,
        version=version,
        listen_address=listen_address,
        info=info,
        status_rows=status_rows,
        ring=ring,
        gossip=gossip,
        workloads=workloads,
        sstables=sstables,
        configs=configs,
        logs=logs,
        metrics=metrics,
    )


def _load(
    node: str,
    artifact: str,
    raw: Any,
    convert: Callable[[Any], T],
    sentinel: T,
    load_errors: LoadErrorLog,
) -> T:
    if raw is None:
        load_errors.add(node, f"{artifact} missing", ErrorCode.RI100)
        return sentinel
    if isinstance(raw, Unparsable):
        ArtifactError(node, artifact, raw.reason).record(load_errors)
        return sentinel
    try:
        return convert(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        ArtifactError(node, artifact, f"{type(e).__name__}: {e}").record(load_errors)
        return sentinel


# === Converters ===


def _to_bytes(value: Any) -> int:
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return parse_human_bytes(text)


def _to_info(raw: dict) -> NodeInfo:
    uptime = raw.get("uptime_seconds")
    return NodeInfo(
        datacenter=raw.get("data_center") or raw.get("datacenter") or UNKNOWN,
        rack=raw.get("rack") or UNKNOWN,
        load_bytes=_to_bytes(raw.get("load", -1)),
        uptime_seconds=int(uptime) if uptime is not None else None,
        host_id=str(raw.get("id", "")),
    )


def _to_status_rows(raw: list) -> tuple[StatusRow, ...]:
    return tuple(
        StatusRow(
            state=str(row["status"]),
            address=str(row["address"]),
            load=_to_bytes(row.get("load", -1)),
            tokens=int(row.get("tokens", -1)),
            ownership=str(row.get("ownership", "")),
            host_id=str(row.get("host_id", "")),
            rack=row.get("rack") or UNKNOWN,
            datacenter=row.get("datacenter") or UNKNOWN,
        )
        for row in raw
    )


def _to_ring(raw: list) -> tuple[RingEntry, ...]:
    return tuple(
        RingEntry(
            address=str(row["address"]),
            token=str(row["token"]),
            datacenter=row.get("datacenter") or UNKNOWN,
            rack=row.get("rack") or UNKNOWN,
            status=str(row.get("status", "")),
            state=str(row.get("state", "")),
            load=str(row.get("load", "")),
            ownership=str(row.get("ownership", "")),
        )
        for row in raw
    )


def _to_gossip(raw: dict) -> dict[str, GossipState]:
    states = {}
    for address, state in raw.items():
        dse_options = state.get("dse_options") or {}
        if isinstance(dse_options, str):
            dse_options = json.loads(dse_options)
        states[str(address).lstrip("/")] = GossipState(
            generation=int(state.get("generation", -1)),
            heartbeat=int(state.get("heartbeat", -1)),
            status=str(state.get("status", "")),
            schema=str(state.get("schema", "")),
            dc=state.get("dc") or UNKNOWN,
            rack=state.get("rack") or UNKNOWN,
            release_version=str(state.get("release_version", "")),
            internal_ip=str(state.get("internal_ip", "")),
            rpc_address=str(state.get("rpc_address", "")),
            dse_options=dse_options,
            host_id=str(state.get("host_id", "")),
            rpc_ready=str(state.get("rpc_ready", "false")).lower() == "true",
        )
    return states


def _lines(raw: Any) -> list[str]:
    if isinstance(raw, str):
        return raw.splitlines()
    return [str(line) for line in raw]


def _to_metrics(raw: dict) -> dict[str, dict[str, float]]:
    return {
        str(metric): {str(scope): float(value) for scope, value in scopes.items()}
        for metric, scopes in raw.items()
    }


def _to_sstables(raw: list) -> SSTableStatistics:
    return SSTableStatistics(parse_statistics_dump(e["path"], e.get("dump", "")) for e in raw)


def _to_configs(node: str, raw: dict, load_errors: LoadErrorLog) -> dict[str, dict[str, str]]:
    configs: dict[str, dict[str, str]] = {}
    for source, tree in raw.items():
        converted = _load(
            node,
            source,
            tree,
            lambda t: {str(k): str(v) for k, v in t.items() if v is not None},
            None,
            load_errors,
        )
        if converted is not None:
            configs[source] = converted
    if CASSANDRA_YAML not in raw:
        load_errors.add(node, f"{CASSANDRA_YAML} missing", ErrorCode.RI100)
    return configs


# === Cluster-level checks ===


def _unique_names(nodes: list[NodeSnapshot], load_errors: LoadErrorLog) -> list[NodeSnapshot]:
    seen: dict[str, int] = {}
    unique = []
    for node in nodes:
        count = seen.get(node.name, 0) + 1
        seen[node.name] = count
        if count > 1:
            renamed = f"{node.name}#{count}"
            load_errors.add(node.name, f"duplicate node name, kept as {renamed}", ErrorCode.RI102)
            node = replace(node, name=renamed)
        unique.append(node)
    return unique


def _check_topology(cluster: ClusterSnapshot) -> None:
    rows = cluster.status_rows()
    if not rows:
        return
    if len(rows) != len(cluster):
        cluster.load_errors.add(
            ALL_NODES,
            f"{len(cluster)} node artifact folders but {len(rows)} nodes in status output",
            ErrorCode.RI103,
        )
    downed = cluster.downed_nodes()
    if downed:
        addresses = ", ".join(row.address for row in downed)
        cluster.load_errors.add(ALL_NODES, f"nodes reported down: {addresses}", ErrorCode.RI104)
