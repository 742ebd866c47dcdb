"""Ring topology: downed nodes, missing collections and token ownership balance."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ...model.node import RingEntry
from ..models import Category, Recommendation

if TYPE_CHECKING:
    from ...model.cluster import ClusterSnapshot
    from ..context import RuleContext

MURMUR3_RANGE = 2**64
RANDOM_RANGE = 2**127
_MURMUR3_MAX = 2**63 - 1


class DownedNodesRule:
    """Nodes reported down, and status listings larger than the collection."""

    name = "downed_nodes"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        cluster = context.cluster
        recs = []

        downed = cluster.downed_nodes()
        if downed:
            addresses = ", ".join(row.address for row in downed)
            recs.append(
                Recommendation.immediate(
                    Category.INFRASTRUCTURE,
                    f"{len(downed)} node(s) were reported down at collection time: {addresses}. "
                    "We recommend investigating why they are down and bringing them back up.",
                )
            )

        listed = len(cluster.status_rows())
        if listed > len(cluster):
            recs.append(
                Recommendation.near(
                    Category.INFRASTRUCTURE,
                    f"The status listing shows {listed} nodes but diagnostics were collected "
                    f"for {len(cluster)}. The analysis may be missing problems on the other nodes.",
                )
            )
        return recs


class TokenOwnershipRule:
    """Uneven token ownership between nodes of the ring."""

    name = "token_ownership"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        ownership = ring_ownership(context.cluster)
        if len(ownership) < 2:
            return []

        threshold = context.limits.token_ownership_percentage_imbalance_threshold
        highest = max(ownership.values())
        lowest = min(ownership.values())
        if highest * (1.0 - threshold) < lowest:
            return []

        return [
            Recommendation.long(
                Category.CONFIGURATION,
                f"Token ownership is unbalanced: between {lowest:.1%} and {highest:.1%} per node. "
                "We recommend rebalancing the ring so that every node owns a similar share of the data.",
            )
        ]


def ring_ownership(cluster: ClusterSnapshot) -> dict[str, float]:
    """Fraction of the token range owned by each address.

    Uses the first ring listing found; falls back to the ownership column of
    the status listings when no node reported its ring.
    """
    for node in cluster.nodes:
        if node.ring:
            owned = _ownership_from_tokens(node.ring)
            if owned:
                return owned

    fallback = {}
    for row in cluster.status_rows():
        fraction = row.ownership_fraction
        if fraction is not None:
            fallback[row.address] = fraction
    return fallback


def _ownership_from_tokens(ring: tuple[RingEntry, ...]) -> dict[str, float]:
    tokens: list[tuple[int, str]] = []
    for entry in ring:
        token = _as_int(entry.token)
        if token is not None:
            tokens.append((token, entry.address))
    if not tokens:
        return {}

    tokens.sort()
    full_range = RANDOM_RANGE if tokens[-1][0] > _MURMUR3_MAX else MURMUR3_RANGE
    owned: dict[str, int] = {}
    previous = tokens[-1][0] - full_range
    for token, address in tokens:
        owned[address] = owned.get(address, 0) + (token - previous)
        previous = token
    return {address: span / full_range for address, span in owned.items()}


def _as_int(text: str) -> Optional[int]:
    try:
        return int(text.strip())
    except ValueError:
        return None
