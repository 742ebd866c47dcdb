"""Release-level advice: support status, upgrades, patch level, mixed releases."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...versions import VersionDescriptor, newest_line
from ..models import Category, Recommendation

if TYPE_CHECKING:
    from ..context import RuleContext


def _software(descriptor: VersionDescriptor) -> str:
    return "DSE" if descriptor.is_managed else "Cassandra"


class VersionSupportRule:
    """Unsupported lines, the upgrade path to the newest line, and patch level."""

    name = "version_support"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        recs: list[Recommendation] = []
        for release, nodes in context.cluster.nodes_by_release().items():
            descriptor = context.cluster.node(nodes[0]).version
            recs.extend(self._advice(descriptor, nodes, context))
        return recs

    def _advice(self, version: VersionDescriptor, nodes: list[str], context: RuleContext) -> list[Recommendation]:
        recs = []
        if version.is_managed:
            if not version.is_community_maintained:
                recs.append(
                    Recommendation.near(
                        Category.INFRASTRUCTURE,
                        f"The version of DSE currently being used ({version.release}) is no longer "
                        "supported. We strongly recommend that you upgrade to DSE 5.1 or 6.8.",
                        nodes,
                    )
                )
        elif version.show_upgrade_to_4:
            target = newest_line(managed=False).pinned_latest_release
            if version.is_community_maintained:
                finding = (
                    f"Cassandra {version.release_major_minor} is still maintained by the community, "
                    f"but we recommend planning an upgrade to Cassandra {target}."
                )
            else:
                finding = (
                    f"Cassandra {version.release_major_minor} is no longer maintained by the community. "
                    f"We recommend upgrading to Cassandra {target}."
                )
            recs.append(Recommendation.long(Category.INFRASTRUCTURE, finding, nodes))

        lookup = context.release_lookup(version.release)
        if version.recognized and lookup is not None and lookup.confident and lookup.upgrade_available:
            recs.append(
                Recommendation.near(
                    Category.INFRASTRUCTURE,
                    "We recommend upgrading to the latest patch level, which at the time of "
                    f"writing is {_software(version)} {lookup.latest.release}.",
                    nodes,
                )
            )
        return recs


class MixedVersionRule:
    """More than one release running in the cluster."""

    name = "mixed_versions"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        by_release = context.cluster.nodes_by_release()
        if len(by_release) < 2:
            return []
        software = "DSE" if context.cluster.is_managed_variant else "Cassandra"
        counts = ", ".join(f"{release or 'unknown'} ({len(nodes)} nodes)" for release, nodes in by_release.items())
        return [
            Recommendation.immediate(
                Category.INFRASTRUCTURE,
                f"We recommend that a single version of {software} is used within the cluster. "
                f"Versions found: {counts}.",
                context.cluster.node_names,
            )
        ]
