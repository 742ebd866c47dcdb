"""Incremental repair usage on lines where it should be avoided."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import Category, Recommendation

if TYPE_CHECKING:
    from ..context import RuleContext


class IncrementalRepairRule:
    name = "incremental_repair"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        recs = []
        for node in context.cluster.nodes:
            if node.version.supports_incremental_repair or not node.sstables.has_incremental_repair():
                continue
            tables = [t for t, share in node.sstables.repaired_fraction_by_table().items() if share > 0]
            recs.append(
                Recommendation.near(
                    Category.OPERATIONS,
                    f"Incremental repair has been used on {len(tables)} table(s), which is not "
                    f"recommended on {node.version.release_major_minor}. We recommend switching to "
                    "full repairs and marking the SSTables as unrepaired.",
                    [node.name],
                )
            )
        return recs
