"""Configuration settings across nodes and their consistency."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

NOT_SET = "not_set"


@dataclass(frozen=True)
class ConfigValue:
    """A setting's value on one node.

    ``is_set`` is False when the node did not report the key; ``value`` is
    then empty and ``default`` is what the database would use.
    """

    is_set: bool
    default: str = ""
    value: str = ""

    @property
    def effective(self) -> str:
        return self.value if self.is_set else self.default

    @property
    def normalized(self) -> str:
        return self.value.strip()


@dataclass(frozen=True)
class Coverage:
    """How many nodes reported a setting out of the cluster's nodes."""

    reporting: int
    total: int

    @property
    def is_partial(self) -> bool:
        return 0 < self.reporting < self.total

    @property
    def is_complete(self) -> bool:
        return self.reporting == self.total


class ConfigurationSetting:
    """One setting name and the value each node holds for it."""

    def __init__(self, name: str, values: Optional[dict[str, ConfigValue]] = None):
        self.name = name
        self.values: dict[str, ConfigValue] = dict(values or {})

    def add(self, node: str, value: ConfigValue) -> None:
        self.values[node] = value

    def reporting_nodes(self) -> list[str]:
        return [node for node, v in self.values.items() if v.is_set]

    def distinct_values(self) -> set[str]:
        """Distinct trimmed values among nodes that reported the setting."""
        return {v.normalized for v in self.values.values() if v.is_set}

    def is_consistent(self) -> bool:
        """True when reporting nodes agree.

        Nodes that did not report the setting are left out of the
        comparison; a setting nobody reports is consistent. Use
        ``coverage`` to tell partial reporting apart from full agreement.
        """
        return len(self.distinct_values()) <= 1

    def coverage(self, total_nodes: Optional[int] = None) -> Coverage:
        total = len(self.values) if total_nodes is None else total_nodes
        return Coverage(len(self.reporting_nodes()), total)

    def value_for_node(self, node: str) -> Optional[ConfigValue]:
        return self.values.get(node)

    def nodes_by_value(self) -> dict[str, list[str]]:
        """Trimmed value -> nodes holding it (reporting nodes only)."""
        grouped: dict[str, list[str]] = {}
        for node, value in self.values.items():
            if value.is_set:
                grouped.setdefault(value.normalized, []).append(node)
        return grouped

    def __iter__(self) -> Iterator[tuple[str, ConfigValue]]:
        return iter(self.values.items())

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return f"ConfigurationSetting({self.name!r}, {len(self.values)} nodes)"
