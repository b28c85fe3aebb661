"""Component inventory: which components repeat, and what compressing them could save.

The inventory is a cheap single pass over a tree. Its size figures are
estimates (a fixed cost per compact reference); the extractor measures
the real output and has the final say.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from designcompress.domains.shared.kernel import (
    DesignNode,
    NodeTree,
    as_roots,
    serialized_size,
)

# Approximate serialized size of one compact instance reference
INSTANCE_REFERENCE_ESTIMATE = 100


@dataclass
class ComponentInventory:
    """Instances grouped by component id, restricted to repeated components.

    Attributes:
        instances_by_component: component id -> members in document order
        component_counts: component id -> number of members
        original_size: Compact-JSON size of the whole input tree
        compressed_size: Estimated size after compressing every family
    """
    instances_by_component: Dict[str, List[DesignNode]] = field(default_factory=dict)
    component_counts: Dict[str, int] = field(default_factory=dict)
    original_size: int = 0
    compressed_size: int = 0

    @property
    def estimated_savings(self) -> int:
        """May be negative when references cost more than they save."""
        return self.original_size - self.compressed_size

    @property
    def component_ids(self) -> List[str]:
        return list(self.instances_by_component)

    @property
    def total_instances(self) -> int:
        return sum(self.component_counts.values())

    def family_savings(self, component_id: str) -> int:
        """Estimated savings for one family (members minus template and references)."""
        return estimate_family_savings(self.instances_by_component.get(component_id, []))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "componentCounts": dict(self.component_counts),
            "originalSize": self.original_size,
            "compressedSize": self.compressed_size,
            "estimatedSavings": self.estimated_savings,
        }


def estimate_family_savings(instances: List[DesignNode]) -> int:
    if not instances:
        return 0
    original = sum(serialized_size(instance) for instance in instances)
    compressed = serialized_size(instances[0]) + len(instances) * INSTANCE_REFERENCE_ESTIMATE
    return original - compressed


def analyze_components(tree: NodeTree, min_instances: int = 2) -> ComponentInventory:
    """
    Group every instance in ``tree`` by component id.

    Instances nested inside other instances are counted as well.

    Args:
        tree: One root node or a sequence of roots.
        min_instances: Families with fewer members are dropped.

    Returns:
        ComponentInventory with size estimates for the retained families.
    """
    roots = as_roots(tree)
    grouped: Dict[str, List[DesignNode]] = {}

    stack: List[DesignNode] = list(reversed(roots))
    while stack:
        node = stack.pop()
        if node.component_id:
            grouped.setdefault(node.component_id, []).append(node)
        stack.extend(reversed(node.node_children))

    retained = {
        component_id: members
        for component_id, members in grouped.items()
        if len(members) >= min_instances
    }
    original_size = serialized_size(list(roots))
    savings = sum(estimate_family_savings(members) for members in retained.values())

    return ComponentInventory(
        instances_by_component=retained,
        component_counts={component_id: len(members) for component_id, members in retained.items()},
        original_size=original_size,
        compressed_size=original_size - savings,
    )


def should_extract_as_component(
    node: DesignNode, inventory: ComponentInventory, min_instances: int = 2
) -> bool:
    """True when ``node`` is an instance of a sufficiently repeated component."""
    if not node.component_id:
        return False
    return inventory.component_counts.get(node.component_id, 0) >= min_instances


def get_compression_report(inventory: ComponentInventory) -> str:
    """Human-readable summary of an inventory."""
    lines = ["=== Component Compression Analysis ===", ""]
    lines.append(f"Components detected: {len(inventory.instances_by_component)}")
    lines.append(f"Total instances: {inventory.total_instances}")
    lines.append("")

    if inventory.component_counts:
        lines.append("Components by usage:")
        ranked = sorted(inventory.component_counts.items(), key=lambda item: -item[1])
        for component_id, count in ranked:
            name = inventory.instances_by_component[component_id][0].name or "unnamed"
            lines.append(
                f"  - {name} ({component_id}): {count} instances "
                f"(~{inventory.family_savings(component_id)} bytes savings)"
            )
        lines.append("")

    percent = 0
    if inventory.original_size:
        percent = round(inventory.estimated_savings / inventory.original_size * 100)
    lines.append(f"Original size: {inventory.original_size} bytes")
    lines.append(f"Compressed size: {inventory.compressed_size} bytes")
    lines.append(f"Estimated savings: {inventory.estimated_savings} bytes ({percent}%)")
    return "\n".join(lines)
