"""
Component extraction: replace repeated component instances with compact references.

Pipeline per design:
1. Inventory: group instances by component id, keep repeated families
2. Detect slots across each family and bake defaults into a template
3. Derive one sparse override record per member
4. Lossless gate: every member must be rebuilt exactly from its record
5. Resolve nesting: members inside another compressed member are not emitted
6. Size gate: template + emitted records must be strictly smaller than the
   emitted originals (re-checked until the accepted set is stable)
7. Rewrite the tree, build the component hierarchy and statistics

Families failing a gate stay inline at full size and are reported through
a ComponentFamilySkipped event.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass, field, replace
from itertools import islice
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple, Union

from designcompress.domains.shared.kernel import (
    DesignNode,
    as_roots,
    coerce_node,
    content_of,
    serialized_size,
    to_plain,
)
from designcompress.models.config_models import CompressionConfig

from .entities import (
    CompressedInstance,
    ComponentDefinition,
    ComponentFamily,
    ComponentHierarchy,
)
from .events import ComponentFamilyCompressed, ComponentFamilySkipped, ComponentsExtracted
from .inventory import ComponentInventory, analyze_components, get_compression_report
from .naming import NamingStrategy, semantic_name
from .overrides import apply_overrides, bake_defaults, derive_overrides
from .slot_detector import SlotDetector
from .value_objects import CompressionStats, ExtractionOptions

logger = logging.getLogger(__name__)

OptionsLike = Union[ExtractionOptions, CompressionConfig, Mapping[str, Any], None]

# Skip reasons reported in ComponentFamilySkipped
SKIP_LOSSY = "lossy"
SKIP_NOT_SMALLER = "not_smaller"
SKIP_NESTED = "nested"


@dataclass
class ExtractResult:
    """Compressed design plus everything needed to expand it again."""
    name: str
    nodes: List[Any] = field(default_factory=list)
    components: Dict[str, ComponentDefinition] = field(default_factory=dict)
    component_hierarchy: Dict[str, ComponentHierarchy] = field(default_factory=dict)
    global_styles: Any = None
    stats: CompressionStats = field(default_factory=CompressionStats)

    @property
    def tree(self) -> List[Any]:
        """Output roots: DesignNodes and CompressedInstances."""
        return self.nodes

    def to_dict(self, include_variations: bool = False) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nodes": to_plain(self.nodes),
            "components": {
                component_id: definition.to_dict(include_variations=include_variations)
                for component_id, definition in self.components.items()
            },
            "componentHierarchy": {
                component_id: hierarchy.to_dict()
                for component_id, hierarchy in self.component_hierarchy.items()
            },
            "globalStyles": to_plain(self.global_styles),
            "stats": self.stats.to_dict(),
        }


def resolve_options(options: OptionsLike) -> ExtractionOptions:
    """Accept the value object, a CompressionConfig, or a plain mapping.

    Raises:
        ConfigurationError: If a config or mapping is invalid.
    """
    if options is None:
        return ExtractionOptions()
    if isinstance(options, ExtractionOptions):
        return options
    if isinstance(options, CompressionConfig):
        return options.to_extraction_options()
    return CompressionConfig.from_dict(options).to_extraction_options()


class ComponentExtractor:
    """Orchestrates component compression for one design.

    Holds only configuration; every call to ``extract`` is independent.
    """

    def __init__(
        self,
        event_publisher: Optional[Callable[[object], None]] = None,
        naming: Optional[NamingStrategy] = semantic_name,
    ) -> None:
        self._event_publisher = event_publisher
        self._naming = naming

    def extract(
        self,
        name: str,
        tree: Any,
        global_styles: Any = None,
        options: OptionsLike = None,
    ) -> ExtractResult:
        """
        Compress every qualifying component family in ``tree``.

        Args:
            name: Design name, carried through to the result.
            tree: One root node or a sequence of roots (DesignNodes or
                their plain-dict form).
            global_styles: Opaque style references, passed through.
            options: ExtractionOptions, CompressionConfig or a mapping of
                configuration keys.

        Returns:
            ExtractResult whose tree expands back to the input content.
        """
        resolved = resolve_options(options)
        roots = _coerce_roots(tree)
        inventory = analyze_components(roots, resolved.min_instances)
        detector = SlotDetector(resolved.slots, naming=self._naming)

        families: Dict[str, ComponentFamily] = {}
        skipped: Dict[str, str] = {}
        for component_id, members in inventory.instances_by_component.items():
            family = self._build_family(component_id, members, detector)
            if _is_lossless(family):
                families[component_id] = family
            else:
                skipped[component_id] = SKIP_LOSSY

        accepted, emitted = self._settle(roots, inventory, families, skipped)

        plan: Dict[str, Dict[int, CompressedInstance]] = {}
        components: Dict[str, ComponentDefinition] = {}
        original_size = compressed_size = slot_count = instance_count = 0
        for component_id in accepted:
            family = families[component_id]
            indices = emitted[component_id]
            records = family.records()
            plan[component_id] = {index: records[index] for index in indices}
            definition = replace(family.to_definition(), instance_count=len(indices))
            components[component_id] = definition

            family_original = sum(serialized_size(family.instances[i]) for i in indices)
            family_compressed = _compressed_size(family, indices)
            original_size += family_original
            compressed_size += family_compressed
            slot_count += len(definition.slots)
            instance_count += len(indices)
            logger.debug(
                f"Compressed {component_id}: {len(indices)} instances, "
                f"{len(definition.slots)} slots, {family_original} -> {family_compressed}"
            )
            self._publish(ComponentFamilyCompressed(
                design_name=name,
                component_id=component_id,
                instance_count=len(indices),
                slot_count=len(definition.slots),
                similarity_score=definition.similarity_score,
                original_size=family_original,
                compressed_size=family_compressed,
            ))

        for component_id, reason in skipped.items():
            logger.debug(f"Kept {component_id} inline ({reason})")
            self._publish(ComponentFamilySkipped(
                design_name=name,
                component_id=component_id,
                instance_count=inventory.component_counts.get(component_id, 0),
                reason=reason,
            ))

        stats = CompressionStats(
            component_count=len(components),
            instance_count=instance_count,
            original_node_count=sum(root.count_nodes() for root in roots),
            original_size=original_size,
            compressed_size=compressed_size,
            slot_count=slot_count,
            skipped_component_count=len(skipped),
        )
        result = ExtractResult(
            name=name,
            nodes=_rewrite(roots, plan),
            components=components,
            component_hierarchy=build_component_hierarchy(components),
            global_styles=global_styles,
            stats=stats,
        )

        logger.info(
            f"Extracted {stats.component_count} components ({stats.instance_count} instances) "
            f"from '{name}': {stats.original_size} -> {stats.compressed_size} chars "
            f"({stats.reduction_percent:.1f}% smaller), {stats.skipped_component_count} kept inline"
        )
        self._publish(ComponentsExtracted(
            design_name=name,
            component_count=stats.component_count,
            instance_count=stats.instance_count,
            skipped_component_count=stats.skipped_component_count,
            original_size=stats.original_size,
            compressed_size=stats.compressed_size,
        ))
        return result

    def _build_family(
        self,
        component_id: str,
        members: Sequence[DesignNode],
        detector: SlotDetector,
    ) -> ComponentFamily:
        detection = detector.detect(members)
        slots = list(detection.slots.values())
        template = bake_defaults(members[0], slots)
        return ComponentFamily(
            component_id=component_id,
            instances=tuple(members),
            template=template,
            detection=detection,
            overrides=tuple(derive_overrides(template, member, slots) for member in members),
        )

    def _settle(
        self,
        roots: Sequence[DesignNode],
        inventory: ComponentInventory,
        families: Dict[str, ComponentFamily],
        skipped: Dict[str, str],
    ) -> Tuple[List[str], Dict[str, List[int]]]:
        """Find the stable set of families that are emitted and smaller.

        Dropping an outer family exposes its nested members, which changes
        the sizes of inner families, so the size gate is re-checked until
        nothing else is dropped. The accepted set only shrinks.
        """
        accepted: List[str] = list(families)
        while True:
            emitted = _emitted_members(roots, set(accepted))
            failing = [
                component_id for component_id in accepted
                if emitted[component_id]
                and _compressed_size(families[component_id], emitted[component_id])
                >= sum(serialized_size(families[component_id].instances[i])
                       for i in emitted[component_id])
            ]
            if not failing:
                break
            for component_id in failing:
                accepted.remove(component_id)
                skipped[component_id] = SKIP_NOT_SMALLER

        for component_id in list(accepted):
            if not emitted[component_id]:
                accepted.remove(component_id)
                skipped[component_id] = SKIP_NESTED

        # skipped families are reported in inventory order
        order = {component_id: position for position, component_id in enumerate(inventory.component_ids)}
        ordered = dict(sorted(skipped.items(), key=lambda item: order.get(item[0], 0)))
        skipped.clear()
        skipped.update(ordered)
        return accepted, emitted

    def _publish(self, event: object) -> None:
        if self._event_publisher:
            try:
                self._event_publisher(event)
            except Exception as e:
                logger.error(f"Failed to publish event: {e}")


def _coerce_roots(tree: Any) -> List[DesignNode]:
    if isinstance(tree, Mapping):
        tree = [tree]
    return [coerce_node(root) for root in as_roots(tree)]


def _is_lossless(family: ComponentFamily) -> bool:
    """Every member must be rebuilt exactly (node ids below the root excepted)."""
    for member, record in zip(family.instances, family.overrides):
        rebuilt = apply_overrides(family.template, record)
        if content_of(rebuilt) != content_of(member):
            logger.debug(f"Overrides for {member.id or '<no id>'} do not reproduce it")
            return False
    return True


def _compressed_size(family: ComponentFamily, indices: Sequence[int]) -> int:
    records = family.records()
    return serialized_size(family.template) + sum(
        serialized_size(records[index]) for index in indices
    )


def _emitted_members(roots: Sequence[DesignNode], accepted: Set[str]) -> Dict[str, List[int]]:
    """Member indices (document order) of accepted instances not covered by another.

    Indices count every instance of a component, nested ones included, in
    the same pre-order the inventory uses.
    """
    counters: Counter = Counter()
    emitted: Dict[str, List[int]] = {component_id: [] for component_id in accepted}
    stack = [(root, False) for root in reversed(roots)]
    while stack:
        node, covered = stack.pop()
        component_id = node.component_id
        replaced = False
        if component_id:
            index = counters[component_id]
            counters[component_id] += 1
            if not covered and component_id in accepted:
                emitted[component_id].append(index)
                replaced = True
        inner_covered = covered or replaced
        stack.extend((child, inner_covered) for child in reversed(node.node_children))
    return emitted


def _rewrite(
    roots: Sequence[DesignNode],
    plan: Mapping[str, Mapping[int, CompressedInstance]],
) -> List[Any]:
    """Copy of the roots with planned members replaced by their compact records.

    Unchanged subtrees are shared with the input.
    """
    counters: Counter = Counter()

    def visit(node: DesignNode) -> Optional[CompressedInstance]:
        component_id = node.component_id
        if not component_id:
            return None
        index = counters[component_id]
        counters[component_id] += 1
        record = plan.get(component_id, {}).get(index)
        if record is not None:
            # keep member indices aligned for instances hidden inside
            for inner in islice(node.traverse(), 1, None):
                if inner.component_id:
                    counters[inner.component_id] += 1
        return record

    output: List[Any] = []
    for root in roots:
        record = visit(root)
        if record is not None:
            output.append(record)
            continue

        rebuilt_root: Any = root
        # frame: [node, rebuilt children, next child position]
        stack: List[List[Any]] = [[root, [], 0]]
        while stack:
            frame = stack[-1]
            node, built, position = frame
            if position < len(node.children):
                frame[2] += 1
                child = node.children[position]
                if not isinstance(child, DesignNode):
                    built.append(child)
                    continue
                record = visit(child)
                if record is not None:
                    built.append(record)
                else:
                    stack.append([child, [], 0])
                continue
            stack.pop()
            if all(new is old for new, old in zip(built, node.children)):
                rebuilt = node
            else:
                rebuilt = replace(node, children=tuple(built))
            if stack:
                stack[-1][1].append(rebuilt)
            else:
                rebuilt_root = rebuilt
        output.append(rebuilt_root)
    return output


def build_component_hierarchy(
    components: Mapping[str, ComponentDefinition],
) -> Dict[str, ComponentHierarchy]:
    """Which compressed components contain which, with nesting depth.

    Depth is the shortest distance from a component no other compressed
    component contains.
    """
    hierarchy = {component_id: ComponentHierarchy() for component_id in components}
    for component_id, definition in components.items():
        for node in islice(definition.template.traverse(), 1, None):
            inner = node.component_id
            if not inner or inner == component_id or inner not in hierarchy:
                continue
            if inner not in hierarchy[component_id].children:
                hierarchy[component_id].children.append(inner)
            if component_id not in hierarchy[inner].parents:
                hierarchy[inner].parents.append(component_id)

    queue = deque(component_id for component_id, info in hierarchy.items() if not info.parents)
    visited = set(queue)
    while queue:
        current = queue.popleft()
        for child in hierarchy[current].children:
            if child not in visited:
                hierarchy[child].depth = hierarchy[current].depth + 1
                visited.add(child)
                queue.append(child)
    return hierarchy


def extract_components(
    name: str,
    tree: Any,
    global_styles: Any = None,
    options: OptionsLike = None,
) -> ExtractResult:
    """Compress ``tree`` with a default ComponentExtractor."""
    return ComponentExtractor().extract(name, tree, global_styles, options)


def compress_components(design: Mapping[str, Any], options: OptionsLike = None) -> ExtractResult:
    """Compress a design mapping ``{"name", "nodes", "globalVars"}``."""
    return extract_components(
        design.get("name", ""),
        design.get("nodes") or [],
        design.get("globalVars"),
        options,
    )


def analyze_compression_potential(
    design: Mapping[str, Any], options: OptionsLike = None
) -> ComponentInventory:
    """Inventory of a design mapping without compressing it."""
    resolved = resolve_options(options)
    return analyze_components(_coerce_roots(design.get("nodes") or []), resolved.min_instances)


def create_compression_report(design: Mapping[str, Any], options: OptionsLike = None) -> str:
    """Human-readable compression estimate for a design mapping."""
    return get_compression_report(analyze_compression_potential(design, options))
