"""Expansion of compressed designs back into full node trees."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from designcompress.domains.shared.kernel import DesignNode, coerce_node

from .entities import CompressedInstance, ComponentDefinition
from .extractor import ExtractResult
from .overrides import apply_overrides

logger = logging.getLogger(__name__)

ComponentsLike = Mapping[str, Union[ComponentDefinition, DesignNode, Mapping[str, Any]]]


def _as_record(value: Any) -> Optional[CompressedInstance]:
    if isinstance(value, CompressedInstance):
        return value
    if CompressedInstance.matches(value):
        return CompressedInstance.from_dict(value)
    return None


def _parse(value: Any) -> Any:
    """Plain output data to nodes, keeping compact records as records."""
    record = _as_record(value)
    if record is not None:
        return record
    if isinstance(value, Mapping):
        return DesignNode.from_dict(value, child_factory=_parse)
    return value


def _template_of(component: Any) -> DesignNode:
    if isinstance(component, ComponentDefinition):
        return component.template
    if isinstance(component, DesignNode):
        return component
    # plain dict form of a ComponentDefinition
    return coerce_node(component["template"])


def _templates(components: ComponentsLike) -> Dict[str, DesignNode]:
    return {component_id: _template_of(component) for component_id, component in components.items()}


def expand_instance(record: CompressedInstance, template: DesignNode) -> DesignNode:
    """Rebuild one instance: template, overrides applied, record id restored."""
    return replace(apply_overrides(template, record.overrides), id=record.id)


def expand_tree(tree: Sequence[Any], components: ComponentsLike) -> List[DesignNode]:
    """
    Replace every compact reference in ``tree`` with its full subtree.

    Args:
        tree: Output roots of an extraction (nodes, records or their dicts).
        components: component id -> ComponentDefinition, template node, or
            the dict form produced by ``ComponentDefinition.to_dict``.

    Returns:
        Full DesignNode roots. References to unknown components are dropped
        with a warning.
    """
    templates = _templates(components)

    def resolve(item: Any) -> Optional[DesignNode]:
        record = _as_record(item)
        if record is None:
            return _parse(item)
        template = templates.get(record.component_id)
        if template is None:
            logger.warning(
                f"Dropping instance {record.id}: unknown component {record.component_id}"
            )
            return None
        return expand_instance(record, template)

    output: List[DesignNode] = []
    for item in tree:
        root = resolve(item)
        if root is None:
            continue

        expanded_root = root
        # frame: [node, expanded children, next child position]
        stack: List[List[Any]] = [[root, [], 0]]
        while stack:
            frame = stack[-1]
            node, built, position = frame
            if position < len(node.children):
                frame[2] += 1
                child = resolve(node.children[position])
                if child is not None:
                    stack.append([child, [], 0])
                continue
            stack.pop()
            if len(built) == len(node.children) and all(
                new is old for new, old in zip(built, node.children)
            ):
                expanded = node
            else:
                expanded = replace(node, children=tuple(built))
            if stack:
                stack[-1][1].append(expanded)
            else:
                expanded_root = expanded
        output.append(expanded_root)
    return output


def expand_design(result: Union[ExtractResult, Mapping[str, Any]]) -> List[DesignNode]:
    """Expand an ExtractResult (or its ``to_dict`` form) to full roots."""
    if isinstance(result, ExtractResult):
        return expand_tree(result.nodes, result.components)
    return expand_tree(result.get("nodes") or [], result.get("components") or {})


def validate_expansion(
    original: Sequence[Any],
    expanded: Sequence[Any],
    check_ids: bool = False,
) -> bool:
    """
    Check that two forests have the same shape.

    Compares name, type and child structure node by node. Node ids are
    compared only with ``check_ids``: inside an expanded instance,
    descendants carry the template's ids.
    """
    left = [coerce_node(node) for node in original]
    right = [coerce_node(node) for node in expanded]
    if len(left) != len(right):
        return False

    pairs = list(zip(left, right))
    while pairs:
        a, b = pairs.pop()
        if not isinstance(a, DesignNode) or not isinstance(b, DesignNode):
            return False
        if a.name != b.name or a.type != b.type:
            return False
        if check_ids and a.id != b.id:
            return False
        if len(a.children) != len(b.children):
            return False
        pairs.extend(zip(a.children, b.children))
    return True


def get_expansion_summary(result: Union[ExtractResult, Mapping[str, Any]]) -> str:
    """Human-readable summary of what expanding ``result`` would produce."""
    if isinstance(result, ExtractResult):
        name = result.name
        nodes = list(result.nodes)
        components = {
            component_id: (definition.name, len(definition.slots))
            for component_id, definition in result.components.items()
        }
    else:
        name = result.get("name", "")
        nodes = list(result.get("nodes") or [])
        components = {
            component_id: (definition.get("name", "unnamed"), len(definition.get("slotIds") or []))
            for component_id, definition in (result.get("components") or {}).items()
        }

    references: Dict[str, int] = {}
    plain_nodes = 0
    stack = list(nodes)
    while stack:
        item = stack.pop()
        record = _as_record(item)
        if record is not None:
            references[record.component_id] = references.get(record.component_id, 0) + 1
            continue
        node = _parse(item)
        if isinstance(node, DesignNode):
            plain_nodes += 1
            stack.extend(node.children)

    lines = ["=== Expansion Summary ===", "", f"Design: {name}", ""]
    lines.append(f"Components: {len(components)}")
    lines.append(f"Instances to expand: {sum(references.values())}")
    lines.append(f"Non-component nodes: {plain_nodes}")
    lines.append("")
    for component_id, (component_name, slot_count) in components.items():
        lines.append(
            f"  - {component_name} ({component_id}): "
            f"{references.get(component_id, 0)} instances, {slot_count} slots"
        )
    return "\n".join(lines)
