"""Reading and writing values at canonical paths, and override records.

An override record is a sparse ``{canonical path: value}`` mapping for one
instance. Applying it to the family template rebuilds that instance.
Writes are copy-on-write: the template is never modified and untouched
subtrees are shared between the template and the result.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Sequence, Tuple, Union

from designcompress.domains.shared.kernel import DesignNode, content_of

from .entities import SlotDefinition
from .paths import NodePath, PathStep

logger = logging.getLogger(__name__)

PathLike = Union[NodePath, str]


def _as_path(path: PathLike) -> NodePath:
    return path if isinstance(path, NodePath) else NodePath.parse(path)


def value_at(node: Any, path: PathLike) -> Any:
    """Value stored at ``path`` below ``node``; None when it does not resolve."""
    current = node
    for step in _as_path(path):
        if isinstance(current, DesignNode):
            current = current.get(step) if isinstance(step, str) else None
        elif isinstance(step, int):
            if isinstance(current, (list, tuple)) and 0 <= step < len(current):
                current = current[step]
            else:
                current = None
        elif isinstance(current, Mapping):
            current = current.get(step)
        else:
            current = None
        if current is None:
            return None
    return current


def _write(current: Any, steps: Sequence[PathStep], value: Any) -> Tuple[Any, bool]:
    """Copy of ``current`` with ``value`` stored at ``steps``, plus a resolved flag."""
    if not steps:
        return value, True
    step, rest = steps[0], steps[1:]

    if isinstance(current, DesignNode):
        if not isinstance(step, str):
            return current, False
        if not rest:
            return current.with_field(step, value), True
        inner = current.get(step)
        if inner is None:
            return current, False
        updated, resolved = _write(inner, rest, value)
        if not resolved:
            return current, False
        return current.with_field(step, updated), True

    if isinstance(current, (list, tuple)) and isinstance(step, int):
        if not 0 <= step < len(current):
            return current, False
        updated, resolved = _write(current[step], rest, value)
        if not resolved:
            return current, False
        items = list(current)
        items[step] = updated
        return (tuple(items) if isinstance(current, tuple) else items), True

    if isinstance(current, Mapping) and isinstance(step, str):
        result = dict(current)
        if not rest:
            if value is None:
                result.pop(step, None)
            else:
                result[step] = value
            return result, True
        if step not in current:
            return current, False
        updated, resolved = _write(current[step], rest, value)
        if not resolved:
            return current, False
        result[step] = updated
        return result, True

    return current, False


def set_value_at(node: DesignNode, path: PathLike, value: Any) -> Tuple[DesignNode, bool]:
    """Copy of ``node`` with ``value`` stored at ``path``.

    Returns:
        Tuple of (new node, whether the path resolved). When the path does
        not resolve the original node is returned unchanged.
    """
    steps = _as_path(path).steps
    if not steps:
        return node, False
    return _write(node, steps, value)


def apply_overrides(template: DesignNode, overrides: Mapping[Any, Any]) -> DesignNode:
    """
    Rebuild an instance by applying an override record to a template.

    Every path present in ``overrides`` is replaced by its value (``None``
    removes the attribute). Paths that do not resolve inside the template,
    e.g. a missing child index, are skipped so that a partial
    reconstruction is still produced.

    Args:
        template: The family template node.
        overrides: Mapping of canonical path (string or NodePath) to value.

    Returns:
        A new DesignNode; ``template`` is left untouched.
    """
    result = template
    for path_key, value in overrides.items():
        result, resolved = set_value_at(result, path_key, value)
        if not resolved:
            logger.debug("Ignoring override for unresolved path %r", str(path_key))
    return result


def derive_overrides(
    template: DesignNode,
    instance: DesignNode,
    slots: Iterable[SlotDefinition],
) -> Dict[str, Any]:
    """Sparse override record for ``instance`` restricted to slot paths.

    A slot path is recorded only when the instance's value differs from the
    template's under the slot's value-type equality. Node ids inside the
    compared values are ignored.
    """
    record: Dict[str, Any] = {}
    for slot in slots:
        path = slot.path
        template_value = value_at(template, path)
        instance_value = value_at(instance, path)
        if not slot.value_type.equal(content_of(template_value), content_of(instance_value)):
            record[slot.node_path] = instance_value
    return record


def bake_defaults(node: DesignNode, slots: Iterable[SlotDefinition]) -> DesignNode:
    """Template with every slot fixed to its default value."""
    return apply_overrides(node, {slot.node_path: slot.default_value for slot in slots})
