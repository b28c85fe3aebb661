"""Heuristic human-readable names for slots.

Names are advisory: they help a reader (or a language model) understand
what a slot controls, e.g. ``icon-color`` or ``label-text``. Nothing in the
slot or override logic depends on them, and they are not guaranteed to be
unique within a component.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from designcompress.domains.shared.kernel import DesignNode

from .paths import CHILDREN, NodePath

NamingStrategy = Callable[[NodePath, Optional[str]], Optional[str]]

_PROPERTY_LABELS = {
    "text": "Text",
    "fills": "Color",
    "strokes": "Stroke",
    "opacity": "Opacity",
    "visible": "Visibility",
    "children": "Content",
    "componentId": "Variant",
}

_WORD = re.compile(r"[A-Za-z0-9]+")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def _slug(text: str) -> str:
    words = _WORD.findall(_CAMEL_BOUNDARY.sub(r"\1 \2", text))
    return "-".join(word.lower() for word in words)


def semantic_name(path: NodePath, enclosing_name: Optional[str]) -> Optional[str]:
    """Default naming strategy: ``<enclosing node>-<property label>``.

    Examples:
        children[0].fills under a node named "Icon"  -> "icon-color"
        text under a node named "Primary Button"     -> "primary-button-text"
        cornerRadius with no usable node name        -> "corner-radius"
    """
    terminal = path.terminal_field
    if not terminal:
        return None
    label = _slug(_PROPERTY_LABELS.get(terminal, terminal))
    context = _slug(enclosing_name or "")
    if context and context != label and not context.endswith(f"-{label}"):
        return f"{context}-{label}"
    return label or None


def no_semantic_names(path: NodePath, enclosing_name: Optional[str]) -> Optional[str]:
    """Strategy that disables naming."""
    return None


def enclosing_node_name(instance: DesignNode, path: NodePath) -> Optional[str]:
    """Name of the deepest node the path passes through inside ``instance``."""
    node = instance
    steps = path.steps
    position = 0
    while position + 1 < len(steps):
        if steps[position] != CHILDREN or not isinstance(steps[position + 1], int):
            break
        index = steps[position + 1]
        children = node.node_children
        if index >= len(children):
            return None
        node = children[index]
        position += 2
    return node.name or None
