"""Shared Kernel - Core domain types shared across the compression context.

These types are intentionally minimal and shared between:
- Path addressing and the Override Applier (read/write node attributes)
- Slot Detector and Instance Inventory (read-only traversal)
- Component Extractor and Expander (tree rewriting)

The node tree is produced by an external design-tool client and is treated
as immutable: every rewrite goes through ``with_field`` / ``with_children``
and returns a new node.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Literal,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from pydantic import BeforeValidator, TypeAdapter


# External schema key -> DesignNode attribute
NODE_FIELDS: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "type": "type",
    "componentId": "component_id",
    "text": "text",
    "fills": "fills",
    "strokes": "strokes",
    "opacity": "opacity",
    "visible": "visible",
    "children": "children",
}

_REQUIRED_FIELDS = frozenset({"id", "name", "type"})


@dataclass(frozen=True)
class DesignNode:
    """One node of a design document tree.

    Attributes mirror the external schema. ``properties`` holds every other
    named attribute (corner radius, layout, component properties, ...) and
    is flattened back to top-level keys by ``to_dict``.

    ``None`` means "absent" for every optional attribute.
    """
    id: str
    name: str
    type: str
    children: Tuple[Any, ...] = ()
    component_id: Optional[str] = None
    text: Optional[str] = None
    fills: Optional[Any] = None
    strokes: Optional[Any] = None
    opacity: Optional[float] = None
    visible: Optional[bool] = None
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        child_factory: Optional[Callable[[Any], Any]] = None,
    ) -> "DesignNode":
        """Build a node tree from its plain-data form.

        Unknown keys become ``properties``; ``null`` values are dropped.
        ``child_factory`` converts each child (default: ``coerce_node``).
        """
        convert = child_factory or coerce_node
        kwargs: Dict[str, Any] = {}
        properties: Dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            attr = NODE_FIELDS.get(key)
            if attr is None:
                properties[key] = value
            elif attr == "children":
                kwargs["children"] = tuple(convert(child) for child in value)
            else:
                kwargs[attr] = value
        for key in _REQUIRED_FIELDS:
            kwargs.setdefault(key, "")
        return cls(properties=properties, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form using the external schema (absent fields omitted)."""
        result: Dict[str, Any] = {"id": self.id, "name": self.name, "type": self.type}
        for key, attr in NODE_FIELDS.items():
            if key in _REQUIRED_FIELDS or key == "children":
                continue
            value = getattr(self, attr)
            if value is not None:
                result[key] = to_plain(value)
        for key, value in self.properties.items():
            if value is not None:
                result[key] = to_plain(value)
        if self.children:
            result["children"] = [to_plain(child) for child in self.children]
        return result

    def get(self, key: str) -> Any:
        """Read an attribute by its external schema name (None when absent)."""
        attr = NODE_FIELDS.get(key)
        if attr is not None:
            value = getattr(self, attr)
            if attr == "children":
                return value or None
            return value
        return self.properties.get(key)

    def with_field(self, key: str, value: Any) -> "DesignNode":
        """Return a copy with one attribute replaced; ``None`` removes it."""
        attr = NODE_FIELDS.get(key)
        if attr == "children":
            return self.with_children(value or ())
        if attr in ("id", "name", "type"):
            return replace(self, **{attr: "" if value is None else value})
        if attr is not None:
            return replace(self, **{attr: value})
        properties = dict(self.properties)
        if value is None:
            properties.pop(key, None)
        else:
            properties[key] = value
        return replace(self, properties=properties)

    def with_children(self, children: Iterable[Any]) -> "DesignNode":
        """Return a copy with a new children sequence (dicts are coerced)."""
        return replace(self, children=tuple(coerce_node(child) for child in children))

    def field_names(self) -> List[str]:
        """External names of the attributes present on this node."""
        names = [
            key for key, attr in NODE_FIELDS.items()
            if key != "children" and getattr(self, attr) is not None
        ]
        names.extend(key for key, value in self.properties.items() if value is not None)
        return names

    @property
    def is_instance(self) -> bool:
        """True when this node references a reusable component."""
        return bool(self.component_id)

    @property
    def node_children(self) -> Tuple["DesignNode", ...]:
        """Children that are full nodes (compact references excluded)."""
        return tuple(child for child in self.children if isinstance(child, DesignNode))

    def traverse(self) -> "DesignNodeIterator":
        """Traverse this node and all descendant nodes depth-first."""
        return DesignNodeIterator(self)

    def count_nodes(self) -> int:
        """Count nodes in this subtree, including this one."""
        return sum(1 for _ in self.traverse())


class DesignNodeIterator:
    """Iterator for depth-first, pre-order traversal of a DesignNode tree."""

    def __init__(self, root: DesignNode) -> None:
        self._stack: List[DesignNode] = [root]

    def __iter__(self) -> "DesignNodeIterator":
        return self

    def __next__(self) -> DesignNode:
        if not self._stack:
            raise StopIteration
        node = self._stack.pop()
        # Add children in reverse order so leftmost is processed first
        self._stack.extend(reversed(node.node_children))
        return node


NodeTree = Union[DesignNode, Sequence[DesignNode]]


def as_roots(tree: NodeTree) -> Tuple[DesignNode, ...]:
    """Normalize a single root or a sequence of roots to a tuple."""
    if isinstance(tree, DesignNode):
        return (tree,)
    return tuple(tree)


def coerce_node(value: Any) -> Any:
    """Turn a plain mapping into a DesignNode; leave anything else as is.

    Every mapping is a node here, including one with an ``overrides``
    property. Compact reference records are only recognised on expansion.
    """
    if isinstance(value, Mapping):
        return DesignNode.from_dict(value)
    return value


def to_plain(value: Any) -> Any:
    """Convert nodes, tuples and nested containers into JSON-ready data."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


def content_of(value: Any) -> Any:
    """Plain data of ``value`` with every node ``id`` removed.

    Node ids are identity, not content: two subtrees that differ only in
    their ids have the same content.
    """
    if isinstance(value, DesignNode):
        data = value.to_dict()
        data.pop("id", None)
        if value.children:
            data["children"] = [content_of(child) for child in value.children]
        return data
    if isinstance(value, (list, tuple)):
        return [content_of(item) for item in value]
    return to_plain(value)


def serialized_size(data: Any) -> int:
    """Size in characters of the compact JSON serialization of ``data``."""
    return len(json.dumps(to_plain(data), separators=(",", ":"), default=str))


# ============================================================
# Value-type names accepted by the configuration surface.
#
# Literal alias with BeforeValidator for case-insensitive
# normalization, so "Text" and " FILLS " are accepted.
# ============================================================


def _normalize_str(v: Any) -> Any:
    """Normalize string input: strip whitespace, lowercase."""
    return v.strip().lower() if isinstance(v, str) else v


ValueTypeName = Annotated[
    Literal["text", "fills", "strokes", "opacity", "visibility", "property"],
    BeforeValidator(_normalize_str),
]

_VALUE_TYPE_NAMES = TypeAdapter(List[ValueTypeName])


def parse_value_type_names(names: Optional[Iterable[str]]) -> List[str]:
    """Validate and normalize a list of value-type names.

    Raises:
        pydantic.ValidationError: If a name is not a known value type.
    """
    if not names:
        return []
    return _VALUE_TYPE_NAMES.validate_python(list(names))
