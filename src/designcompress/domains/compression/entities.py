"""
Entities for the Compression bounded context.

A component family is every instance in one document that shares an
originating component id. Compressing a family yields one template plus a
sparse override record per instance; the entities here carry those results
between the detector, the extractor and the expander.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, List, Mapping, Optional, Tuple

from designcompress.domains.shared.kernel import DesignNode, to_plain

from .paths import NodePath
from .value_objects import ValueType

_SLOT_ID_UNSAFE = re.compile(r"[.\[\]]")


@dataclass(frozen=True)
class SlotDefinition:
    """
    A location inside a component whose value varies across instances.

    ``variations`` maps a per-instance label (the instance id) to the value
    observed there; ``default_value`` is the template instance's value.
    """
    slot_id: str
    node_path: str
    value_type: ValueType
    default_value: Any
    variations: Mapping[str, Any] = field(default_factory=dict)
    semantic_name: Optional[str] = None
    instance_count: int = 0

    @staticmethod
    def slot_id_for(path: NodePath) -> str:
        """Stable slot key for a path, e.g. ``slot_children_0__text``."""
        return "slot_" + _SLOT_ID_UNSAFE.sub("_", str(path))

    @property
    def path(self) -> NodePath:
        return NodePath.parse(self.node_path)

    @property
    def distinct_count(self) -> int:
        """Number of distinct values observed at this slot."""
        return len({self.value_type.variation_key(v) for v in self.variations.values()})

    def to_dict(self, include_variations: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "slotId": self.slot_id,
            "nodePath": self.node_path,
            "valueType": self.value_type.value,
            "defaultValue": self.value_type.to_plain(self.default_value),
            "instanceCount": self.instance_count,
        }
        if self.semantic_name:
            data["semanticName"] = self.semantic_name
        if include_variations:
            data["variations"] = {
                label: self.value_type.to_plain(value)
                for label, value in self.variations.items()
            }
        return data


@dataclass(frozen=True)
class SlotDetectionResult:
    """Outcome of comparing one family of instances path by path."""
    slots: Dict[str, SlotDefinition] = field(default_factory=dict)
    similarity_score: float = 1.0
    total_paths: int = 0
    matching_paths: int = 0

    def __post_init__(self) -> None:
        if not 0.0 <= self.similarity_score <= 1.0:
            raise ValueError(f"similarity_score out of range: {self.similarity_score}")
        if self.matching_paths > self.total_paths:
            raise ValueError("matching_paths cannot exceed total_paths")

    @classmethod
    def empty(cls) -> SlotDetectionResult:
        """Result for families too small to compare."""
        return cls()

    @property
    def slot_paths(self) -> List[str]:
        return [slot.node_path for slot in self.slots.values()]

    @property
    def has_slots(self) -> bool:
        return bool(self.slots)


@dataclass(frozen=True)
class CompressedInstance:
    """Compact reference that replaces an instance subtree in the output tree."""
    id: str
    component_id: str
    overrides: Mapping[str, Any] = field(default_factory=dict)

    KEYS: ClassVar[FrozenSet[str]] = frozenset({"id", "componentId", "overrides"})

    @classmethod
    def matches(cls, data: Any) -> bool:
        """True for the plain form of a record: exactly its three keys."""
        return isinstance(data, Mapping) and set(data) == cls.KEYS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CompressedInstance:
        return cls(
            id=data.get("id", ""),
            component_id=data.get("componentId", ""),
            overrides=dict(data.get("overrides") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "componentId": self.component_id,
            "overrides": to_plain(self.overrides),
        }


@dataclass(frozen=True)
class ComponentDefinition:
    """Entry of the components dictionary: template plus slot metadata."""
    component_id: str
    name: str
    type: str
    template: DesignNode
    slots: Dict[str, SlotDefinition] = field(default_factory=dict)
    similarity_score: float = 1.0
    instance_count: int = 0

    @property
    def slot_ids(self) -> List[str]:
        return list(self.slots)

    def to_dict(self, include_variations: bool = False) -> Dict[str, Any]:
        return {
            "id": self.component_id,
            "name": self.name,
            "type": self.type,
            "template": self.template.to_dict(),
            "slotIds": self.slot_ids,
            "slots": {
                slot_id: slot.to_dict(include_variations=include_variations)
                for slot_id, slot in self.slots.items()
            },
            "similarityScore": round(self.similarity_score, 4),
            "instanceCount": self.instance_count,
        }


@dataclass(frozen=True)
class ComponentFamily:
    """All instances of one component together with their compressed form.

    ``overrides`` is aligned with ``instances``.
    """
    component_id: str
    instances: Tuple[DesignNode, ...]
    template: DesignNode
    detection: SlotDetectionResult
    overrides: Tuple[Dict[str, Any], ...] = ()

    @property
    def instance_count(self) -> int:
        return len(self.instances)

    def records(self) -> List[CompressedInstance]:
        """Compact references for every member, in member order."""
        return [
            CompressedInstance(id=instance.id, component_id=self.component_id, overrides=record)
            for instance, record in zip(self.instances, self.overrides)
        ]

    def to_definition(self) -> ComponentDefinition:
        return ComponentDefinition(
            component_id=self.component_id,
            name=self.template.name or "unnamed",
            type=self.template.type,
            template=self.template,
            slots=dict(self.detection.slots),
            similarity_score=self.detection.similarity_score,
            instance_count=self.instance_count,
        )


@dataclass
class ComponentHierarchy:
    """Nesting relationships of one compressed component."""
    children: List[str] = field(default_factory=list)
    parents: List[str] = field(default_factory=list)
    depth: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"children": list(self.children), "parents": list(self.parents), "depth": self.depth}
