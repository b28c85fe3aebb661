"""Compression Value Objects.

Immutable types that carry no identity. Equality is structural.
All value objects use frozen dataclasses with __post_init__ validation.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Iterable, Optional

from designcompress.domains.shared.kernel import parse_value_type_names, to_plain


def _canonical(value: Any) -> str:
    return json.dumps(to_plain(value), sort_keys=True, separators=(",", ":"), default=str)


def _text_equal(a: Any, b: Any) -> bool:
    return a == b and type(a) is type(b)


def _paint_equal(a: Any, b: Any) -> bool:
    # order matters: paints are stacked bottom to top
    if a is None or b is None:
        return a is b
    return _canonical(a) == _canonical(b)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _opacity_equal(a: Any, b: Any) -> bool:
    if _is_number(a) and _is_number(b):
        return float(a) == float(b)
    return a is None and b is None


def _visibility_equal(a: Any, b: Any) -> bool:
    return a is b or (isinstance(a, bool) and isinstance(b, bool) and a == b)


def _structural_equal(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return a is b
    return _canonical(a) == _canonical(b)


def _opacity_plain(value: Any) -> Any:
    return float(value) if _is_number(value) else value


@dataclass(frozen=True)
class ValueStrategy:
    """Equality and serialization rules for one value category."""
    equal: Callable[[Any, Any], bool]
    to_plain: Callable[[Any], Any]


class ValueType(str, Enum):
    """Category of a comparable node attribute.

    Values:
        TEXT: Text content of a text node
        FILLS: Ordered fill paints
        STROKES: Ordered stroke paints
        OPACITY: Numeric layer opacity
        VISIBILITY: Layer visibility flag
        PROPERTY: Any other named attribute, compared structurally
    """
    TEXT = "text"
    FILLS = "fills"
    STROKES = "strokes"
    OPACITY = "opacity"
    VISIBILITY = "visibility"
    PROPERTY = "property"

    @classmethod
    def for_field(cls, field_name: Optional[str]) -> ValueType:
        """Category of a node attribute given its external field name."""
        return _FIELD_TYPES.get(field_name or "", cls.PROPERTY)

    @classmethod
    def from_names(cls, names: Optional[Iterable[str]]) -> FrozenSet[ValueType]:
        """Parse value-type names case-insensitively.

        Raises:
            pydantic.ValidationError: On an unknown name.
        """
        return frozenset(cls(name) for name in parse_value_type_names(names))

    @property
    def strategy(self) -> ValueStrategy:
        return _STRATEGIES[self]

    def equal(self, a: Any, b: Any) -> bool:
        """Whether two observed values are the same for this category."""
        return self.strategy.equal(a, b)

    def to_plain(self, value: Any) -> Any:
        """JSON-ready form of a value of this category."""
        if value is None:
            return None
        return self.strategy.to_plain(value)

    def variation_key(self, value: Any) -> str:
        """Stable string key identifying a distinct value."""
        return _canonical(self.to_plain(value))


_STRATEGIES: Dict[ValueType, ValueStrategy] = {
    ValueType.TEXT: ValueStrategy(equal=_text_equal, to_plain=str),
    ValueType.FILLS: ValueStrategy(equal=_paint_equal, to_plain=to_plain),
    ValueType.STROKES: ValueStrategy(equal=_paint_equal, to_plain=to_plain),
    ValueType.OPACITY: ValueStrategy(equal=_opacity_equal, to_plain=_opacity_plain),
    ValueType.VISIBILITY: ValueStrategy(equal=_visibility_equal, to_plain=bool),
    ValueType.PROPERTY: ValueStrategy(equal=_structural_equal, to_plain=to_plain),
}

# Node attributes tracked with their own category
_FIELD_TYPES: Dict[str, ValueType] = {
    "text": ValueType.TEXT,
    "fills": ValueType.FILLS,
    "strokes": ValueType.STROKES,
    "opacity": ValueType.OPACITY,
    "visible": ValueType.VISIBILITY,
}

TRACKED_FIELDS = tuple(_FIELD_TYPES)


@dataclass(frozen=True)
class SlotDetectionOptions:
    """Policy knobs for slot detection.

    Attributes:
        min_similarity: A varying path is a slot only when the share of
            instances holding its most common value is below this.
            1.0 (default) makes every variation a slot.
        always_slots: Value types reported as slots even when constant.
        never_slots: Value types never reported as slots.
        max_slots: Cap on reported slots (None = unbounded).
        max_depth: Child-nesting depth below which subtrees are compared
            as one opaque value (None = unbounded).
    """
    min_similarity: float = 1.0
    always_slots: FrozenSet[ValueType] = field(default_factory=frozenset)
    never_slots: FrozenSet[ValueType] = field(default_factory=frozenset)
    max_slots: Optional[int] = None
    max_depth: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_similarity <= 1.0:
            raise ValueError(
                f"min_similarity must be between 0 and 1, got {self.min_similarity}"
            )
        if self.max_slots is not None and self.max_slots < 0:
            raise ValueError(f"max_slots must be non-negative, got {self.max_slots}")
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")

    @classmethod
    def create(
        cls,
        min_similarity: Optional[float] = None,
        always_slots: Optional[Iterable[str]] = None,
        never_slots: Optional[Iterable[str]] = None,
        max_slots: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> SlotDetectionOptions:
        """Build options from loosely-typed inputs (value-type names as strings)."""
        return cls(
            min_similarity=1.0 if min_similarity is None else min_similarity,
            always_slots=ValueType.from_names(always_slots),
            never_slots=ValueType.from_names(never_slots),
            max_slots=max_slots,
            max_depth=max_depth,
        )

    def is_excluded(self, value_type: ValueType) -> bool:
        return value_type in self.never_slots

    def is_forced(self, value_type: ValueType) -> bool:
        return value_type in self.always_slots and value_type not in self.never_slots


@dataclass(frozen=True)
class ExtractionOptions:
    """Everything the extractor needs: family threshold plus slot policy."""
    min_instances: int = 2
    slots: SlotDetectionOptions = field(default_factory=SlotDetectionOptions)

    def __post_init__(self) -> None:
        if self.min_instances < 1:
            raise ValueError(f"min_instances must be at least 1, got {self.min_instances}")


@dataclass(frozen=True)
class CompressionStats:
    """Aggregate statistics over the families actually compressed.

    Sizes are compact-JSON character counts.
    """
    component_count: int = 0
    instance_count: int = 0
    original_node_count: int = 0
    original_size: int = 0
    compressed_size: int = 0
    slot_count: int = 0
    skipped_component_count: int = 0

    CHARS_PER_TOKEN: ClassVar[float] = 4.0

    @property
    def reduction_percent(self) -> float:
        if self.original_size == 0:
            return 0.0
        return (self.original_size - self.compressed_size) / self.original_size * 100

    @property
    def bytes_saved(self) -> int:
        return max(0, self.original_size - self.compressed_size)

    @property
    def estimated_tokens_saved(self) -> int:
        return int(self.bytes_saved / self.CHARS_PER_TOKEN)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "componentCount": self.component_count,
            "instanceCount": self.instance_count,
            "originalNodeCount": self.original_node_count,
            "originalSize": self.original_size,
            "compressedSize": self.compressed_size,
            "reductionPercent": round(self.reduction_percent, 2),
            "slotCount": self.slot_count,
            "skippedComponentCount": self.skipped_component_count,
        }
