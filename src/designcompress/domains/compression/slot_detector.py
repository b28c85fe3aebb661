"""
Slot detection for families of component instances.

Compares every instance of one component path by path and decides which
locations vary ("slots") and which stay constant. Constant locations live
in the family template; slots become per-instance overrides.

Example:
    Three "Button" instances that differ only in their label text and the
    fill of their icon child produce two slots:

        text             -> slot_text              (3 variations)
        children[0].fills -> slot_children_0__fills (3 variations)

Traversal uses an explicit work-list, so arbitrarily deep trees never hit
the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from designcompress.domains.shared.kernel import DesignNode, content_of

from .entities import SlotDefinition, SlotDetectionResult
from .naming import NamingStrategy, enclosing_node_name, semantic_name
from .paths import CHILDREN, NodePath
from .value_objects import SlotDetectionOptions, ValueType

logger = logging.getLogger(__name__)

# Node identity is never compared as content
_IDENTITY_FIELD = "id"


@dataclass
class PathObservation:
    """Values observed at one path, one per instance (None = absent)."""

    path: NodePath
    value_type: ValueType
    values: List[Any]
    keys: List[str]

    @property
    def distinct_count(self) -> int:
        return len(set(self.keys))

    @property
    def is_matching(self) -> bool:
        return self.distinct_count == 1

    @property
    def agreement(self) -> float:
        """Share of instances holding the most common value."""
        if not self.keys:
            return 1.0
        most_common = Counter(self.keys).most_common(1)[0][1]
        return most_common / len(self.keys)


class SlotDetector:
    """
    Detects slots across a family of same-component instances.

    Per node the detector compares the five tracked attributes (text,
    fills, strokes, opacity, visible) plus every other named attribute
    (name, type, componentId, arbitrary properties) as a structural
    ``property`` value. It descends into children only while every
    instance has the same number of children at that node and the depth
    limit has not been reached; otherwise the whole children sequence is
    compared as one opaque value.
    """

    def __init__(
        self,
        options: Optional[SlotDetectionOptions] = None,
        naming: Optional[NamingStrategy] = semantic_name,
    ):
        """
        Initialize the detector.

        Args:
            options: Slot policy; defaults to SlotDetectionOptions().
            naming: Strategy producing advisory slot names. Pass None to
                disable naming.
        """
        self.options = options or SlotDetectionOptions()
        self.naming = naming

    def detect(self, instances: Sequence[DesignNode]) -> SlotDetectionResult:
        """
        Compare instances and report varying locations.

        Args:
            instances: Members of one family. The first one is the template
                candidate and provides every slot's default value.

        Returns:
            SlotDetectionResult. Fewer than two instances give an empty
            result with similarity 1.
        """
        instances = list(instances)
        if len(instances) < 2:
            return SlotDetectionResult.empty()

        observations = self.observe(instances)
        matching = sum(1 for observation in observations if observation.is_matching)
        candidates = [obs for obs in observations if self._is_slot(obs)]
        candidates = self._limit(candidates)

        labels = _instance_labels(instances)
        slots: Dict[str, SlotDefinition] = {}
        for observation in candidates:
            slot = self._build_slot(observation, instances, labels)
            slots[slot.slot_id] = slot

        total = len(observations)
        similarity = matching / total if total else 1.0
        logger.debug(
            f"Compared {len(instances)} instances over {total} paths: "
            f"{len(slots)} slots, similarity {similarity:.2f}"
        )
        return SlotDetectionResult(
            slots=slots,
            similarity_score=similarity,
            total_paths=total,
            matching_paths=matching,
        )

    def observe(self, instances: Sequence[DesignNode]) -> List[PathObservation]:
        """Collect per-instance values for the union of paths, in first-appearance order."""
        observations: List[PathObservation] = []
        max_depth = self.options.max_depth
        stack: List[Tuple[NodePath, Tuple[DesignNode, ...], int]] = [
            (NodePath.root(), tuple(instances), 0)
        ]

        while stack:
            path, nodes, depth = stack.pop()

            for name in _field_union(nodes):
                observations.append(
                    _observation(
                        path.field(name),
                        ValueType.for_field(name),
                        [node.get(name) for node in nodes],
                    )
                )

            if not any(node.children for node in nodes):
                continue

            widths = {len(node.children) for node in nodes}
            all_nodes = all(
                isinstance(child, DesignNode) for node in nodes for child in node.children
            )
            within_depth = max_depth is None or depth < max_depth
            if len(widths) == 1 and all_nodes and within_depth:
                width = widths.pop()
                # Reverse push keeps children in document order
                for index in reversed(range(width)):
                    stack.append(
                        (
                            path.child(index),
                            tuple(node.children[index] for node in nodes),
                            depth + 1,
                        )
                    )
            else:
                observations.append(
                    _observation(
                        path.field(CHILDREN),
                        ValueType.PROPERTY,
                        [node.get(CHILDREN) for node in nodes],
                    )
                )

        return observations

    def _is_slot(self, observation: PathObservation) -> bool:
        value_type = observation.value_type
        if self.options.is_forced(value_type):
            return True
        if observation.is_matching or self.options.is_excluded(value_type):
            return False
        return observation.agreement < self.options.min_similarity

    def _limit(self, candidates: List[PathObservation]) -> List[PathObservation]:
        """Apply max_slots: most distinct values first, ties by appearance."""
        max_slots = self.options.max_slots
        if max_slots is None or len(candidates) <= max_slots:
            return candidates
        ranked = sorted(
            range(len(candidates)),
            key=lambda position: (-candidates[position].distinct_count, position),
        )
        keep = set(ranked[:max_slots])
        return [obs for position, obs in enumerate(candidates) if position in keep]

    def _build_slot(
        self,
        observation: PathObservation,
        instances: Sequence[DesignNode],
        labels: Sequence[str],
    ) -> SlotDefinition:
        path = observation.path
        name = None
        if self.naming is not None:
            name = self.naming(path, enclosing_node_name(instances[0], path))
        return SlotDefinition(
            slot_id=SlotDefinition.slot_id_for(path),
            node_path=str(path),
            value_type=observation.value_type,
            default_value=observation.values[0],
            variations=dict(zip(labels, observation.values)),
            semantic_name=name,
            instance_count=sum(1 for value in observation.values if value is not None),
        )


def detect_slots(
    instances: Sequence[DesignNode],
    options: Optional[SlotDetectionOptions] = None,
    **policy: Any,
) -> SlotDetectionResult:
    """
    Detect slots across a family of instances.

    Args:
        instances: Members of one family.
        options: Slot policy. Alternatively pass the policy as keywords
            (min_similarity, always_slots, never_slots, max_slots,
            max_depth), with value types given by name.

    Returns:
        SlotDetectionResult.

    Raises:
        TypeError: If both ``options`` and keyword policy are given.
    """
    if policy:
        if options is not None:
            raise TypeError("Pass either options or keyword policy, not both")
        options = SlotDetectionOptions.create(**policy)
    return SlotDetector(options).detect(instances)


def _field_union(nodes: Sequence[DesignNode]) -> List[str]:
    seen: Dict[str, None] = {}
    for node in nodes:
        for name in node.field_names():
            if name != _IDENTITY_FIELD:
                seen.setdefault(name, None)
    return list(seen)


def _observation(path: NodePath, value_type: ValueType, values: List[Any]) -> PathObservation:
    keys = [value_type.variation_key(content_of(value)) for value in values]
    return PathObservation(path=path, value_type=value_type, values=values, keys=keys)


def _instance_labels(instances: Sequence[DesignNode]) -> List[str]:
    """Instance ids, or ``instance_<n>`` where an id is missing or repeated.

    Generated labels never collide with a real id or with each other.
    """
    counts = Counter(instance.id for instance in instances)
    taken = {instance.id for instance in instances if instance.id and counts[instance.id] == 1}
    labels = []
    for index, instance in enumerate(instances):
        if instance.id and counts[instance.id] == 1:
            labels.append(instance.id)
            continue
        label = f"instance_{index}"
        suffix = 0
        while label in taken:
            suffix += 1
            label = f"instance_{index}_{suffix}"
        taken.add(label)
        labels.append(label)
    return labels
