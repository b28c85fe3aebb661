"""Tests for compression entities and events."""

from datetime import datetime

import pytest

from designcompress.domains.compression.entities import (
    ComponentHierarchy,
    CompressedInstance,
    SlotDefinition,
    SlotDetectionResult,
)
from designcompress.domains.compression.events import ComponentFamilySkipped
from designcompress.domains.compression.paths import NodePath
from designcompress.domains.compression.value_objects import ValueType


class TestSlotDefinition:
    """Slot metadata."""

    def test_slot_id_for_path(self):
        assert SlotDefinition.slot_id_for(NodePath.parse("children[0].text")) == "slot_children_0__text"
        assert SlotDefinition.slot_id_for(NodePath.parse("fills")) == "slot_fills"

    def test_to_dict(self):
        slot = SlotDefinition(
            slot_id="slot_opacity",
            node_path="opacity",
            value_type=ValueType.OPACITY,
            default_value=1,
            variations={"a": 1, "b": 0.5},
            semantic_name="button-opacity",
            instance_count=2,
        )

        assert slot.to_dict() == {
            "slotId": "slot_opacity",
            "nodePath": "opacity",
            "valueType": "opacity",
            "defaultValue": 1.0,
            "instanceCount": 2,
            "semanticName": "button-opacity",
            "variations": {"a": 1.0, "b": 0.5},
        }
        assert "variations" not in slot.to_dict(include_variations=False)
        assert slot.distinct_count == 2


class TestSlotDetectionResult:
    """Result invariants."""

    def test_empty(self):
        result = SlotDetectionResult.empty()

        assert result.similarity_score == 1.0
        assert not result.has_slots

    def test_similarity_out_of_range(self):
        with pytest.raises(ValueError):
            SlotDetectionResult(similarity_score=1.2)

    def test_matching_exceeds_total(self):
        with pytest.raises(ValueError):
            SlotDetectionResult(total_paths=1, matching_paths=2)


class TestCompressedInstance:
    """Compact reference records."""

    def test_dict_form(self):
        record = CompressedInstance.from_dict(
            {"id": "btn-2", "componentId": "comp-1", "overrides": {"text": "Go"}}
        )

        assert record.component_id == "comp-1"
        assert record.to_dict() == {"id": "btn-2", "componentId": "comp-1", "overrides": {"text": "Go"}}


class TestComponentHierarchy:
    """Nesting metadata."""

    def test_to_dict_copies_lists(self):
        hierarchy = ComponentHierarchy(children=["comp-1"])

        data = hierarchy.to_dict()
        data["children"].append("other")

        assert hierarchy.children == ["comp-1"]
        assert data["depth"] == 0


class TestEvents:
    """Domain event serialization."""

    def test_skipped_event(self):
        event = ComponentFamilySkipped(
            design_name="Dots", component_id="dot", instance_count=2, reason="not_smaller"
        )

        data = event.to_dict()
        assert data["event_type"] == "ComponentFamilySkipped"
        assert data["reason"] == "not_smaller"
        assert datetime.fromisoformat(data["timestamp"]).tzinfo is not None
