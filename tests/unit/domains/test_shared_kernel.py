"""Tests for the shared kernel: DesignNode and plain-data helpers."""

import json

import pytest
from pydantic import ValidationError

from designcompress.domains.shared.kernel import (
    DesignNode,
    as_roots,
    coerce_node,
    content_of,
    parse_value_type_names,
    serialized_size,
    to_plain,
)


# =============================================================================
# DesignNode
# =============================================================================


class TestDesignNodeFromDict:
    """Building nodes from the external schema."""

    def test_known_fields_mapped(self, button_dict):
        node = DesignNode.from_dict(button_dict("btn-1", "Submit"))

        assert node.id == "btn-1"
        assert node.component_id == "comp-1"
        assert node.opacity == 1.0
        assert node.visible is True
        assert len(node.children) == 2
        assert isinstance(node.children[0], DesignNode)
        assert node.children[0].text == "Submit"

    def test_unknown_keys_become_properties(self, button_dict):
        node = DesignNode.from_dict(button_dict("btn-1", "Submit"))

        assert node.properties == {"cornerRadius": 8}
        assert node.get("cornerRadius") == 8

    def test_null_means_absent(self):
        node = DesignNode.from_dict({"id": "n", "name": "N", "type": "FRAME", "text": None})

        assert node.text is None
        assert "text" not in node.to_dict()

    def test_missing_identity_fields_default_to_empty(self):
        node = DesignNode.from_dict({"text": "orphan"})

        assert node.id == ""
        assert node.name == ""
        assert node.type == ""

    def test_to_dict_round_trip(self, button_dict):
        data = button_dict("btn-1", "Submit")

        assert DesignNode.from_dict(data).to_dict() == data

    def test_overrides_property_stays_a_node(self):
        node = DesignNode.from_dict({
            "id": "frame",
            "name": "Frame",
            "type": "FRAME",
            "children": [
                {"id": "x", "name": "Button", "type": "INSTANCE", "componentId": "c", "overrides": []},
            ],
        })

        (child,) = node.node_children
        assert child.component_id == "c"
        assert child.get("overrides") == []

    def test_child_factory(self):
        node = DesignNode.from_dict(
            {"id": "frame", "name": "Frame", "type": "FRAME", "children": [{"id": "x"}]},
            child_factory=lambda child: child["id"],
        )

        assert node.children == ("x",)


class TestDesignNodeAccess:
    """Reading and copy-on-write updates."""

    def test_get_children_absent_is_none(self):
        node = DesignNode(id="n", name="N", type="TEXT")

        assert node.get("children") is None

    def test_with_field_returns_copy(self, make_button):
        node = make_button("btn-1", "Submit")

        updated = node.with_field("cornerRadius", 4)

        assert updated.get("cornerRadius") == 4
        assert node.get("cornerRadius") == 8

    def test_with_field_none_removes_property(self, make_button):
        node = make_button("btn-1", "Submit")

        assert node.with_field("cornerRadius", None).get("cornerRadius") is None
        assert node.with_field("fills", None).fills is None

    def test_with_children_coerces_dicts(self):
        node = DesignNode(id="n", name="N", type="FRAME")

        updated = node.with_children([{"id": "c", "name": "C", "type": "TEXT"}])

        assert isinstance(updated.children[0], DesignNode)

    def test_field_names_in_schema_order(self, make_button):
        node = make_button("btn-1", "Submit")

        assert node.field_names() == [
            "id", "name", "type", "componentId", "fills", "opacity", "visible", "cornerRadius",
        ]

    def test_traverse_is_preorder(self, make_button):
        node = make_button("btn-1", "Submit")

        assert [n.id for n in node.traverse()] == ["btn-1", "btn-1-label", "btn-1-icon"]
        assert node.count_nodes() == 3


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Plain-data helpers."""

    def test_as_roots(self, make_button):
        node = make_button("btn-1", "Submit")

        assert as_roots(node) == (node,)
        assert as_roots([node, node]) == (node, node)

    def test_coerce_node_passthrough(self, make_button):
        node = make_button("btn-1", "Submit")

        assert coerce_node(node) is node
        assert isinstance(coerce_node({"id": "x", "name": "X", "type": "TEXT"}), DesignNode)

    def test_content_of_drops_all_ids(self, make_button):
        a = make_button("btn-1", "Submit")
        b = make_button("btn-2", "Submit")

        assert content_of(a) == content_of(b)
        assert "id" not in content_of(a)
        assert all("id" not in child for child in content_of(a)["children"])

    def test_serialized_size_is_compact_json(self, button_dict):
        data = button_dict("btn-1", "Submit")

        expected = len(json.dumps(data, separators=(",", ":")))
        assert serialized_size(DesignNode.from_dict(data)) == expected

    def test_to_plain_converts_tuples(self):
        assert to_plain(({"a": (1, 2)},)) == [{"a": [1, 2]}]


class TestValueTypeNames:
    """Case-insensitive value-type name validation."""

    def test_names_normalized(self):
        assert parse_value_type_names([" Text", "FILLS"]) == ["text", "fills"]

    def test_empty(self):
        assert parse_value_type_names(None) == []

    def test_unknown_name_rejected(self):
        with pytest.raises(ValidationError):
            parse_value_type_names(["colour"])
