"""Tests for the component inventory."""

import pytest

from designcompress.domains.compression.inventory import (
    INSTANCE_REFERENCE_ESTIMATE,
    analyze_components,
    get_compression_report,
    should_extract_as_component,
)
from designcompress.domains.shared.kernel import serialized_size


class TestAnalyzeComponents:
    """Grouping instances by component id."""

    @pytest.mark.scenario("C")
    def test_single_use_component_excluded(self, buttons_design, roots_of):
        inventory = analyze_components(roots_of(buttons_design), min_instances=2)

        assert inventory.component_counts == {"comp-1": 3}
        assert "comp-2" not in inventory.instances_by_component
        assert [n.id for n in inventory.instances_by_component["comp-1"]] == [
            "btn-1", "btn-2", "btn-3",
        ]

    def test_min_instances_one_keeps_everything(self, buttons_design, roots_of):
        inventory = analyze_components(roots_of(buttons_design), min_instances=1)

        assert inventory.component_counts == {"comp-1": 3, "comp-2": 1}

    def test_nested_instances_counted_in_document_order(self, nested_design, roots_of):
        inventory = analyze_components(roots_of(nested_design))

        assert inventory.component_ids == ["comp-card", "comp-1"]
        assert [n.id for n in inventory.instances_by_component["comp-1"]] == [
            "card-1-btn", "card-2-btn", "card-3-btn", "btn-4", "btn-5",
        ]
        assert inventory.total_instances == 8

    def test_accepts_single_root(self, three_buttons):
        inventory = analyze_components(three_buttons[0])

        assert inventory.component_counts == {}
        assert inventory.original_size == serialized_size([three_buttons[0]])

    def test_size_estimate(self, three_buttons):
        inventory = analyze_components(three_buttons)

        members = sum(serialized_size(b) for b in three_buttons)
        compressed = serialized_size(three_buttons[0]) + 3 * INSTANCE_REFERENCE_ESTIMATE
        assert inventory.family_savings("comp-1") == members - compressed
        assert inventory.estimated_savings == members - compressed
        assert inventory.original_size == serialized_size(three_buttons)

    def test_negative_savings_reported(self, tiny_design, roots_of):
        inventory = analyze_components(roots_of(tiny_design))

        assert inventory.component_counts == {"dot": 2}
        assert inventory.estimated_savings < 0


class TestShouldExtract:
    """Per-node extraction check."""

    def test_instance_of_repeated_component(self, buttons_design, roots_of):
        roots = roots_of(buttons_design)
        inventory = analyze_components(roots)
        header = roots[0].children[0]

        assert should_extract_as_component(header.children[0], inventory)
        assert not should_extract_as_component(header.children[3], inventory)
        assert not should_extract_as_component(header, inventory)
        assert not should_extract_as_component(header.children[0], inventory, min_instances=4)


class TestCompressionReport:
    """Human-readable report."""

    def test_report_lists_components(self, nested_design, roots_of):
        report = get_compression_report(analyze_components(roots_of(nested_design)))

        assert report.startswith("=== Component Compression Analysis ===")
        assert "Components detected: 2" in report
        assert "Total instances: 8" in report
        assert "  - Button (comp-1): 5 instances" in report
        assert "  - Card (comp-card): 3 instances" in report
        assert report.index("comp-1") < report.index("comp-card")

    def test_report_for_empty_inventory(self):
        report = get_compression_report(analyze_components([]))

        assert "Components detected: 0" in report
        assert "Estimated savings: 0 bytes (0%)" in report
