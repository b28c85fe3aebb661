"""Tests for canonical node paths."""

import pytest

from designcompress.domains.compression.paths import (
    NodePath,
    path_to_string,
    string_to_path,
)


class TestPathToString:
    """Serialization of path steps."""

    @pytest.mark.parametrize(
        "steps, expected",
        [
            ((), ""),
            (("text",), "text"),
            (("children", 0, "text"), "children[0].text"),
            (("children", 1, "children", 0, "fills"), "children[1].children[0].fills"),
            (("fills", 0, "color"), "fills[0].color"),
            ((0,), "[0]"),
        ],
    )
    def test_canonical_form(self, steps, expected):
        assert path_to_string(steps) == expected
        assert string_to_path(expected) == steps


class TestStringToPath:
    """Parsing, including tolerance of malformed input."""

    def test_non_integer_bracket_is_field(self):
        assert string_to_path("styles[primary].color") == ("styles", "primary", "color")

    def test_unclosed_bracket_truncates(self):
        assert string_to_path("children[0") == ("children",)

    def test_stray_closing_bracket_truncates(self):
        assert string_to_path("children]0.text") == ("children",)

    def test_empty_segments_ignored(self):
        assert string_to_path("a..b") == ("a", "b")

    def test_non_ascii_digits_are_fields(self):
        assert string_to_path("children[\u00b2].text") == ("children", "\u00b2", "text")
        assert string_to_path("children[\u0663]") == ("children", "\u0663")


class TestNodePath:
    """NodePath value object."""

    def test_builders(self):
        path = NodePath.root().child(0).field("text")

        assert path.steps == ("children", 0, "text")
        assert str(path) == "children[0].text"

    def test_parse_round_trip(self):
        path = NodePath(steps=("children", 2, "children", 0, "visible"))

        assert NodePath.parse(str(path)) == path

    def test_terminal_field_skips_indices(self):
        assert NodePath.parse("fills[0]").terminal_field == "fills"
        assert NodePath.root().terminal_field is None

    def test_node_depth_counts_index_steps(self):
        assert NodePath.parse("children[1].children[0].text").node_depth == 2
        assert NodePath.parse("text").node_depth == 0

    def test_empty(self):
        assert NodePath.root().is_empty
        assert len(NodePath.parse("")) == 0
