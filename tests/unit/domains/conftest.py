"""Pytest fixtures for domain tests.

These fixtures build small design documents for the compression context:
- Button instances (component "comp-1") differing in label and fill
- Card instances (component "comp-card") each nesting a button
- Tiny instances whose compact references cost more than they save
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest

from designcompress.domains.shared.kernel import DesignNode

WHITE = [{"type": "SOLID", "color": "#FFFFFF"}]


def _button_dict(
    node_id: str,
    label: str,
    color: str = "#0066FF",
    component_id: str = "comp-1",
) -> Dict[str, Any]:
    return {
        "id": node_id,
        "name": "Button",
        "type": "INSTANCE",
        "componentId": component_id,
        "fills": [{"type": "SOLID", "color": color}],
        "opacity": 1.0,
        "visible": True,
        "cornerRadius": 8,
        "children": [
            {
                "id": f"{node_id}-label",
                "name": "Label",
                "type": "TEXT",
                "text": label,
                "fills": WHITE,
            },
            {
                "id": f"{node_id}-icon",
                "name": "Icon",
                "type": "VECTOR",
                "strokes": WHITE,
                "visible": True,
            },
        ],
    }


def _card_dict(node_id: str, title: str, button: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": node_id,
        "name": "Card",
        "type": "INSTANCE",
        "componentId": "comp-card",
        "fills": WHITE,
        "cornerRadius": 12,
        "children": [
            {"id": f"{node_id}-title", "name": "Title", "type": "TEXT", "text": title},
            {
                "id": f"{node_id}-body",
                "name": "Body",
                "type": "TEXT",
                "text": "Compact component references keep large design files small.",
            },
            button,
        ],
    }


# =============================================================================
# Node factories
# =============================================================================


@pytest.fixture
def button_dict() -> Callable[..., Dict[str, Any]]:
    """Factory for the plain-dict form of a button instance."""
    return _button_dict


@pytest.fixture
def make_button() -> Callable[..., DesignNode]:
    """Factory for button instances as DesignNodes."""

    def factory(node_id: str, label: str, color: str = "#0066FF", **kwargs: Any) -> DesignNode:
        return DesignNode.from_dict(_button_dict(node_id, label, color, **kwargs))

    return factory


# =============================================================================
# Families
# =============================================================================


@pytest.fixture
def three_buttons(make_button) -> List[DesignNode]:
    """Three comp-1 instances differing only in label text and fill."""
    return [
        make_button("btn-1", "Submit", "#0066FF"),
        make_button("btn-2", "Cancel", "#888888"),
        make_button("btn-3", "Delete", "#FF3333"),
    ]


@pytest.fixture
def identical_buttons(button_dict) -> List[DesignNode]:
    """Two instances with identical content (only the root ids differ)."""
    first = button_dict("btn-a", "Save")
    second = button_dict("btn-b", "Save")
    second["children"] = first["children"]
    return [DesignNode.from_dict(first), DesignNode.from_dict(second)]


# =============================================================================
# Designs
# =============================================================================


@pytest.fixture
def buttons_design(button_dict) -> Dict[str, Any]:
    """Page with three comp-1 buttons and one single-use comp-2 banner."""
    return {
        "name": "Checkout",
        "nodes": [
            {
                "id": "page",
                "name": "Page",
                "type": "FRAME",
                "children": [
                    {
                        "id": "header",
                        "name": "Header",
                        "type": "FRAME",
                        "children": [
                            button_dict("btn-1", "Submit", "#0066FF"),
                            button_dict("btn-2", "Cancel", "#888888"),
                            button_dict("btn-3", "Delete", "#FF3333"),
                            {
                                "id": "banner",
                                "name": "Banner",
                                "type": "INSTANCE",
                                "componentId": "comp-2",
                                "text": "Free shipping on all orders",
                            },
                        ],
                    }
                ],
            }
        ],
        "globalVars": {"styles": {"fill_1": [{"type": "SOLID", "color": "#0066FF"}]}},
    }


@pytest.fixture
def nested_design(button_dict) -> Dict[str, Any]:
    """Three cards each nesting a button, plus two standalone buttons."""
    cards = [
        _card_dict("card-1", "Starter", button_dict("card-1-btn", "Choose starter")),
        _card_dict("card-2", "Team", button_dict("card-2-btn", "Choose team")),
        _card_dict("card-3", "Enterprise", button_dict("card-3-btn", "Contact sales")),
    ]
    return {
        "name": "Pricing",
        "nodes": [
            {
                "id": "page",
                "name": "Page",
                "type": "FRAME",
                "children": [
                    {"id": "cards", "name": "Cards", "type": "FRAME", "children": cards},
                    {
                        "id": "toolbar",
                        "name": "Toolbar",
                        "type": "FRAME",
                        "children": [
                            button_dict("btn-4", "Back"),
                            button_dict("btn-5", "Next"),
                        ],
                    },
                ],
            }
        ],
        "globalVars": {},
    }


@pytest.fixture
def cards_only_design(button_dict) -> Dict[str, Any]:
    """Buttons appear only inside cards."""
    cards = [
        _card_dict("card-1", "Starter", button_dict("card-1-btn", "Choose starter")),
        _card_dict("card-2", "Team", button_dict("card-2-btn", "Choose team")),
        _card_dict("card-3", "Enterprise", button_dict("card-3-btn", "Contact sales")),
    ]
    return {"name": "Cards", "nodes": cards, "globalVars": {}}


@pytest.fixture
def tiny_design() -> Dict[str, Any]:
    """Two minimal instances: a reference would not be smaller than the node."""
    return {
        "name": "Dots",
        "nodes": [
            {"id": "a", "name": "Dot", "type": "INSTANCE", "componentId": "dot"},
            {"id": "b", "name": "Dot", "type": "INSTANCE", "componentId": "dot"},
        ],
        "globalVars": None,
    }


@pytest.fixture
def event_log() -> List[object]:
    """Collects published domain events."""
    return []


@pytest.fixture
def roots_of() -> Callable[[Dict[str, Any]], List[DesignNode]]:
    """Convert a design mapping's nodes to DesignNodes."""

    def convert(design: Dict[str, Any], key: Optional[str] = "nodes") -> List[DesignNode]:
        return [DesignNode.from_dict(node) for node in design[key]]

    return convert
