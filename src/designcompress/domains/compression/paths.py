"""
Canonical path addressing inside a design node tree.

A path is a sequence of steps, each either a field name or an integer index
into an ordered sequence. Its canonical string form uses dot-separated
field names and bracketed indices, mirroring attribute access syntax:

    ("children", 0, "text")  <->  "children[0].text"

Only machine-generated strings are expected, so parsing never raises:
a malformed string (unbalanced brackets) is read up to the point where it
stops making sense.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

PathStep = Union[str, int]

CHILDREN = "children"


@dataclass(frozen=True)
class NodePath:
    """Structural address of a value inside a node tree."""
    steps: Tuple[PathStep, ...] = ()

    @classmethod
    def parse(cls, path_str: str) -> NodePath:
        """Parse a canonical path string (tolerates truncated input)."""
        return cls(steps=string_to_path(path_str))

    @classmethod
    def root(cls) -> NodePath:
        return cls()

    def field(self, name: str) -> NodePath:
        """Path to a named field below this path."""
        return NodePath(steps=self.steps + (name,))

    def child(self, index: int) -> NodePath:
        """Path to the ``index``-th child node below this path."""
        return NodePath(steps=self.steps + (CHILDREN, index))

    @property
    def terminal_field(self) -> Optional[str]:
        """Last field name in the path, skipping trailing indices."""
        for step in reversed(self.steps):
            if isinstance(step, str):
                return step
        return None

    @property
    def node_depth(self) -> int:
        """Number of index steps, i.e. how many child hops deep this is."""
        return sum(1 for step in self.steps if isinstance(step, int))

    @property
    def is_empty(self) -> bool:
        return not self.steps

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[PathStep]:
        return iter(self.steps)

    def __str__(self) -> str:
        return path_to_string(self.steps)


def path_to_string(steps: Tuple[PathStep, ...]) -> str:
    """Serialize path steps to their canonical string.

    Example:
        ("children", 0, "fills") -> "children[0].fills"
    """
    parts = []
    for index, step in enumerate(steps):
        if isinstance(step, int):
            parts.append(f"[{step}]")
        elif index == 0:
            parts.append(step)
        else:
            parts.append(f".{step}")
    return "".join(parts)


def string_to_path(path_str: str) -> Tuple[PathStep, ...]:
    """Parse a canonical path string into steps.

    Bracket contents that are integers become index steps; anything else
    becomes a field step. An unclosed ``[`` or a stray ``]`` ends parsing.

    Example:
        "children[0].fills" -> ("children", 0, "fills")
    """
    steps = []
    token = ""
    position = 0
    length = len(path_str)

    while position < length:
        char = path_str[position]
        if char == ".":
            if token:
                steps.append(token)
            token = ""
        elif char == "[":
            if token:
                steps.append(token)
            token = ""
            close = path_str.find("]", position + 1)
            if close == -1:
                return tuple(steps)
            content = path_str[position + 1:close]
            if content.isascii() and content.isdecimal():
                steps.append(int(content))
            elif content:
                steps.append(content)
            position = close
        elif char == "]":
            if token:
                steps.append(token)
            return tuple(steps)
        else:
            token += char
        position += 1

    if token:
        steps.append(token)
    return tuple(steps)
