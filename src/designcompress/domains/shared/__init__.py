"""Shared Kernel - Types shared across the compression bounded context."""

from designcompress.domains.shared.kernel import (
    DesignNode,
    DesignNodeIterator,
    NodeTree,
    ValueTypeName,
    as_roots,
    content_of,
    parse_value_type_names,
    serialized_size,
    to_plain,
)

__all__ = [
    "DesignNode",
    "DesignNodeIterator",
    "NodeTree",
    "ValueTypeName",
    "as_roots",
    "content_of",
    "parse_value_type_names",
    "serialized_size",
    "to_plain",
]
