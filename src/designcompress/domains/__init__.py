"""Domain-Driven Design bounded contexts for design-compress.

This package contains:
- Shared Kernel: the DesignNode tree and plain-data helpers
- Compression Context: component extraction, slot detection and expansion
"""
