"""design-compress - Component-based compression for design node trees."""

from designcompress.domains.compression import (  # noqa: F401
    ComponentExtractor,
    ExtractResult,
    compress_components,
    detect_slots,
    expand_design,
    extract_components,
)
from designcompress.domains.shared import DesignNode  # noqa: F401
from designcompress.models import CompressionConfig, ConfigurationError  # noqa: F401

__all__ = [
    "ComponentExtractor",
    "CompressionConfig",
    "ConfigurationError",
    "DesignNode",
    "ExtractResult",
    "compress_components",
    "detect_slots",
    "expand_design",
    "extract_components",
]

__version__ = "0.1.0"
