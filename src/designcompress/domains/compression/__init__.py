"""Compression Bounded Context for design-compress.

Replaces repeated component instances in a design node tree with one
template per component plus a sparse override record per instance, and
expands the result back to the original content.

Key Components:
- SlotDetector: Domain service finding the locations that vary within a family
- ComponentExtractor: Domain service orchestrating extraction for a design
- apply_overrides / derive_overrides: Override Applier
- analyze_components: Instance Inventory with size estimates
- expand_design: Inverse of extraction

Example Usage:
    from designcompress.domains.compression import (
        ComponentExtractor,
        expand_design,
    )

    extractor = ComponentExtractor(event_publisher=events.append)
    result = extractor.extract("Checkout", nodes, global_styles, {"minInstances": 2})
    print(f"{result.stats.reduction_percent:.1f}% smaller")

    # Expand again
    roots = expand_design(result)
"""

from designcompress.domains.compression.paths import (
    NodePath,
    path_to_string,
    string_to_path,
)

from designcompress.domains.compression.value_objects import (
    CompressionStats,
    ExtractionOptions,
    SlotDetectionOptions,
    ValueType,
)

from designcompress.domains.compression.entities import (
    ComponentDefinition,
    ComponentFamily,
    ComponentHierarchy,
    CompressedInstance,
    SlotDefinition,
    SlotDetectionResult,
)

from designcompress.domains.compression.naming import (
    NamingStrategy,
    no_semantic_names,
    semantic_name,
)

from designcompress.domains.compression.slot_detector import (
    SlotDetector,
    detect_slots,
)

from designcompress.domains.compression.overrides import (
    apply_overrides,
    derive_overrides,
    value_at,
)

from designcompress.domains.compression.inventory import (
    ComponentInventory,
    analyze_components,
    get_compression_report,
    should_extract_as_component,
)

from designcompress.domains.compression.events import (
    ComponentFamilyCompressed,
    ComponentFamilySkipped,
    ComponentsExtracted,
)

from designcompress.domains.compression.extractor import (
    ComponentExtractor,
    ExtractResult,
    analyze_compression_potential,
    compress_components,
    create_compression_report,
    extract_components,
)

from designcompress.domains.compression.expander import (
    expand_design,
    expand_tree,
    get_expansion_summary,
    validate_expansion,
)

__all__ = [
    # Paths
    "NodePath",
    "path_to_string",
    "string_to_path",
    # Value Objects
    "CompressionStats",
    "ExtractionOptions",
    "SlotDetectionOptions",
    "ValueType",
    # Entities
    "ComponentDefinition",
    "ComponentFamily",
    "ComponentHierarchy",
    "CompressedInstance",
    "SlotDefinition",
    "SlotDetectionResult",
    # Naming
    "NamingStrategy",
    "no_semantic_names",
    "semantic_name",
    # Slot detection
    "SlotDetector",
    "detect_slots",
    # Overrides
    "apply_overrides",
    "derive_overrides",
    "value_at",
    # Inventory
    "ComponentInventory",
    "analyze_components",
    "get_compression_report",
    "should_extract_as_component",
    # Events
    "ComponentFamilyCompressed",
    "ComponentFamilySkipped",
    "ComponentsExtracted",
    # Extraction
    "ComponentExtractor",
    "ExtractResult",
    "analyze_compression_potential",
    "compress_components",
    "create_compression_report",
    "extract_components",
    # Expansion
    "expand_design",
    "expand_tree",
    "get_expansion_summary",
    "validate_expansion",
]
