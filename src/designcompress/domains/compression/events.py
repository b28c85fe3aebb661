"""Compression Domain Events."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict


@dataclass(frozen=True)
class ComponentFamilyCompressed:
    """Emitted when a family is replaced by a template and compact references."""
    design_name: str
    component_id: str
    instance_count: int
    slot_count: int
    similarity_score: float
    original_size: int
    compressed_size: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "ComponentFamilyCompressed",
            "design_name": self.design_name,
            "component_id": self.component_id,
            "instance_count": self.instance_count,
            "slot_count": self.slot_count,
            "similarity_score": round(self.similarity_score, 4),
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ComponentFamilySkipped:
    """Emitted when a qualifying family is left inline.

    ``reason`` is one of "lossy" (overrides could not reproduce every
    member), "not_smaller" (the compressed form was not strictly smaller)
    or "nested" (every member sits inside another compressed instance).
    """
    design_name: str
    component_id: str
    instance_count: int
    reason: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "ComponentFamilySkipped",
            "design_name": self.design_name,
            "component_id": self.component_id,
            "instance_count": self.instance_count,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ComponentsExtracted:
    """Emitted once per completed extraction."""
    design_name: str
    component_count: int
    instance_count: int
    skipped_component_count: int
    original_size: int
    compressed_size: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "ComponentsExtracted",
            "design_name": self.design_name,
            "component_count": self.component_count,
            "instance_count": self.instance_count,
            "skipped_component_count": self.skipped_component_count,
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "timestamp": self.timestamp.isoformat(),
        }
