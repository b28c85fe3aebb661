"""Configuration data models."""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

from pydantic import ValidationError

from designcompress.domains.shared.kernel import parse_value_type_names

if TYPE_CHECKING:
    from designcompress.domains.compression.value_objects import (
        ExtractionOptions,
        SlotDetectionOptions,
    )

ENV_PREFIX = "DESIGNCOMPRESS_"

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NONE_WORDS = {"", "none", "null", "unbounded"}


class ConfigurationError(ValueError):
    """Raised when a compression configuration is invalid."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def _config_key(name: str) -> str:
    """Map ``minInstances`` / ``min_instances`` / ``MIN_INSTANCES`` to the attribute name."""
    return _CAMEL_BOUNDARY.sub(r"\1_\2", name).upper()


@dataclass
class CompressionConfig:
    """Centralized configuration for component compression."""

    # Family selection
    MIN_INSTANCES: int = 2  # components seen fewer times stay inline

    # Slot policy
    MIN_SIMILARITY: float = 1.0  # 1.0: every varying path is a slot
    ALWAYS_SLOTS: List[str] = field(default_factory=list)  # value type names
    NEVER_SLOTS: List[str] = field(default_factory=list)  # value type names
    MAX_SLOTS: Optional[int] = None  # None: unbounded
    MAX_DEPTH: Optional[int] = None  # None: unbounded

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> 'CompressionConfig':
        """Create configuration from a dictionary (snake_case or camelCase keys)."""
        instance = cls()
        for key, value in config.items():
            attr = _config_key(key)
            if hasattr(instance, attr):
                setattr(instance, attr, value)
        return instance

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'CompressionConfig':
        """Create configuration from ``DESIGNCOMPRESS_*`` environment variables.

        Example:
            DESIGNCOMPRESS_MIN_INSTANCES=3
            DESIGNCOMPRESS_NEVER_SLOTS=opacity,visibility
            DESIGNCOMPRESS_MAX_DEPTH=none
        """
        environ = os.environ if environ is None else environ
        instance = cls()
        for attr in instance.to_dict():
            raw = environ.get(f"{ENV_PREFIX}{attr}")
            if raw is None:
                continue
            setattr(instance, attr, _parse_env_value(attr, raw))
        return instance

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            key: value for key, value in self.__dict__.items()
            if not key.startswith('_')
        }

    def update(self, **kwargs) -> None:
        """Update configuration values."""
        for key, value in kwargs.items():
            attr = _config_key(key)
            if hasattr(self, attr):
                setattr(self, attr, value)
            else:
                raise ValueError(f"Unknown configuration key: {key}")

    def validate(self) -> List[str]:
        """Validate configuration values and return any errors."""
        errors = []

        if not _is_int(self.MIN_INSTANCES) or self.MIN_INSTANCES < 1:
            errors.append("MIN_INSTANCES must be an integer of at least 1")

        if not isinstance(self.MIN_SIMILARITY, (int, float)) or isinstance(self.MIN_SIMILARITY, bool):
            errors.append("MIN_SIMILARITY must be a number")
        elif not 0.0 <= self.MIN_SIMILARITY <= 1.0:
            errors.append("MIN_SIMILARITY must be between 0 and 1")

        for attr in ("MAX_SLOTS", "MAX_DEPTH"):
            value = getattr(self, attr)
            if value is not None and (not _is_int(value) or value < 0):
                errors.append(f"{attr} must be a non-negative integer or None")

        for attr in ("ALWAYS_SLOTS", "NEVER_SLOTS"):
            try:
                parse_value_type_names(getattr(self, attr))
            except ValidationError:
                errors.append(
                    f"{attr} must only contain: text, fills, strokes, opacity, visibility, property"
                )

        return errors

    def ensure_valid(self) -> 'CompressionConfig':
        """Return self, or raise ConfigurationError listing every problem."""
        errors = self.validate()
        if errors:
            raise ConfigurationError(errors)
        return self

    def to_slot_detection_options(self) -> "SlotDetectionOptions":
        """Build the slot policy value object from this configuration."""
        from designcompress.domains.compression.value_objects import SlotDetectionOptions

        self.ensure_valid()
        return SlotDetectionOptions.create(
            min_similarity=float(self.MIN_SIMILARITY),
            always_slots=self.ALWAYS_SLOTS,
            never_slots=self.NEVER_SLOTS,
            max_slots=self.MAX_SLOTS,
            max_depth=self.MAX_DEPTH,
        )

    def to_extraction_options(self) -> "ExtractionOptions":
        """Build the extractor options value object from this configuration."""
        from designcompress.domains.compression.value_objects import ExtractionOptions

        return ExtractionOptions(
            min_instances=self.MIN_INSTANCES,
            slots=self.to_slot_detection_options(),
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_env_value(attr: str, raw: str) -> Any:
    text = raw.strip()
    if attr in ("ALWAYS_SLOTS", "NEVER_SLOTS"):
        return [part.strip() for part in text.split(",") if part.strip()]
    if attr in ("MAX_SLOTS", "MAX_DEPTH") and text.lower() in _NONE_WORDS:
        return None
    try:
        if attr == "MIN_SIMILARITY":
            return float(text)
        return int(text)
    except ValueError:
        # left as text so validate() reports it
        return text
