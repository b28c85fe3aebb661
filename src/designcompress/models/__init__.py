"""Data models for design-compress."""

from .config_models import CompressionConfig, ConfigurationError

__all__ = ["CompressionConfig", "ConfigurationError"]
