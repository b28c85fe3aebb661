"""Pytest configuration for the design-compress test suite."""

from __future__ import annotations

import logging

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used across the suite."""
    config.addinivalue_line(
        "markers",
        "roundtrip: tests that compress a design and expand it back",
    )
    config.addinivalue_line(
        "markers",
        "scenario(name): reference scenario a test reproduces",
    )


@pytest.fixture
def compression_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture debug output of the compression services."""
    caplog.set_level(logging.DEBUG, logger="designcompress")
    return caplog
