"""Shared fixtures for robo_rumble tests."""

from __future__ import annotations

import pytest

from robo_rumble.sim.content.registry import ContentRegistry


@pytest.fixture(scope="module")
def registry() -> ContentRegistry:
    """Module-scoped registry with the bundled tables loaded once."""
    return ContentRegistry().load_all()
