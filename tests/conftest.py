"""Shared pytest fixtures and configuration.

This file is automatically loaded by pytest and provides fixtures
accessible to all tests.
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import HealthCheck, settings

from vigil.intern import Strings
from vigil.state import State
from vigil.styles import Palette, Styles
from vigil.view import View

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# Define profiles for different environments
settings.register_profile(
    "ci",
    max_examples=50,  # Faster for CI
    deadline=None,  # No deadlines for slow tests
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "dev",
    max_examples=10,  # Very fast for local development
    deadline=500,  # 500ms deadline for local tests
)

settings.register_profile(
    "thorough",
    max_examples=1000,  # Comprehensive for nightly runs
    deadline=None,
)

# Load profile based on environment variable
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

# =============================================================================
# Clock Fixtures
# =============================================================================

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0():
    """Fixed producer timestamp every test clock starts from."""
    return T0


@pytest.fixture
def retain_for():
    return timedelta(seconds=6)


# =============================================================================
# State Fixtures
# =============================================================================


@pytest.fixture
def strings():
    return Strings()


@pytest.fixture
def plain_styles():
    """Styles without colors, so rendered text compares as plain strings."""
    return Styles(palette=Palette.NO_COLORS, utf8=True)


@pytest.fixture
def state(retain_for):
    """State with a six second retention window and no linters."""
    return State().with_retain_for(retain_for)


@pytest.fixture
def view():
    return View()
