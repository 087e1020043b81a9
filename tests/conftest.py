"""
Shared pytest configuration and fixtures for the spatial electorate analyzer.

This module provides common test fixtures and utilities used across
all test modules.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data.positions import PositionSet  # noqa: E402


@pytest.fixture
def symmetric_positions():
    """Three candidates symmetric around the median voter."""
    return PositionSet.from_positions([0.2, 0.5, 0.8])


@pytest.fixture
def asymmetric_positions():
    """
    Three candidates at 0.1 / 0.4 / 0.8.

    Hand-computed segments:
        C1>C2>C3 0.25, C2>C1>C3 0.20, C2>C3>C1 0.15, C3>C2>C1 0.40
    """
    return PositionSet.from_positions([0.1, 0.4, 0.8])


@pytest.fixture
def two_positions():
    """Two candidates with the indifference point at 0.4."""
    return PositionSet.from_positions([0.2, 0.6])


@pytest.fixture
def four_positions():
    """Four candidates spread along the axis."""
    return PositionSet.from_positions([0.1, 0.3, 0.6, 0.9])


@pytest.fixture
def sample_configurations():
    """Valid configurations of every supported size, including degenerate ones."""
    return [
        [0.3, 0.7],
        [0.2, 0.6],
        [0.01, 0.99],
        [0.2, 0.5, 0.8],
        [0.1, 0.4, 0.8],
        [0.5, 0.5, 0.8],
        [0.9, 0.1, 0.5],
        [0.1, 0.3, 0.6, 0.9],
        [0.25, 0.25, 0.75, 0.75],
        [0.05, 0.06, 0.5, 0.95],
    ]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (full analysis pipeline)",
    )
    config.addinivalue_line(
        "markers",
        "golden: marks tests as golden dataset validation (hand-computed results)",
    )
    config.addinivalue_line(
        "markers", "invariant: marks tests as mathematical invariant validation"
    )
    config.addinivalue_line(
        "markers", "smoke: marks tests as smoke tests (basic functionality check)"
    )
    config.addinivalue_line(
        "markers", "critical: marks tests on the critical correctness path"
    )
