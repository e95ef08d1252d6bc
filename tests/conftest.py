"""
Test Configuration and Fixtures

Shared fixtures for the diff engine test suite.
"""

import os

import pytest

from studydiff.diff import ComparisonOptions, SnapshotComparator
from tests.support.study_data import STUDY_SCHEMA, build_baseline

# Keep settings deterministic regardless of the developer's shell or .env.
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "text")


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")


def pytest_collection_modifyitems(config, items):
    """Everything under tests/unit is a unit test unless marked otherwise."""
    for item in items:
        if item.get_closest_marker("unit"):
            continue
        item.add_marker(pytest.mark.unit)


# =============================================================================
# DATA FIXTURES
# =============================================================================


@pytest.fixture
def study_schema():
    return STUDY_SCHEMA


@pytest.fixture
def baseline():
    return build_baseline()


@pytest.fixture
def comparator(study_schema):
    return SnapshotComparator(study_schema, ComparisonOptions())
