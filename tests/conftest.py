"""
Pytest configuration for SheetGrid tests.

Sets up test environment and global fixtures.
"""
import os
import pytest

# Disable config validation during tests
# This allows tests to run without requiring a .env file
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from sheetgrid.grid import SparseGrid  # noqa: E402
from sheetgrid.store import SheetRegistry  # noqa: E402


@pytest.fixture
def grid():
    """The reference sheet: 100 000 rows x 10 columns, no edits."""
    return SparseGrid(row_count=100000, col_count=10)


@pytest.fixture
def registry():
    """Fresh, empty sheet registry."""
    registry = SheetRegistry()
    yield registry
    registry.clear()
