"""
Shared pytest fixtures and configuration for errchain tests.

This module provides:
- Settings cache reset so ERRCHAIN_* env overrides apply per test
- structlog reset so logging configuration does not leak between tests
- A sample error chain used across modules
"""

from typing import Generator

import pytest
import structlog

from errchain.errors import AppError, DatabaseError, NotFoundError
from errchain.settings import reset_settings


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "unit" not in markers:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def clean_settings_fixture() -> Generator[None, None, None]:
    """Drop cached settings before and after each test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def clean_structlog_fixture() -> Generator[None, None, None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def user_profile_error() -> AppError:
    """
    Three-node chain:

        [AppError] Failed to load user profile
          -> [NotFoundError] User with id '123' not found
          -> [DatabaseError] SELECT: Connection refused
    """
    db_error = DatabaseError("SELECT", "Connection refused")
    return NotFoundError("User", "123", cause=db_error).wrap("Failed to load user profile")
