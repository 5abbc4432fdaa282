"""Shared pytest configuration."""

import pytest

from inverted_search.log_config import configure_logging


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Keep debug events out of the test output."""
    configure_logging(level="WARNING", log_format="console")
