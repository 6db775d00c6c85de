"""
Unit Test Fixtures.

Unit tests never touch a database, Redis or the network: sessions are
mocks and HTTP goes through httpx.MockTransport.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Context bound by one test (bind_source, middleware) must not leak into the next."""
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    AsyncSession stand-in for services that are tested without a database.

    Usage:
        def test_changes(mock_db_session):
            service = LeadService(mock_db_session)
    """
    session = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session
