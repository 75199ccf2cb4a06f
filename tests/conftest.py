"""Shared pytest fixtures."""

# Clear settings cache before any imports to prevent stale values with coverage
from loss_reports.config import get_settings

get_settings.cache_clear()

import pytest
from unittest.mock import AsyncMock, Mock

from loss_reports.models.report import Report


@pytest.fixture
def make_report():
    """Factory for detached Report instances."""

    def _make(**overrides) -> Report:
        fields = {
            "id": 1,
            "request_identity": "identity-1",
            "manager": "Ivan",
            "restaurant": "01 — Astana",
            "reason": "spill",
            "amount": 1501,
            "start": "07.01.2026 10:00",
            "end": "07.01.2026 11:00",
            "comment": None,
            "created_at": 1767780000000,
        }
        fields.update(overrides)
        return Report(**fields)

    return _make


# Database mocking fixtures


@pytest.fixture
def mock_async_session():
    """Create a mock AsyncSession for repository tests."""
    session = AsyncMock()

    # Mock result object for execute
    mock_result = Mock()
    mock_result.scalar_one_or_none = Mock(return_value=None)
    mock_result.scalar_one = Mock(return_value=0)
    mock_result.scalars = Mock(return_value=Mock(all=Mock(return_value=[])))
    mock_result.rowcount = 0

    session.execute = AsyncMock(return_value=mock_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = Mock()
    session.bind = Mock()
    session.bind.dialect.name = "sqlite"

    return session
