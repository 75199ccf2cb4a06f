"""Shared pytest fixtures for router tests."""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from fastapi.testclient import TestClient

from loss_reports.services.report_service import ReportService


@pytest.fixture
def mock_database():
    """Create a mock Database so the lifespan never touches a real store."""
    database = Mock()
    database.init = AsyncMock()
    database.ping = AsyncMock()
    database.dispose = AsyncMock()
    database.engine.dialect.name = "sqlite"
    return database


@pytest.fixture
def mock_report_service():
    """Create a mock ReportService."""
    service = AsyncMock(spec=ReportService)
    service.list_reports = AsyncMock(return_value=[])
    service.create_report = AsyncMock()
    service.update_report = AsyncMock()
    service.delete_report = AsyncMock(return_value=None)
    service.export_rows = AsyncMock(return_value=[])
    return service


@pytest.fixture
def client(mock_database, mock_report_service):
    """TestClient with the store and the report service replaced by mocks."""
    from loss_reports.main import app
    from loss_reports.database import get_database
    from loss_reports.dependencies import get_report_service_dep

    app.dependency_overrides[get_database] = lambda: mock_database
    app.dependency_overrides[get_report_service_dep] = lambda: mock_report_service

    with patch("loss_reports.main.Database", return_value=mock_database):
        with TestClient(app) as test_client:
            yield test_client

    app.dependency_overrides.clear()
