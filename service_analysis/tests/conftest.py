"""
Shared fixtures for Composite Analysis Service tests.
"""

from typing import Dict, List
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from service_analysis.app.domain.models import AnalysisView, ErrorView, ResultView
from service_analysis.app.main import create_app
from shared.config import get_config
from shared.test_helpers import TEST_GATEWAY_SECRET, get_mock_config, record_data_factory


@pytest.fixture
def config():
    return get_config(**get_mock_config())


@pytest.fixture
def client(config):
    """Create test client."""
    app = create_app(config)
    return TestClient(app)


@pytest.fixture
def service(client):
    return client.app.state.analysis_service


@pytest.fixture
def gateway_headers() -> Dict[str, str]:
    return {"X-Gateway-Secret": TEST_GATEWAY_SECRET, "Accept-Language": "en"}


@pytest.fixture
def owner_records():
    """Analysis 7 owned by user 42 with results 1 (one error) and 2 (no errors)."""
    analysis = AnalysisView.model_validate(record_data_factory.analysis(7, 42))
    results: List[ResultView] = [
        ResultView.model_validate(record_data_factory.result(1, 7)),
        ResultView.model_validate(record_data_factory.result(2, 7, severity="low")),
    ]
    errors: Dict[int, List[ErrorView]] = {
        1: [ErrorView.model_validate(record_data_factory.error(100, 1))],
        2: [],
    }
    return analysis, results, errors


@pytest.fixture
def install_readers():
    """Return a helper that points the service's record clients at in-memory data.

    ``analyses`` maps id -> AnalysisView, ``results`` maps analysis id -> list,
    ``errors`` maps result id -> list.
    """
    def _install(service, analyses, results, errors):
        service.analysis_client.get_by_id = AsyncMock(side_effect=lambda analysis_id: analyses.get(analysis_id))
        service.analysis_client.get_by_user = AsyncMock(
            side_effect=lambda user_id: [a for a in analyses.values() if a.user_id == user_id]
        )
        service.result_client.get_by_analysis = AsyncMock(
            side_effect=lambda analysis_id: results.get(analysis_id, [])
        )
        service.error_client.get_by_result = AsyncMock(side_effect=lambda result_id: errors.get(result_id, []))
        return service

    return _install
