"""
End-to-end tests for the composite analysis endpoints.
"""

from unittest.mock import ANY, AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from service_analysis.app.domain import AnalysisView
from shared.errors import ExternalServiceError
from shared.logging import request_id_var
from shared.test_helpers import TEST_GATEWAY_SECRET, MockUser, mock_token_generator, record_data_factory


@pytest.fixture
def owner_service(service, install_readers, owner_records):
    analysis, results, errors = owner_records
    return install_readers(service, {7: analysis}, {7: results}, errors)


def _caller(gateway_headers, user_id, role=None):
    headers = dict(gateway_headers)
    headers["X-User-Id"] = str(user_id)
    if role is not None:
        headers["X-User-Role"] = role
    return headers


class TestGetCompleteAnalysisById:

    def test_owner_gets_complete_tree(self, client, owner_service, gateway_headers):
        response = client.get("/composite-analysis/7", headers=_caller(gateway_headers, 42))

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Analysis found"
        analysis = body["analysis"]
        assert analysis["id"] == 7
        assert analysis["userId"] == 42
        assert analysis["sourceUrl"] == "https://example.org"
        assert len(analysis["results"]) == 2
        assert len(analysis["results"][0]["errors"]) == 1
        assert analysis["results"][1]["errors"] == []
        assert analysis["results"][0]["errors"][0]["errorCode"] == "image-alt"

    def test_other_user_is_forbidden(self, client, owner_service, gateway_headers):
        response = client.get("/composite-analysis/7", headers=_caller(gateway_headers, 5))

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "AUTHORIZATION_ERROR"
        assert body["error"] == "Forbidden"
        assert body["message_key"] == "Error_Forbidden"
        # The owner is only known after the lookup.
        owner_service.analysis_client.get_by_id.assert_awaited_once_with(7)

    @pytest.mark.parametrize("role", ["admin", "Admin"])
    def test_admin_sees_any_analysis(self, client, owner_service, gateway_headers, role):
        response = client.get("/composite-analysis/7", headers=_caller(gateway_headers, 1, role))

        assert response.status_code == 200
        assert response.json()["analysis"]["userId"] == 42

    def test_anonymous_caller_is_unauthorized(self, client, owner_service, gateway_headers):
        response = client.get("/composite-analysis/7", headers=gateway_headers)

        assert response.status_code == 401
        assert response.json()["message_key"] == "Error_Unauthorized"
        owner_service.analysis_client.get_by_id.assert_not_called()

    def test_unparseable_user_id_header_is_unauthorized(self, client, owner_service, gateway_headers):
        headers = dict(gateway_headers)
        headers["X-User-Id"] = "invalid-id"

        assert client.get("/composite-analysis/7", headers=headers).status_code == 401

    def test_missing_analysis_is_not_found(self, client, owner_service, gateway_headers):
        response = client.get("/composite-analysis/999", headers=_caller(gateway_headers, 42))

        assert response.status_code == 404
        body = response.json()
        assert body["message_key"] == "Error_AnalysisNotFound"
        assert body["message"] == "Analysis not found"
        assert body["details"] == {"analysis_id": 999}
        owner_service.result_client.get_by_analysis.assert_not_called()

    def test_missing_analysis_is_not_found_before_ownership(self, client, owner_service, gateway_headers):
        response = client.get("/composite-analysis/999", headers=_caller(gateway_headers, 5))

        assert response.status_code == 404

    def test_bearer_token_identifies_owner(self, client, owner_service, gateway_headers):
        token = mock_token_generator.generate_user_token(MockUser(user_id=42, email="o@example.com", name="Owner"))
        headers = dict(gateway_headers)
        headers["Authorization"] = f"Bearer {token}"

        response = client.get("/composite-analysis/7", headers=headers)

        assert response.status_code == 200

    def test_bearer_admin_role_claim(self, client, owner_service, gateway_headers):
        token = mock_token_generator.generate_user_token(
            MockUser(user_id=3, email="a@example.com", name="Admin", role="Admin")
        )
        headers = dict(gateway_headers)
        headers["Authorization"] = f"Bearer {token}"

        assert client.get("/composite-analysis/7", headers=headers).status_code == 200

    def test_invalid_bearer_token_is_unauthorized(self, client, owner_service, gateway_headers):
        token = mock_token_generator.generate_access_token({"sub": "42"}, secret="not-the-signing-key")
        headers = dict(gateway_headers)
        headers["Authorization"] = f"Bearer {token}"

        assert client.get("/composite-analysis/7", headers=headers).status_code == 401

    def test_header_identity_wins_over_token(self, client, owner_service, gateway_headers):
        token = mock_token_generator.generate_access_token({"sub": "42"})
        headers = _caller(gateway_headers, 5)
        headers["Authorization"] = f"Bearer {token}"

        assert client.get("/composite-analysis/7", headers=headers).status_code == 403

    def test_reader_failure_is_server_error(self, client, owner_service, gateway_headers):
        owner_service.error_client.get_by_result = AsyncMock(
            side_effect=ExternalServiceError("error_service", "Unexpected status 503")
        )

        response = client.get("/composite-analysis/7", headers=_caller(gateway_headers, 42))

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "EXTERNAL_SERVICE_ERROR"
        assert body["message_key"] == "Error_InternalServer"
        assert body["details"]["service"] == "error_service"

    def test_unexpected_failure_reaches_generic_handler(self, service, owner_service, gateway_headers):
        owner_service.result_client.get_by_analysis = AsyncMock(side_effect=RuntimeError("connection reset"))
        client = TestClient(service.app, raise_server_exceptions=False)

        response = client.get("/composite-analysis/7", headers=_caller(gateway_headers, 42))

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"

    def test_messages_default_to_spanish(self, client, owner_service):
        response = client.get("/composite-analysis/7", headers={"X-Gateway-Secret": TEST_GATEWAY_SECRET, "X-User-Id": "42"})

        assert response.json()["message"] == "Análisis encontrado"


class TestGetCompleteAnalysesByUser:

    @pytest.fixture
    def user_service(self, service, install_readers):
        analyses = {
            1: AnalysisView.model_validate(record_data_factory.analysis(1, 42)),
            2: AnalysisView.model_validate(record_data_factory.analysis(2, 42)),
            3: AnalysisView.model_validate(record_data_factory.analysis(3, 8)),
        }
        return install_readers(service, analyses, {}, {})

    @pytest.mark.parametrize("path", ["/composite-analysis", "/composite-analysis/by-user"])
    def test_owner_gets_own_analyses(self, client, user_service, gateway_headers, path):
        response = client.get(path, params={"userId": 42}, headers=_caller(gateway_headers, 42))

        assert response.status_code == 200
        body = response.json()
        assert [analysis["id"] for analysis in body["analyses"]] == [1, 2]
        assert all(analysis["results"] == [] for analysis in body["analyses"])
        assert body["message"] == "Analyses for user retrieved"

    def test_other_user_is_forbidden_before_any_read(self, client, user_service, gateway_headers):
        response = client.get("/composite-analysis", params={"userId": 42}, headers=_caller(gateway_headers, 5))

        assert response.status_code == 403
        user_service.analysis_client.get_by_user.assert_not_called()

    def test_admin_reads_any_user(self, client, user_service, gateway_headers):
        response = client.get("/composite-analysis", params={"userId": 8}, headers=_caller(gateway_headers, 1, "admin"))

        assert response.status_code == 200
        assert [analysis["id"] for analysis in response.json()["analyses"]] == [3]

    def test_anonymous_caller_is_unauthorized(self, client, user_service, gateway_headers):
        response = client.get("/composite-analysis", params={"userId": 42}, headers=gateway_headers)

        assert response.status_code == 401
        user_service.analysis_client.get_by_user.assert_not_called()

    def test_user_without_analyses_gets_empty_list(self, client, user_service, gateway_headers):
        response = client.get("/composite-analysis", params={"userId": 77}, headers=_caller(gateway_headers, 77))

        assert response.status_code == 200
        assert response.json()["analyses"] == []

    def test_missing_user_id_is_rejected(self, client, user_service, gateway_headers):
        response = client.get("/composite-analysis", headers=_caller(gateway_headers, 42))

        assert response.status_code == 422


class TestServiceEndpoints:

    def test_metrics_count_composite_queries(self, client, owner_service, gateway_headers):
        client.get("/composite-analysis/7", headers=_caller(gateway_headers, 42))
        client.get("/composite-analysis/7", headers=_caller(gateway_headers, 5))

        response = client.get("/metrics", headers=gateway_headers)

        assert response.status_code == 200
        text = response.text
        assert 'composite_queries_total{operation="get_by_id",outcome="ok"} 1.0' in text
        assert 'composite_queries_total{operation="get_by_id",outcome="authorization_error"} 1.0' in text

    def test_request_id_is_echoed(self, client, gateway_headers):
        headers = dict(gateway_headers)
        headers["X-Request-ID"] = "req-123"

        response = client.get("/health", headers=headers)

        assert response.headers["X-Request-ID"] == "req-123"

    def test_gate_rejection_is_correlated_and_counted(self, client, gateway_headers):
        response = client.get("/health", headers={"X-Request-ID": "req-403"})

        assert response.status_code == 403
        assert response.headers["X-Request-ID"] == "req-403"

        text = client.get("/metrics", headers=gateway_headers).text
        assert 'http_requests_total{method="GET",endpoint="/health",status_code="403"} 1.0' in text

    def test_gate_rejection_is_access_logged(self, client, service):
        service.logger = MagicMock()

        client.get("/composite-analysis/7", headers={"X-Request-ID": "req-log"})

        service.logger.info.assert_any_call(
            "HTTP request",
            method="GET",
            path="/composite-analysis/7",
            status_code=403,
            duration_ms=ANY,
        )

    def test_identity_resolution_sees_request_id(self, client, service, owner_service, gateway_headers):
        seen = []
        resolve = service.identity_resolver.resolve

        async def _recording_resolve(request):
            seen.append(request_id_var.get())
            return await resolve(request)

        service.identity_resolver.resolve = _recording_resolve
        headers = _caller(gateway_headers, 42)
        headers["X-Request-ID"] = "req-identity"

        response = client.get("/composite-analysis/7", headers=headers)

        assert response.status_code == 200
        assert seen == ["req-identity"]
