"""
HTTP clients for the analysis, result and error record services.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from shared.errors import ExternalServiceError
from shared.logging import get_logger
from ..domain.models import AnalysisView, ErrorView, ResultView
from ..middleware.gateway_secret import GATEWAY_SECRET_HEADER

ViewT = TypeVar("ViewT", bound=BaseModel)


class RecordServiceClient:
    """Shared request/parse/error handling for the record services.

    404 means "no data" and is returned as None; every other non-200 status
    or transport failure is raised as ExternalServiceError.
    """

    service_name = "records"

    def __init__(self, base_url: str, gateway_secret: Optional[str] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.gateway_secret = gateway_secret
        self.timeout = timeout
        self.logger = get_logger(f"analysis.{self.service_name}_client")

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.gateway_secret:
            headers[GATEWAY_SECRET_HEADER] = self.gateway_secret
        return headers

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            self.logger.error("Record service unreachable", url=url, params=params, error=str(exc))
            raise ExternalServiceError(
                service=self.service_name,
                message=str(exc),
                details={"url": url}
            ) from exc

        if response.status_code == 200:
            self.logger.debug("Record service response", url=url, params=params)
            return response.json()

        if response.status_code == 404:
            self.logger.debug("Record service returned not found", url=url, params=params)
            return None

        self.logger.error(
            "Record service request failed",
            url=url,
            params=params,
            status_code=response.status_code,
        )
        raise ExternalServiceError(
            service=self.service_name,
            message=f"Unexpected status {response.status_code}",
            details={"status_code": response.status_code, "url": url}
        )

    def _parse_one(self, model: Type[ViewT], payload: Any) -> ViewT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ExternalServiceError(
                service=self.service_name,
                message="Malformed record payload",
                details={"model": model.__name__, "validation_error_count": exc.error_count()}
            ) from exc

    def _parse_many(self, model: Type[ViewT], payload: Optional[Dict[str, Any]], key: str) -> List[ViewT]:
        if payload is None:
            return []
        items = payload.get(key)
        if items is None:
            return []
        if not isinstance(items, list):
            raise ExternalServiceError(
                service=self.service_name,
                message=f"Expected '{key}' to be a list",
            )
        return [self._parse_one(model, item) for item in items]


class AnalysisClient(RecordServiceClient):
    """Reads analyses from the analysis record service."""

    service_name = "analysis_service"

    async def get_by_id(self, analysis_id: int) -> Optional[AnalysisView]:
        payload = await self._get(f"/api/analysis/{analysis_id}")
        if payload is None or payload.get("analysis") is None:
            return None
        return self._parse_one(AnalysisView, payload["analysis"])

    async def get_by_user(self, user_id: int) -> List[AnalysisView]:
        payload = await self._get("/api/analysis/by-user", params={"userId": user_id})
        return self._parse_many(AnalysisView, payload, "analyses")


class ResultClient(RecordServiceClient):
    """Reads per-criterion results from the result record service."""

    service_name = "result_service"

    async def get_by_analysis(self, analysis_id: int) -> List[ResultView]:
        payload = await self._get("/api/result/by-analysis", params={"analysisId": analysis_id})
        return self._parse_many(ResultView, payload, "results")


class ErrorClient(RecordServiceClient):
    """Reads errors from the error record service."""

    service_name = "error_service"

    async def get_by_result(self, result_id: int) -> List[ErrorView]:
        payload = await self._get("/api/error/by-result", params={"resultId": result_id})
        return self._parse_many(ErrorView, payload, "errors")
