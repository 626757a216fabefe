"""
Composite Analysis Service.

Serves complete analyses (analysis -> results -> errors) to the front-end
through the gateway. Requests pass the gateway secret gate, then the user
context middleware, then the owner-or-admin check in the handlers.
"""

from typing import Optional

from fastapi import Depends, Path, Query, Request

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import NotFoundError, ServiceException
from shared.localization import get_message, get_request_language

from .adapters import AnalysisClient, ErrorClient, ResultClient
from .domain import AccessPolicy, CompositeAnalysisService
from .identity import (
    BearerPrincipalAuthenticator,
    ClaimsIdentitySource,
    HeaderIdentitySource,
    IdentityResolver,
    RequestIdentity,
)
from .middleware import (
    GatewaySecretMiddleware,
    GatewaySecretValidator,
    UserContextMiddleware,
    get_request_identity,
)


class AnalysisQueryService(BaseService):
    """Composite analysis read service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        super().__init__("analysis", 8080, config=config)

        secret = self.config.gateway_secret
        timeout = self.config.records_timeout_seconds
        self.analysis_client = AnalysisClient(self.config.analysis_service_url, secret, timeout)
        self.result_client = ResultClient(self.config.result_service_url, secret, timeout)
        self.error_client = ErrorClient(self.config.error_service_url, secret, timeout)
        self.composite_service = CompositeAnalysisService(
            self.analysis_client,
            self.result_client,
            self.error_client,
        )
        self.access_policy = AccessPolicy()

        self._setup_composite_routes()

        self.logger.info(
            "Composite analysis service configured",
            gateway_secret_enabled=self.gateway_validator.enabled,
            bearer_tokens_enabled=self.principal_authenticator.enabled,
            analysis_service_url=self.config.analysis_service_url,
        )

        # Expose service instance via app state for introspection/testing
        self.app.state.analysis_service = self

    def _setup_service_middleware(self):
        """Gateway secret gate, then caller identity, both inside request timing."""
        self.gateway_validator = GatewaySecretValidator(self.config.gateway_secret)
        self.principal_authenticator = BearerPrincipalAuthenticator(
            self.config.jwt_secret_key,
            issuer=self.config.jwt_issuer,
            audience=self.config.jwt_audience,
            algorithms=self.config.jwt_algorithms,
        )
        self.identity_resolver = IdentityResolver([
            HeaderIdentitySource(),
            ClaimsIdentitySource(self.principal_authenticator),
        ])

        # Added last so the gate runs first.
        self.app.add_middleware(UserContextMiddleware, resolver=self.identity_resolver)
        self.app.add_middleware(GatewaySecretMiddleware, validator=self.gateway_validator)

    def _language(self, request: Request) -> str:
        return get_request_language(request, self.config.default_language)

    def _setup_composite_routes(self):
        """Set up composite analysis routes."""

        @self.app.get("/composite-analysis/by-user")
        @self.app.get("/composite-analysis")
        async def get_complete_analyses_by_user(
            request: Request,
            user_id: int = Query(..., alias="userId"),
            identity: RequestIdentity = Depends(get_request_identity),
        ):
            """All complete analyses owned by ``userId``; owner or admin only."""
            operation = "get_by_user"
            try:
                # The owner is the requested user, so no lookup is needed first.
                self.access_policy.require_owner_or_admin(identity, user_id, resource="user_analyses")

                with self.metrics.time_operation("composite_query_duration_seconds", operation=operation):
                    analyses = await self.composite_service.get_complete_by_user(user_id)
            except ServiceException as exc:
                self.metrics.record_composite_query(operation, exc.code.lower())
                raise

            self.metrics.record_composite_query(operation, "ok")
            return {
                "analyses": [analysis.model_dump(mode="json", by_alias=True) for analysis in analyses],
                "message": get_message("Success_AnalysesByUser", self._language(request)),
            }

        @self.app.get("/composite-analysis/{analysis_id}")
        async def get_complete_analysis_by_id(
            request: Request,
            analysis_id: int = Path(...),
            identity: RequestIdentity = Depends(get_request_identity),
        ):
            """One complete analysis; owner or admin only."""
            operation = "get_by_id"
            try:
                self.access_policy.require_authenticated(identity)

                with self.metrics.time_operation("composite_query_duration_seconds", operation=operation):
                    analysis = await self.composite_service.get_complete_by_id(analysis_id)

                if analysis is None:
                    raise NotFoundError("Error_AnalysisNotFound", details={"analysis_id": analysis_id})

                self.access_policy.require_owner_or_admin(
                    identity, analysis.user_id, resource="analysis", resource_id=analysis_id
                )
            except ServiceException as exc:
                self.metrics.record_composite_query(operation, exc.code.lower())
                raise

            self.metrics.record_composite_query(operation, "ok")
            return {
                "analysis": analysis.model_dump(mode="json", by_alias=True),
                "message": get_message("Success_AnalysisFound", self._language(request)),
            }


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = AnalysisQueryService(config)
    return service.app


if __name__ == "__main__":
    service = AnalysisQueryService()
    service.run()
