"""
Gateway secret validation.

Every request must carry the secret the gateway was configured with in
``X-Gateway-Secret``; this closes direct access to the service from outside
the gateway. Without a configured secret the check is disabled.
"""

import hmac
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shared.errors import ErrorResponse
from shared.localization import get_message, get_request_language
from shared.logging import get_logger

GATEWAY_SECRET_HEADER = "X-Gateway-Secret"


class GatewaySecretValidator:
    """Checks the pre-shared gateway secret on incoming requests."""

    def __init__(self, secret: Optional[str]):
        self.secret = secret if secret and secret.strip() else None
        self.logger = get_logger("analysis.gateway_secret")

        if self.secret is None:
            self.logger.warning("Gateway secret not configured, validation disabled")

    @property
    def enabled(self) -> bool:
        return self.secret is not None

    def validate(self, request: Request) -> Optional[JSONResponse]:
        """Return a 403 response to stop the request, or None to let it through."""
        if not self.enabled:
            return None

        provided = request.headers.get(GATEWAY_SECRET_HEADER)
        if provided is None or not provided.strip():
            self.logger.warning(
                "Missing X-Gateway-Secret header",
                path=request.url.path,
                client=request.client.host if request.client else None,
            )
            return self._forbidden(request)

        if not hmac.compare_digest(provided.encode("utf-8"), self.secret.encode("utf-8")):
            self.logger.warning(
                "Invalid X-Gateway-Secret header",
                path=request.url.path,
                client=request.client.host if request.client else None,
            )
            return self._forbidden(request)

        self.logger.debug("Gateway secret validated successfully", path=request.url.path)
        return None

    def _forbidden(self, request: Request) -> JSONResponse:
        lang = get_request_language(request)
        body = ErrorResponse(
            code="GATEWAY_FORBIDDEN",
            error="Forbidden",
            message=get_message("Error_GatewayForbidden", lang),
            message_key="Error_GatewayForbidden",
        )
        return JSONResponse(status_code=403, content=body.model_dump())


class GatewaySecretMiddleware(BaseHTTPMiddleware):
    """Stops requests that did not come through the gateway."""

    def __init__(self, app, validator: GatewaySecretValidator):
        super().__init__(app)
        self.validator = validator

    async def dispatch(self, request: Request, call_next):
        rejection = self.validator.validate(request)
        if rejection is not None:
            return rejection
        return await call_next(request)
