"""
User context middleware.

Resolves the caller identity once per request and stores it on
``request.state.identity``; handlers receive it through the
``get_request_identity`` dependency.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from shared.logging import set_user_context
from ..identity import ANONYMOUS, IdentityResolver, RequestIdentity


class UserContextMiddleware(BaseHTTPMiddleware):
    """Populates the request identity from headers or token claims."""

    def __init__(self, app, resolver: IdentityResolver):
        super().__init__(app)
        self.resolver = resolver

    async def dispatch(self, request: Request, call_next):
        request.state.identity = ANONYMOUS
        identity = await self.resolver.resolve(request)
        request.state.identity = identity

        if identity.is_authenticated:
            set_user_context(user_id=str(identity.user_id))

        return await call_next(request)


def get_request_identity(request: Request) -> RequestIdentity:
    """FastAPI dependency returning the identity resolved for this request."""
    identity = getattr(request.state, "identity", None)
    if isinstance(identity, RequestIdentity):
        return identity
    return ANONYMOUS
