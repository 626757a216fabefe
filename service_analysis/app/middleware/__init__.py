"""
Request middleware: gateway trust boundary and caller identity.
"""

from .gateway_secret import GATEWAY_SECRET_HEADER, GatewaySecretMiddleware, GatewaySecretValidator
from .user_context import UserContextMiddleware, get_request_identity

__all__ = [
    "GATEWAY_SECRET_HEADER",
    "GatewaySecretMiddleware",
    "GatewaySecretValidator",
    "UserContextMiddleware",
    "get_request_identity",
]
