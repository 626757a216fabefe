"""
Caller identity model and resolution.
"""

from .context import ADMIN_ROLE, ANONYMOUS, RequestIdentity
from .principal import BearerPrincipalAuthenticator
from .resolvers import (
    ClaimsIdentitySource,
    HeaderIdentitySource,
    IdentityResolver,
    IdentitySource,
    parse_user_id,
)

__all__ = [
    "ADMIN_ROLE",
    "ANONYMOUS",
    "BearerPrincipalAuthenticator",
    "ClaimsIdentitySource",
    "HeaderIdentitySource",
    "IdentityResolver",
    "IdentitySource",
    "RequestIdentity",
    "parse_user_id",
]
