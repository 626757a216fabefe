"""
Caller identity resolution.

Identity comes from two partially trusted places. The gateway validates the
caller and forwards ``X-User-*`` headers; those always win. Requests that
carry only a bearer token fall back to the token's claims. Each source
resolves a whole identity or nothing, and the first source that resolves
one is used.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple

from fastapi import Request

from shared.logging import get_logger
from .context import ANONYMOUS, RequestIdentity
from .principal import BearerPrincipalAuthenticator

USER_ID_HEADER = "X-User-Id"
USER_EMAIL_HEADER = "X-User-Email"
USER_ROLE_HEADER = "X-User-Role"
USER_NAME_HEADER = "X-User-Name"

_USER_ID_PATTERN = re.compile(r"[0-9]+")

# Candidate claim names per identity field, tried in order.
CLAIM_NAMES: Dict[str, Tuple[str, ...]] = {
    "user_id": (
        "sub",
        "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier",
    ),
    "role": (
        "role",
        "http://schemas.microsoft.com/ws/2008/06/identity/claims/role",
    ),
    "email": ("email",),
    "display_name": ("name",),
}


def parse_user_id(value: Any) -> Optional[int]:
    """Parse a positive integer user id; anything else counts as absent.

    Only plain ASCII digits are accepted, so signs, underscores and other
    forms ``int()`` would take are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not _USER_ID_PATTERN.fullmatch(text):
        return None
    user_id = int(text)
    return user_id if user_id > 0 else None


class IdentitySource(Protocol):
    """A place a caller identity can be read from."""

    name: str

    async def resolve(self, request: Request) -> Optional[RequestIdentity]:
        ...


class HeaderIdentitySource:
    """Identity forwarded by the gateway in ``X-User-*`` headers."""

    name = "headers"

    def __init__(self) -> None:
        self.logger = get_logger("analysis.identity.headers")

    async def resolve(self, request: Request) -> Optional[RequestIdentity]:
        headers = request.headers
        user_id = parse_user_id(headers.get(USER_ID_HEADER))
        if user_id is None:
            return None

        identity = RequestIdentity(
            user_id=user_id,
            email=headers.get(USER_EMAIL_HEADER) or "",
            display_name=headers.get(USER_NAME_HEADER) or "",
            role=headers.get(USER_ROLE_HEADER) or "",
            source=self.name,
        )
        self.logger.info(
            "User context populated from gateway headers",
            user_id=identity.user_id,
            role=identity.role,
        )
        return identity


class ClaimsIdentitySource:
    """Identity taken from an authenticated bearer token's claims."""

    name = "claims"

    def __init__(
        self,
        authenticator: BearerPrincipalAuthenticator,
        claim_names: Mapping[str, Sequence[str]] = CLAIM_NAMES,
    ) -> None:
        self.authenticator = authenticator
        self.claim_names = claim_names
        self.logger = get_logger("analysis.identity.claims")

    async def resolve(self, request: Request) -> Optional[RequestIdentity]:
        claims = await self.authenticator.authenticate(request)
        if not claims:
            return None
        return self.from_claims(claims)

    def from_claims(self, claims: Mapping[str, Any]) -> Optional[RequestIdentity]:
        user_id = None
        for name in self.claim_names["user_id"]:
            user_id = parse_user_id(claims.get(name))
            if user_id is not None:
                break
        if user_id is None:
            return None

        identity = RequestIdentity(
            user_id=user_id,
            email=self._first_text(claims, "email"),
            display_name=self._first_text(claims, "display_name"),
            role=self._first_text(claims, "role"),
            source=self.name,
        )
        self.logger.info(
            "User context populated from token claims",
            user_id=identity.user_id,
            role=identity.role,
        )
        return identity

    def _first_text(self, claims: Mapping[str, Any], field: str) -> str:
        for name in self.claim_names.get(field, ()):
            value = claims.get(name)
            if isinstance(value, (list, tuple)):
                value = next((item for item in value if isinstance(item, str) and item), None)
            if isinstance(value, str) and value:
                return value
        return ""


class IdentityResolver:
    """Runs identity sources in priority order; the first hit wins."""

    def __init__(self, sources: Sequence[IdentitySource]) -> None:
        self.sources = list(sources)
        self.logger = get_logger("analysis.identity.resolver")

    async def resolve(self, request: Request) -> RequestIdentity:
        for source in self.sources:
            try:
                identity = await source.resolve(request)
            except Exception as exc:
                # A broken source degrades to "absent"; access control decides.
                self.logger.warning(
                    "Identity source failed",
                    source=getattr(source, "name", type(source).__name__),
                    error=str(exc),
                )
                continue
            if identity is not None:
                return identity

        self.logger.debug("No user identity present on request", path=request.url.path)
        return ANONYMOUS
