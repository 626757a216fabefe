"""
Bearer token principal for requests that reach the service without gateway headers.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from fastapi import Request
from jose import JWTError, jwt

from shared.logging import get_logger


class BearerPrincipalAuthenticator:
    """Validates ``Authorization: Bearer`` JWTs signed with a shared key."""

    def __init__(
        self,
        secret_key: Optional[str],
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        algorithms: Sequence[str] = ("HS256",),
    ) -> None:
        self.secret_key = secret_key or None
        self.issuer = issuer or None
        self.audience = audience or None
        self.algorithms: List[str] = list(algorithms)
        self.logger = get_logger("analysis.identity.principal")

        if not self.secret_key:
            self.logger.warning("JWT secret key not configured, bearer tokens will be ignored")

    @property
    def enabled(self) -> bool:
        return self.secret_key is not None

    async def authenticate(self, request: Request) -> Optional[Dict[str, Any]]:
        """Return the validated claims of the request's bearer token, if any."""
        cached = getattr(request.state, "principal_claims", None)
        if cached is not None:
            return cached

        if not self.enabled:
            return None

        authorization = request.headers.get("Authorization")
        if not authorization:
            return None

        # Auth schemes are case-insensitive.
        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            return None

        claims = self.decode(token)
        if claims is not None:
            request.state.principal_claims = claims
        return claims

    def decode(self, token: str) -> Optional[Dict[str, Any]]:
        """Validate signature, expiry, issuer and audience; None when invalid."""
        options: Dict[str, Any] = {
            "verify_aud": self.audience is not None,
            "verify_iss": self.issuer is not None,
            # The subject may be numeric; ClaimsIdentitySource parses it.
            "verify_sub": False,
        }
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options=options,
            )
        except JWTError as exc:
            self.logger.warning("Bearer token rejected", error=str(exc))
            return None
