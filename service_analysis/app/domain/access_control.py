"""
Ownership-based access control for the composite read path.
"""

from typing import Optional

from shared.errors import AuthenticationError, AuthorizationError
from shared.logging import get_logger
from ..identity import RequestIdentity


class AccessPolicy:
    """Owner-or-admin policy applied at the edge handlers."""

    def __init__(self):
        self.logger = get_logger("analysis.access_control")

    def require_authenticated(self, identity: RequestIdentity) -> None:
        """Reject callers without a verifiable identity (401)."""
        if not identity.is_authenticated:
            raise AuthenticationError()

    def require_owner_or_admin(
        self,
        identity: RequestIdentity,
        owner_id: int,
        resource: str,
        resource_id: Optional[int] = None,
    ) -> None:
        """Reject authenticated callers that neither own the data nor are admins (403)."""
        self.require_authenticated(identity)

        if identity.can_access(owner_id):
            return

        self.logger.info(
            "Access denied by ownership policy",
            user_id=identity.user_id,
            owner_id=owner_id,
            resource=resource,
            resource_id=resource_id,
        )
        raise AuthorizationError(
            details={"resource": resource, "resource_id": resource_id}
            if resource_id is not None
            else {"resource": resource}
        )
