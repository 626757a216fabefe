"""
Request-scoped caller identity.
"""

from dataclasses import dataclass

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class RequestIdentity:
    """Caller identity resolved for a single request.

    A ``user_id`` of 0 means nobody could be identified. Instances are
    immutable: the user context middleware builds one per request and
    handlers only ever read it.
    """

    user_id: int = 0
    email: str = ""
    display_name: str = ""
    role: str = ""
    source: str = "none"

    @property
    def is_authenticated(self) -> bool:
        return self.user_id != 0

    @property
    def is_admin(self) -> bool:
        return self.role.casefold() == ADMIN_ROLE

    def can_access(self, owner_id: int) -> bool:
        """True when the caller is an admin or owns the data."""
        return self.is_admin or self.user_id == owner_id


ANONYMOUS = RequestIdentity()
