"""
Caller identity for role-gated operations.

Token issuance and verification happen elsewhere; this module only
consumes the resolved identity and role.
"""

from dataclasses import dataclass
from typing import Any, Optional

from jobboard_ats.core.exceptions import ForbiddenError, UnauthenticatedError
from jobboard_ats.utils.constants import UserRole


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as resolved by the authentication collaborator."""

    user_id: str
    role: UserRole

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", UserRole(self.role))

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff

    def owns(self, owner_id: Any) -> bool:
        """Check whether the caller is the given owner reference."""
        return owner_id is not None and str(owner_id) == self.user_id


@dataclass(frozen=True)
class RequestContext:
    """Best-effort request provenance captured for the audit trail."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Optional[dict[str, str]]) -> "RequestContext":
        """Build a context from request headers (case-insensitive)."""
        if not headers:
            return cls()
        lowered = {k.lower(): v for k, v in headers.items()}

        ip_address = None
        forwarded = lowered.get("x-forwarded-for")
        if forwarded:
            ip_address = forwarded.split(",")[0].strip() or None
        if ip_address is None:
            ip_address = lowered.get("x-real-ip") or None

        return cls(ip_address=ip_address, user_agent=lowered.get("user-agent") or None)


def require_identity(caller: Optional[CallerIdentity]) -> CallerIdentity:
    """Fail with Unauthenticated when no identity was resolved."""
    if caller is None or not caller.user_id:
        raise UnauthenticatedError()
    return caller


def require_role(caller: Optional[CallerIdentity], *roles: UserRole) -> CallerIdentity:
    """Fail unless the caller is authenticated and holds one of the roles."""
    caller = require_identity(caller)
    if caller.role not in roles:
        raise ForbiddenError()
    return caller
