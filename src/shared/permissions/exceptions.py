"""
Exceptions raised by the authorization engine.

Only AuthorizationError reaches request handling as a normal outcome. The
registry and table errors fire at import/test time, and MembershipLookupError
signals that a decision could not be made at all.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Permission


DEFAULT_DENIAL_MESSAGE = "You do not have permission to perform this action"


class AuthorizationError(Exception):
    """Raised by ``require`` when the decision engine denies a permission."""

    status_code = 403

    def __init__(self, permission: "Permission", message: str | None = None) -> None:
        self.permission = permission
        self.message = message or f"{DEFAULT_DENIAL_MESSAGE} ({permission.value})."
        super().__init__(self.message)


class MembershipLookupError(Exception):
    """Raised when the project role of a user could not be determined."""

    def __init__(self, project_id: str, user_id: str, reason: str) -> None:
        self.project_id = project_id
        self.user_id = user_id
        self.reason = reason
        super().__init__(
            f"Membership lookup failed for project {project_id}: {reason}"
        )


class UnknownPermissionError(ValueError):
    """Raised for permission identifiers outside the registry."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unknown permission identifier: {value!r}")


class RolePermissionTableError(RuntimeError):
    """Raised when a role table breaks a construction invariant."""
