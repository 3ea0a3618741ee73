"""
Shared permission system for role-based access control.

Permissions are granted through three independent axes (global roles,
the active organization role and the project role) plus a narrow ownership
rule, evaluated in that order by ``can``.

The package root exposes the decision engine only. FastAPI guards live in
``.dependencies`` and ``.resources``, which depend on the auth domain.

Usage:
    from src.shared.permissions import Permission
    from src.shared.permissions.dependencies import require_permission, with_auth
    from src.shared.permissions.resources import require_run_permission

    @router.get("/organizations/{org_id}/members")
    async def list_members(
        auth: AuthContext = Depends(require_permission(Permission.ORG_MEMBER_LIST)),
    ):
        pass

    async def delete_run(request, auth, params):
        await require_run_permission(
            params["run_id"], Permission.TEST_RUN_DELETE, auth, db
        )
        ...

    router.add_api_route(
        "/test-runs/{run_id}", with_auth(None, delete_run), methods=["DELETE"]
    )
"""

from .exceptions import (
    AuthorizationError,
    MembershipLookupError,
    RolePermissionTableError,
    UnknownPermissionError,
)
from .membership import CachedMembershipResolver, MembershipResolver
from .models import (
    ALL_PERMISSIONS,
    READ_ONLY_PERMISSIONS,
    GlobalRole,
    OrganizationRole,
    Permission,
    PermissionAction,
    PolicyContext,
    ProjectRole,
    parse_permission,
)
from .role_permissions import (
    GLOBAL_ROLE_PERMISSIONS,
    ORGANIZATION_ROLE_PERMISSIONS,
    PROJECT_ROLE_PERMISSIONS,
)
from .services import can, can_sync, has_role_permission, require

__all__ = [
    "ALL_PERMISSIONS",
    "GLOBAL_ROLE_PERMISSIONS",
    "ORGANIZATION_ROLE_PERMISSIONS",
    "PROJECT_ROLE_PERMISSIONS",
    "READ_ONLY_PERMISSIONS",
    "AuthorizationError",
    "CachedMembershipResolver",
    "GlobalRole",
    "MembershipLookupError",
    "MembershipResolver",
    "OrganizationRole",
    "Permission",
    "PermissionAction",
    "PolicyContext",
    "ProjectRole",
    "RolePermissionTableError",
    "UnknownPermissionError",
    "can",
    "can_sync",
    "has_role_permission",
    "parse_permission",
    "require",
]
