from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional

from .exceptions import RolePermissionTableError
from .models import (
    ALL_PERMISSIONS,
    PLATFORM_ONLY_PERMISSIONS,
    READ_ONLY_PERMISSIONS,
    GlobalRole,
    OrganizationRole,
    Permission,
    ProjectRole,
)

# ---------------------------------------------------------------------------
# Global roles
# ---------------------------------------------------------------------------

GLOBAL_ROLE_PERMISSIONS: Mapping[GlobalRole, FrozenSet[Permission]] = MappingProxyType(
    {
        # Super admins have every permission
        GlobalRole.super_admin: ALL_PERMISSIONS,
        # Support and auditors are read-only across the platform
        GlobalRole.support: READ_ONLY_PERMISSIONS,
        GlobalRole.auditor: READ_ONLY_PERMISSIONS,
    }
)

# ---------------------------------------------------------------------------
# Project roles (viewer < editor < admin)
# ---------------------------------------------------------------------------

PROJECT_VIEWER_PERMISSIONS: FrozenSet[Permission] = frozenset(
    {
        Permission.PROJECT_LIST,
        Permission.TEST_PLAN_LIST,
        Permission.TEST_SUITE_LIST,
        Permission.TEST_CASE_LIST,
        Permission.TEST_RUN_LIST,
        Permission.TEST_RUN_ITEM_LIST,
        Permission.TEST_RUN_METRICS_VIEW,
        Permission.ARTIFACT_LIST,
    }
)

PROJECT_EDITOR_PERMISSIONS: FrozenSet[Permission] = PROJECT_VIEWER_PERMISSIONS | {
    Permission.PROJECT_UPDATE,
    Permission.TEST_PLAN_CREATE,
    Permission.TEST_PLAN_UPDATE,
    Permission.TEST_SUITE_CREATE,
    Permission.TEST_SUITE_UPDATE,
    Permission.TEST_CASE_CREATE,
    Permission.TEST_CASE_UPDATE,
    Permission.TEST_RUN_CREATE,
    Permission.TEST_RUN_UPDATE,
    Permission.TEST_RUN_ITEM_UPDATE,
    Permission.TEST_RUN_METRICS_UPDATE,
    Permission.ARTIFACT_UPLOAD,
}

PROJECT_ADMIN_PERMISSIONS: FrozenSet[Permission] = PROJECT_EDITOR_PERMISSIONS | {
    Permission.PROJECT_DELETE,
    Permission.TEST_PLAN_DELETE,
    Permission.TEST_SUITE_DELETE,
    Permission.TEST_CASE_DELETE,
    Permission.TEST_RUN_DELETE,
    Permission.ARTIFACT_DELETE,
}

PROJECT_ROLE_PERMISSIONS: Mapping[ProjectRole, FrozenSet[Permission]] = (
    MappingProxyType(
        {
            ProjectRole.viewer: PROJECT_VIEWER_PERMISSIONS,
            ProjectRole.editor: PROJECT_EDITOR_PERMISSIONS,
            ProjectRole.admin: PROJECT_ADMIN_PERMISSIONS,
        }
    )
)

# ---------------------------------------------------------------------------
# Organization roles (independent of the global and project axes)
# ---------------------------------------------------------------------------

# Everything an organization manages inside its projects
ORGANIZATION_CONTENT_PERMISSIONS: FrozenSet[Permission] = PROJECT_ADMIN_PERMISSIONS | {
    Permission.PROJECT_CREATE,
    Permission.BUG_LIST,
    Permission.BUG_CREATE,
    Permission.BUG_UPDATE,
    Permission.BUG_DELETE,
    Permission.BUG_COMMENT_CREATE,
    Permission.BUG_COMMENT_DELETE,
}

ORGANIZATION_ROLE_PERMISSIONS: Mapping[OrganizationRole, FrozenSet[Permission]] = (
    MappingProxyType(
        {
            # Owners get everything except platform-only user creation
            OrganizationRole.owner: ALL_PERMISSIONS - PLATFORM_ONLY_PERMISSIONS,
            OrganizationRole.admin: ORGANIZATION_CONTENT_PERMISSIONS
            | {
                Permission.ORG_LIST,
                Permission.ORG_UPDATE,
                Permission.ORG_MEMBER_LIST,
                Permission.ORG_MEMBER_MANAGE,
                Permission.USER_LIST,
            },
            OrganizationRole.member: (
                ORGANIZATION_CONTENT_PERMISSIONS & READ_ONLY_PERMISSIONS
            )
            | {
                Permission.BUG_CREATE,
                Permission.BUG_COMMENT_CREATE,
                Permission.ORG_LIST,
                Permission.ORG_MEMBER_LIST,
            },
            OrganizationRole.billing: frozenset(
                {
                    Permission.ORG_LIST,
                    Permission.ORG_UPDATE,
                    Permission.ORG_MEMBER_LIST,
                }
            ),
        }
    )
)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def global_role_has_permission(role: GlobalRole, permission: Permission) -> bool:
    """Check if a global role grants a specific permission."""
    return permission in GLOBAL_ROLE_PERMISSIONS.get(role, frozenset())


def any_global_role_has_permission(
    roles: Iterable[GlobalRole], permission: Permission
) -> bool:
    """Check if any of the given global roles grants a specific permission."""
    return any(global_role_has_permission(role, permission) for role in roles)


def organization_role_has_permission(
    role: OrganizationRole, permission: Permission
) -> bool:
    """Check if an organization role grants a specific permission."""
    return permission in ORGANIZATION_ROLE_PERMISSIONS.get(role, frozenset())


def project_role_has_permission(role: ProjectRole, permission: Permission) -> bool:
    """Check if a project role grants a specific permission."""
    return permission in PROJECT_ROLE_PERMISSIONS.get(role, frozenset())


def permissions_for_roles(
    global_roles: Iterable[GlobalRole] = (),
    organization_role: Optional[OrganizationRole] = None,
    project_role: Optional[ProjectRole] = None,
) -> FrozenSet[Permission]:
    """Union of everything the given roles grant across all three axes."""
    granted: set[Permission] = set()
    for role in global_roles:
        granted |= GLOBAL_ROLE_PERMISSIONS.get(role, frozenset())
    if organization_role is not None:
        granted |= ORGANIZATION_ROLE_PERMISSIONS.get(organization_role, frozenset())
    if project_role is not None:
        granted |= PROJECT_ROLE_PERMISSIONS.get(project_role, frozenset())
    return frozenset(granted)


def validate_role_tables() -> None:
    """
    Verify the role tables against the registry.

    Raises:
        RolePermissionTableError: If a table references something outside the
            registry, a role has no table, or the project hierarchy is broken
    """
    tables = {
        "global": (GlobalRole, GLOBAL_ROLE_PERMISSIONS),
        "organization": (OrganizationRole, ORGANIZATION_ROLE_PERMISSIONS),
        "project": (ProjectRole, PROJECT_ROLE_PERMISSIONS),
    }
    for scope, (role_enum, table) in tables.items():
        for role in role_enum:
            if role not in table:
                raise RolePermissionTableError(f"{scope} role {role.value} has no table")
        for role, permissions in table.items():
            unknown = [p for p in permissions if not isinstance(p, Permission)]
            if unknown:
                raise RolePermissionTableError(
                    f"{scope} role {role.value} references unknown permissions: "
                    f"{unknown}"
                )

    ordered = [ProjectRole.viewer, ProjectRole.editor, ProjectRole.admin]
    for lower, higher in zip(ordered, ordered[1:]):
        if not PROJECT_ROLE_PERMISSIONS[lower] <= PROJECT_ROLE_PERMISSIONS[higher]:
            raise RolePermissionTableError(
                f"project role {higher.value} must include every permission "
                f"of {lower.value}"
            )

    owner = ORGANIZATION_ROLE_PERMISSIONS[OrganizationRole.owner]
    if owner & PLATFORM_ONLY_PERMISSIONS:
        raise RolePermissionTableError("organization owner holds platform-only permissions")


validate_role_tables()
