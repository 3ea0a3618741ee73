import logging
from typing import Iterable, List, Optional

from src.core.settings import settings

from .exceptions import AuthorizationError
from .membership import MembershipResolver, resolve_project_role
from .models import (
    GlobalRole,
    OrganizationRole,
    Permission,
    PermissionAction,
    PolicyContext,
    ProjectRole,
    parse_permission,
)
from .role_permissions import (
    any_global_role_has_permission,
    organization_role_has_permission,
    permissions_for_roles,
    project_role_has_permission,
)

logger = logging.getLogger(__name__)

_NOT_LOOKED_UP = object()


def has_role_permission(
    permission: Permission,
    global_roles: Iterable[GlobalRole],
    organization_role: Optional[OrganizationRole] = None,
) -> bool:
    """
    Role-only part of the cascade: global roles first, then the org role.

    This never touches a store and is shared by ``can`` and ``can_sync``.
    """
    if any_global_role_has_permission(global_roles, permission):
        return True
    if organization_role is not None and organization_role_has_permission(
        organization_role, permission
    ):
        return True
    return False


async def can(
    permission: "Permission | str",
    context: PolicyContext,
    resolver: MembershipResolver,
) -> bool:
    """
    The single authorization decision point.

    Evaluation order:
    1. Global roles, without any lookup
    2. Organization role
    3. Project role, when ``context.project_id`` is set
    4. Ownership: the resource owner may update it while holding any
       project role
    5. Deny

    Args:
        permission: Permission (or its wire identifier) being requested
        context: Caller and target description
        resolver: Membership store consulted for project roles

    Returns:
        True if allowed, False otherwise

    Raises:
        UnknownPermissionError: If ``permission`` is not a registered identifier
        MembershipLookupError: If the project role could not be determined
    """
    permission = parse_permission(permission)

    if has_role_permission(
        permission, context.global_roles, context.organization_role
    ):
        return True

    project_role: object = _NOT_LOOKED_UP

    async def lookup() -> Optional[ProjectRole]:
        nonlocal project_role
        if project_role is _NOT_LOOKED_UP:
            project_role = await resolve_project_role(
                resolver,
                context.project_id,
                context.user_id,
                timeout=settings.MEMBERSHIP_LOOKUP_TIMEOUT,
            )
        return project_role  # type: ignore[return-value]

    if context.project_id is not None:
        role = await lookup()
        if role is not None and project_role_has_permission(role, permission):
            return True

    if (
        permission.action is PermissionAction.UPDATE
        and context.owns_resource
        and context.project_id is not None
    ):
        if await lookup() is not None:
            return True

    logger.debug("Denied %s for user %s", permission.value, context.user_id)
    return False


async def require(
    permission: "Permission | str",
    context: PolicyContext,
    resolver: MembershipResolver,
) -> None:
    """
    Same as ``can`` but raises when denied.

    Raises:
        AuthorizationError: If the permission is denied (status 403)
        MembershipLookupError: If the project role could not be determined
    """
    permission = parse_permission(permission)
    if not await can(permission, context, resolver):
        raise AuthorizationError(permission)


def can_sync(
    permission: "Permission | str",
    global_roles: Iterable[GlobalRole],
    organization_role: Optional[OrganizationRole] = None,
) -> bool:
    """
    Synchronous check using only global roles and the organization role.

    Meant for UI show/hide decisions. It cannot see project roles or the
    ownership rule, so its answer is not authoritative in either direction
    and must never be used as a security boundary; the server always
    re-checks with ``can``.
    """
    return has_role_permission(
        parse_permission(permission), global_roles, organization_role
    )


def visible_permissions(
    global_roles: Iterable[GlobalRole],
    organization_role: Optional[OrganizationRole] = None,
) -> List[str]:
    """Sorted identifiers ``can_sync`` reports as granted, for UI clients."""
    granted = permissions_for_roles(global_roles, organization_role)
    return sorted(permission.value for permission in granted)
