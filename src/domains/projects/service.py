from src.core.settings import settings
from src.shared.exceptions import ProjectAccessDeniedError
from src.shared.permissions.dependencies import AuthContext
from src.shared.permissions.membership import resolve_project_role
from src.shared.permissions.models import Permission

from .models import ProjectPermissionsResponse


async def get_project_permissions(
    project_id: str, auth: AuthContext
) -> ProjectPermissionsResponse:
    """
    List every permission the caller holds inside a project.

    Each permission goes through the full decision engine; the membership
    lookup is shared through the request cache, so the store is queried once.

    Args:
        project_id: Project to evaluate
        auth: Authenticated caller

    Returns:
        ProjectPermissionsResponse with the caller's project role and grants

    Raises:
        ProjectAccessDeniedError: If the caller cannot even list the project
    """
    if not await auth.can(Permission.PROJECT_LIST, project_id=project_id):
        raise ProjectAccessDeniedError()

    project_role = await resolve_project_role(
        auth.memberships,
        project_id,
        auth.user_id,
        timeout=settings.MEMBERSHIP_LOOKUP_TIMEOUT,
    )
    granted = [
        permission.value
        for permission in Permission
        if await auth.can(permission, project_id=project_id)
    ]
    return ProjectPermissionsResponse(
        project_id=project_id,
        project_role=project_role,
        permissions=sorted(granted),
    )
