from typing import List

from prisma import Prisma
from src.shared.permissions.dependencies import AuthContext
from src.shared.permissions.models import Permission
from src.shared.permissions.resources import require_run_permission

from .models import RunDeletedResponse, RunPermissionsResponse

# Permissions that act on a run or its contents
RUN_PERMISSIONS: List[Permission] = [
    Permission.TEST_RUN_LIST,
    Permission.TEST_RUN_UPDATE,
    Permission.TEST_RUN_DELETE,
    Permission.TEST_RUN_ITEM_LIST,
    Permission.TEST_RUN_ITEM_UPDATE,
    Permission.TEST_RUN_METRICS_VIEW,
    Permission.TEST_RUN_METRICS_UPDATE,
    Permission.ARTIFACT_LIST,
    Permission.ARTIFACT_UPLOAD,
    Permission.ARTIFACT_DELETE,
]


async def get_run_permissions(
    run_id: str, auth: AuthContext, db: Prisma
) -> RunPermissionsResponse:
    """
    Run-scoped permissions of the caller.

    Raises:
        ResourceNotFoundError: If the run does not exist
        ProjectAccessDeniedError: If the caller cannot list runs in its project
    """
    scope = await require_run_permission(run_id, Permission.TEST_RUN_LIST, auth, db)
    granted = [
        permission.value
        for permission in RUN_PERMISSIONS
        if await auth.can(permission, project_id=scope.project_id)
    ]
    return RunPermissionsResponse(
        run_id=run_id, project_id=scope.project_id, permissions=granted
    )


async def delete_run(run_id: str, auth: AuthContext, db: Prisma) -> RunDeletedResponse:
    """
    Delete a test run after checking ``test-run:delete`` in its project.

    Raises:
        ResourceNotFoundError: If the run does not exist
        ProjectAccessDeniedError: If the caller may not delete runs there
    """
    await require_run_permission(run_id, Permission.TEST_RUN_DELETE, auth, db)
    await db.testrun.delete(where={"id": run_id})
    return RunDeletedResponse(success=True, run_id=run_id)
