from fastapi import APIRouter, Depends

from src.domains.projects.models import ProjectPermissionsResponse
from src.domains.projects.service import get_project_permissions
from src.shared.permissions.dependencies import AuthContext, get_auth_context

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get(
    "/{project_id}/permissions",
    response_model=ProjectPermissionsResponse,
    operation_id="getProjectPermissions",
)
async def read_project_permissions(
    project_id: str,
    auth: AuthContext = Depends(get_auth_context),
) -> ProjectPermissionsResponse:
    """
    Permissions the caller holds in a project.

    UI clients use this for project-scoped show/hide decisions, which the
    session's visible permissions cannot express.
    """
    return await get_project_permissions(project_id, auth)
