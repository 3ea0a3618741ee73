from typing import List, Optional

from pydantic import BaseModel

from src.shared.permissions.models import ProjectRole


class ProjectPermissionsResponse(BaseModel):
    project_id: str
    project_role: Optional[ProjectRole] = None
    permissions: List[str]
