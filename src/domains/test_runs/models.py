from typing import List

from pydantic import BaseModel


class RunPermissionsResponse(BaseModel):
    run_id: str
    project_id: str
    permissions: List[str]


class RunDeletedResponse(BaseModel):
    success: bool
    run_id: str
