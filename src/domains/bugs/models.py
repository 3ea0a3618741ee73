# src/domains/bugs/models.py
from datetime import datetime
from typing import List, Optional

from prisma.enums import BugSeverity, BugStatus
from prisma.models import Bug
from pydantic import BaseModel, Field


class BugResponse(BaseModel):
    """Response model for bug data"""

    id: str
    projectId: str
    title: str
    description: Optional[str] = None
    status: BugStatus
    severity: BugSeverity
    reporterId: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_prisma(cls, bug: Bug) -> "BugResponse":
        return cls(
            id=bug.id,
            projectId=bug.projectId,
            title=bug.title,
            description=bug.description,
            status=bug.status,
            severity=bug.severity,
            reporterId=bug.reporterId,
            createdAt=bug.createdAt,
            updatedAt=bug.updatedAt,
        )


class BugListResponse(BaseModel):
    items: List[BugResponse]


class BugUpdateRequest(BaseModel):
    """Fields a caller may change on a bug; anything else is rejected"""

    model_config = {"extra": "forbid"}

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[BugStatus] = None
    severity: Optional[BugSeverity] = None


class BugDeletedResponse(BaseModel):
    ok: bool
