from typing import Any, Dict

from pydantic import ValidationError

from prisma import Prisma
from src.shared.exceptions import InvalidDataError
from src.shared.permissions.dependencies import AuthContext
from src.shared.permissions.models import Permission
from src.shared.permissions.resources import require_bug_permission

from .models import BugDeletedResponse, BugListResponse, BugResponse, BugUpdateRequest


async def list_bugs(auth: AuthContext, db: Prisma) -> BugListResponse:
    """
    Bugs visible to the caller.

    Scoped to the caller's active organization. Callers without one are not
    tenant-filtered; the route only admits them through ``bug:list``, which
    they can hold solely through a global role.
    """
    organization_id = auth.identity.organization_id
    where: Dict[str, Any] = {}
    if organization_id:
        where["project"] = {"is": {"organizationId": organization_id}}

    bugs = await db.bug.find_many(where=where, order={"createdAt": "desc"})
    return BugListResponse(items=[BugResponse.from_prisma(bug) for bug in bugs])


async def update_bug(
    bug_id: str, payload: Dict[str, Any], db: Prisma
) -> BugResponse:
    """
    Validate and apply an update to a bug.

    The caller must already have passed ``require_bug_permission`` for
    ``bug:update``, so a missing or forbidden bug never reaches validation.

    Raises:
        InvalidDataError: If the payload is invalid
    """
    try:
        update = BugUpdateRequest(**payload)
    except ValidationError as e:
        raise InvalidDataError(f"Invalid bug update: {e.errors()[0]['msg']}")

    data = update.model_dump(exclude_unset=True)
    if "title" in data:
        data["title"] = (data["title"] or "").strip()
        if not data["title"]:
            raise InvalidDataError("Title cannot be empty.")
    if "description" in data:
        data["description"] = (data["description"] or "").strip() or None

    bug = await db.bug.update(where={"id": bug_id}, data=data)
    return BugResponse.from_prisma(bug)


async def delete_bug(bug_id: str, auth: AuthContext, db: Prisma) -> BugDeletedResponse:
    """
    Delete a bug; requires ``bug:delete`` in its project.

    Raises:
        ResourceNotFoundError: If the bug does not exist
        ProjectAccessDeniedError: If the caller may not delete it
    """
    await require_bug_permission(bug_id, Permission.BUG_DELETE, auth, db)
    await db.bug.delete(where={"id": bug_id})
    return BugDeletedResponse(ok=True)
