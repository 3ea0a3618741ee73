from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.domains.bugs import service
from src.shared.exceptions import InvalidDataError
from src.shared.permissions import Permission
from src.shared.permissions.dependencies import AuthContext, with_auth
from src.shared.permissions.resources import require_bug_permission

router = APIRouter(prefix="/bugs", tags=["Bugs"])


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object or raise InvalidDataError."""
    try:
        payload = await request.json()
    except ValueError:
        # Covers malformed JSON and bodies that are not valid UTF-8
        raise InvalidDataError("Request body must be valid JSON")
    if not isinstance(payload, dict):
        raise InvalidDataError("Request body must be a JSON object")
    return payload


async def read_bugs(
    request: Request, auth: AuthContext, params: Dict[str, str]
) -> JSONResponse:
    """List bugs of the active organization. Requires bug:list."""
    result = await service.list_bugs(auth, auth.db)
    return JSONResponse(content=result.model_dump(mode="json"))


async def patch_bug(
    request: Request, auth: AuthContext, params: Dict[str, str]
) -> JSONResponse:
    """Update a bug. Requires bug:update in its project, or ownership."""
    bug_id = params["bug_id"]
    # 404 and 403 take precedence over anything wrong with the body
    await require_bug_permission(bug_id, Permission.BUG_UPDATE, auth, auth.db)

    payload = await read_json_object(request)
    result = await service.update_bug(bug_id, payload, auth.db)
    return JSONResponse(content=result.model_dump(mode="json"))


async def remove_bug(
    request: Request, auth: AuthContext, params: Dict[str, str]
) -> JSONResponse:
    """Delete a bug. Requires bug:delete in its project."""
    result = await service.delete_bug(params["bug_id"], auth, auth.db)
    return JSONResponse(content=result.model_dump(mode="json"))


router.add_api_route(
    "",
    with_auth(Permission.BUG_LIST, read_bugs),
    methods=["GET"],
    operation_id="listBugs",
)
router.add_api_route(
    "/{bug_id}",
    with_auth(None, patch_bug),
    methods=["PATCH"],
    operation_id="updateBug",
)
router.add_api_route(
    "/{bug_id}",
    with_auth(None, remove_bug),
    methods=["DELETE"],
    operation_id="deleteBug",
)
