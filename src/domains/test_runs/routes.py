from typing import Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.domains.test_runs.service import delete_run, get_run_permissions
from src.shared.permissions.dependencies import AuthContext, with_auth

router = APIRouter(prefix="/test-runs", tags=["Test Runs"])


async def read_run_permissions(
    request: Request, auth: AuthContext, params: Dict[str, str]
) -> JSONResponse:
    """Permissions the caller holds on a test run (404 before 403)."""
    result = await get_run_permissions(params["run_id"], auth, auth.db)
    return JSONResponse(content=result.model_dump(mode="json"))


async def remove_run(
    request: Request, auth: AuthContext, params: Dict[str, str]
) -> JSONResponse:
    """Delete a test run; requires test-run:delete in the run's project."""
    result = await delete_run(params["run_id"], auth, auth.db)
    return JSONResponse(content=result.model_dump(mode="json"))


router.add_api_route(
    "/{run_id}/permissions",
    with_auth(None, read_run_permissions),
    methods=["GET"],
    operation_id="getRunPermissions",
)
router.add_api_route(
    "/{run_id}",
    with_auth(None, remove_run),
    methods=["DELETE"],
    operation_id="deleteRun",
)
