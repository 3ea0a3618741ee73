# src/domains/auth/routes.py
from fastapi import APIRouter, Depends

from src.domains.auth.dependencies import get_current_identity
from src.domains.auth.models import Identity, SessionState
from src.domains.auth.service import get_session_state

router = APIRouter(prefix="/session", tags=["Sessions"])


@router.get(
    "",
    response_model=SessionState,
    operation_id="getSessionState",
)
async def read_session_state(
    identity: Identity = Depends(get_current_identity),
) -> SessionState:
    return get_session_state(identity)
