# src/domains/auth/models.py
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.shared.permissions.models import GlobalRole, OrganizationRole


class Identity(BaseModel):
    """Authenticated caller as issued by the identity provider."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    global_roles: FrozenSet[GlobalRole] = Field(default_factory=frozenset)
    organization_id: Optional[str] = None
    organization_role: Optional[OrganizationRole] = None


class SessionState(BaseModel):
    user_id: str
    user_email: Optional[str] = None
    user_display_name: Optional[str] = None
    global_roles: List[GlobalRole]
    organization_id: Optional[str] = None
    organization_role: Optional[OrganizationRole] = None
    # UI hints only; every request is re-checked on the server
    visible_permissions: List[str]
