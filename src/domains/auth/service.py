from src.shared.permissions.services import visible_permissions

from .models import Identity, SessionState


def get_session_state(identity: Identity) -> SessionState:
    """
    Build the session packet sent to UI clients.

    ``visible_permissions`` comes from the synchronous checker, so it only
    reflects global and organization roles. It drives what the UI shows and
    is never used to authorize a request.
    """
    return SessionState(
        user_id=identity.user_id,
        user_email=identity.email,
        user_display_name=identity.name,
        global_roles=sorted(identity.global_roles, key=lambda role: role.value),
        organization_id=identity.organization_id,
        organization_role=identity.organization_role,
        visible_permissions=visible_permissions(
            identity.global_roles, identity.organization_role
        ),
    )
