import logging
from typing import Awaitable, Callable, Dict, Optional

from fastapi import Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from prisma import Prisma
from src.core.database import get_db
from src.domains.auth.dependencies import get_optional_identity
from src.domains.auth.models import Identity
from src.shared.exceptions import (
    NotAuthenticatedError,
    NotAuthorizedError,
    ServiceUnavailableError,
)

from .exceptions import AuthorizationError, MembershipLookupError
from .membership import (
    CachedMembershipResolver,
    DatabaseMembershipResolver,
    MembershipResolver,
)
from .models import Permission, PolicyContext
from .services import can, require

logger = logging.getLogger(__name__)


class AuthContext(BaseModel):
    """
    Authenticated caller plus the per-request collaborators.

    ``db`` is the client resolved through ``get_db`` for this request, so the
    membership lookups and any resource reads go to the same store.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    identity: Identity
    memberships: CachedMembershipResolver
    db: Prisma

    @property
    def user_id(self) -> str:
        return self.identity.user_id

    def policy(
        self,
        project_id: Optional[str] = None,
        resource_owner_id: Optional[str] = None,
    ) -> PolicyContext:
        """Build the PolicyContext for a decision on behalf of this caller."""
        return PolicyContext(
            user_id=self.identity.user_id,
            global_roles=self.identity.global_roles,
            organization_id=self.identity.organization_id,
            organization_role=self.identity.organization_role,
            project_id=project_id,
            resource_owner_id=resource_owner_id,
        )

    async def can(
        self,
        permission: Permission,
        project_id: Optional[str] = None,
        resource_owner_id: Optional[str] = None,
    ) -> bool:
        return await can(
            permission, self.policy(project_id, resource_owner_id), self.memberships
        )

    async def require(
        self,
        permission: Permission,
        project_id: Optional[str] = None,
        resource_owner_id: Optional[str] = None,
    ) -> None:
        await require(
            permission, self.policy(project_id, resource_owner_id), self.memberships
        )


async def get_membership_resolver(
    db: Prisma = Depends(get_db),
) -> MembershipResolver:
    """Membership store dependency; override to plug in another backend."""
    return DatabaseMembershipResolver(db)


def build_auth_context(
    identity: Identity, resolver: MembershipResolver, db: Prisma
) -> AuthContext:
    return AuthContext(
        identity=identity, memberships=CachedMembershipResolver(resolver), db=db
    )


async def get_auth_context(
    identity: Optional[Identity] = Depends(get_optional_identity),
    resolver: MembershipResolver = Depends(get_membership_resolver),
    db: Prisma = Depends(get_db),
) -> AuthContext:
    """
    Dependency resolving the authenticated caller.

    Raises:
        NotAuthenticatedError: If no valid identity was presented
    """
    if identity is None:
        raise NotAuthenticatedError()
    return build_auth_context(identity, resolver, db)


def require_permission(
    permission: Permission,
) -> Callable[..., Awaitable[AuthContext]]:
    """
    Dependency factory for organization/global scoped authorization.

    Creates a dependency that validates the current user holds the specified
    permission through a global or organization role. Project-scoped checks
    belong in the handler once the project is known.

    Args:
        permission: The permission required to access the endpoint

    Returns:
        Async dependency function that validates permission and returns the
        AuthContext
    """

    async def check_permission(
        auth: AuthContext = Depends(get_auth_context),
    ) -> AuthContext:
        try:
            await auth.require(permission)
        except AuthorizationError as e:
            raise NotAuthorizedError(e.message)
        except MembershipLookupError:
            logger.exception("Could not evaluate %s", permission.value)
            raise ServiceUnavailableError()
        return auth

    return check_permission


AuthenticatedHandler = Callable[
    [Request, AuthContext, Dict[str, str]], Awaitable[Response]
]


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def with_auth(
    permission: Optional[Permission], handler: AuthenticatedHandler
) -> Callable[..., Awaitable[Response]]:
    """
    Wraps a route handler with authentication and an optional permission check.

    The permission, if given, is evaluated from global and organization roles
    only. The handler receives ``(request, auth_context, route_params)`` and
    may itself call ``auth_context.require`` for project-scoped checks; any
    AuthorizationError it raises is turned into a 403 response as well.
    Handlers read the database through ``auth_context.db``, which comes from
    ``get_db`` and therefore honours dependency overrides.

    Example:
        router.add_api_route(
            "/bugs", with_auth(Permission.BUG_LIST, list_bugs), methods=["GET"]
        )
    """

    async def endpoint(
        request: Request,
        identity: Optional[Identity] = Depends(get_optional_identity),
        resolver: MembershipResolver = Depends(get_membership_resolver),
        db: Prisma = Depends(get_db),
    ) -> Response:
        if identity is None:
            return _message(status.HTTP_401_UNAUTHORIZED, NotAuthenticatedError.message)

        auth = build_auth_context(identity, resolver, db)
        try:
            if permission is not None:
                await auth.require(permission)
            return await handler(request, auth, dict(request.path_params))
        except AuthorizationError as e:
            return _message(e.status_code, e.message)
        except MembershipLookupError:
            logger.exception("Could not evaluate permissions for %s", request.url.path)
            return _message(
                ServiceUnavailableError.status_code, ServiceUnavailableError.message
            )

    endpoint.__name__ = getattr(handler, "__name__", "endpoint")
    endpoint.__doc__ = handler.__doc__
    return endpoint
