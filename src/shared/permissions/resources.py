"""
Resolve a permission's project scope from a domain resource.

A route that acts on a single resource (a test run, a bug, ...) first loads
just enough of it to learn the owning project, then asks the decision engine
with that project filled in. Existence is checked before authorization so a
missing resource is always a 404, never a 403.
"""

import logging
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict

from prisma import Prisma
from src.shared.exceptions import ProjectAccessDeniedError, ResourceNotFoundError

from .dependencies import AuthContext
from .models import Permission

logger = logging.getLogger(__name__)


class ResourceScope(BaseModel):
    """Where a resource lives and who owns it."""

    model_config = ConfigDict(frozen=True)

    resource_id: str
    project_id: str
    organization_id: Optional[str] = None
    owner_id: Optional[str] = None


class ResourceStore(Protocol):
    async def resolve_scope(self, resource_id: str) -> Optional[ResourceScope]:
        ...


class RunStore:
    """Resolves test runs to their owning project."""

    def __init__(self, db: Prisma):
        self.db = db

    async def resolve_scope(self, resource_id: str) -> Optional[ResourceScope]:
        run = await self.db.testrun.find_unique(
            where={"id": resource_id}, include={"project": True}
        )
        if run is None:
            return None
        return ResourceScope(
            resource_id=run.id,
            project_id=run.projectId,
            organization_id=run.project.organizationId if run.project else None,
            owner_id=run.createdById,
        )


class BugStore:
    """Resolves bugs to their owning project; the reporter owns the bug."""

    def __init__(self, db: Prisma):
        self.db = db

    async def resolve_scope(self, resource_id: str) -> Optional[ResourceScope]:
        bug = await self.db.bug.find_unique(
            where={"id": resource_id}, include={"project": True}
        )
        if bug is None:
            return None
        return ResourceScope(
            resource_id=bug.id,
            project_id=bug.projectId,
            organization_id=bug.project.organizationId if bug.project else None,
            owner_id=bug.reporterId,
        )


class ResourceScopeResolver:
    """
    Checks a permission against the project that owns a resource.

    Args:
        store: Lookup from resource id to ResourceScope
        not_found_message: Message of the 404 raised for missing resources
        apply_ownership: Pass the resource owner to the decision engine so
            the creator-may-update rule can apply
    """

    def __init__(
        self,
        store: ResourceStore,
        not_found_message: str = "Resource not found",
        apply_ownership: bool = True,
    ):
        self.store = store
        self.not_found_message = not_found_message
        self.apply_ownership = apply_ownership

    async def resolve(
        self, resource_id: str, permission: Permission, auth: AuthContext
    ) -> ResourceScope:
        """
        Load the resource scope and require ``permission`` inside its project.

        Returns:
            The resolved ResourceScope

        Raises:
            ResourceNotFoundError: If the resource does not exist, or belongs
                to an organization other than the caller's active one
            ProjectAccessDeniedError: If the permission is denied
            MembershipLookupError: If the project role could not be determined
        """
        scope = await self.store.resolve_scope(resource_id)
        if scope is None:
            raise ResourceNotFoundError(self.not_found_message)

        active_org = auth.identity.organization_id
        if active_org and scope.organization_id and scope.organization_id != active_org:
            raise ResourceNotFoundError(self.not_found_message)

        owner_id = scope.owner_id if self.apply_ownership else None
        allowed = await auth.can(
            permission, project_id=scope.project_id, resource_owner_id=owner_id
        )
        if not allowed:
            logger.info(
                "Denied %s on %s for user %s",
                permission.value,
                resource_id,
                auth.user_id,
            )
            raise ProjectAccessDeniedError()
        return scope


async def require_run_permission(
    run_id: str, permission: Permission, auth: AuthContext, db: Prisma
) -> ResourceScope:
    """Resolve a test run's project and require ``permission`` there."""
    resolver = ResourceScopeResolver(
        RunStore(db), "Test run not found", apply_ownership=False
    )
    return await resolver.resolve(run_id, permission, auth)


async def require_bug_permission(
    bug_id: str, permission: Permission, auth: AuthContext, db: Prisma
) -> ResourceScope:
    """Resolve a bug's project and require ``permission`` there."""
    resolver = ResourceScopeResolver(BugStore(db), "Bug not found")
    return await resolver.resolve(bug_id, permission, auth)
