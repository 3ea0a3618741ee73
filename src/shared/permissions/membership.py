"""
Project membership lookups used by the decision engine.

The engine only depends on the ``MembershipResolver`` protocol. A resolver
returns ``None`` for a user who is simply not a member and raises for
infrastructure failures, which the engine reports as MembershipLookupError.
"""

import asyncio
import logging
from typing import Dict, Optional, Protocol, Tuple

from prisma import Prisma

from .exceptions import MembershipLookupError
from .models import ProjectRole

logger = logging.getLogger(__name__)


class MembershipResolver(Protocol):
    async def lookup(self, project_id: str, user_id: str) -> Optional[ProjectRole]:
        ...


class DatabaseMembershipResolver:
    """Resolves project roles from the ProjectMember table."""

    def __init__(self, db: Prisma):
        self.db = db

    async def lookup(self, project_id: str, user_id: str) -> Optional[ProjectRole]:
        membership = await self.db.projectmember.find_unique(
            where={"projectId_userId": {"projectId": project_id, "userId": user_id}}
        )
        if membership is None:
            return None
        return ProjectRole(membership.role)


class CachedMembershipResolver:
    """
    Memoizes lookups for the lifetime of one request.

    Failed lookups are not cached, so a retry within the same request reaches
    the underlying store again.
    """

    def __init__(self, resolver: MembershipResolver):
        self.resolver = resolver
        self._cache: Dict[Tuple[str, str], Optional[ProjectRole]] = {}

    async def lookup(self, project_id: str, user_id: str) -> Optional[ProjectRole]:
        key = (project_id, user_id)
        if key not in self._cache:
            self._cache[key] = await self.resolver.lookup(project_id, user_id)
        return self._cache[key]


async def resolve_project_role(
    resolver: MembershipResolver,
    project_id: str,
    user_id: str,
    timeout: Optional[float] = None,
) -> Optional[ProjectRole]:
    """
    Look up the project role of a user, bounded by ``timeout`` seconds.

    Args:
        resolver: Membership store to query
        project_id: Project being accessed
        user_id: User whose membership is checked
        timeout: Maximum seconds to wait, or None to wait indefinitely

    Returns:
        The user's ProjectRole, or None if the user is not a member

    Raises:
        MembershipLookupError: If the lookup timed out or the store failed
    """
    try:
        return await asyncio.wait_for(
            resolver.lookup(project_id, user_id), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        logger.error(
            "Membership lookup timed out after %ss for project %s", timeout, project_id
        )
        raise MembershipLookupError(project_id, user_id, "timed out") from e
    except MembershipLookupError:
        raise
    except Exception as e:
        logger.exception("Membership lookup failed for project %s", project_id)
        raise MembershipLookupError(project_id, user_id, str(e)) from e
