from enum import Enum, unique
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .exceptions import UnknownPermissionError


class PermissionAction(str, Enum):
    """Action half of a ``resource:action`` permission identifier."""

    LIST = "list"
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    UPLOAD = "upload"
    MANAGE = "manage"


READ_ACTIONS: FrozenSet[PermissionAction] = frozenset(
    {PermissionAction.LIST, PermissionAction.VIEW}
)


@unique
class Permission(str, Enum):
    """
    Defines all permissions available in the system.

    Values follow the pattern ``<resource>:<action>`` and are the stable wire
    format used in logs and error messages. Each member is split into its
    ``resource`` and typed ``action`` once, when the enum is created.
    """

    # Projects
    PROJECT_LIST = "project:list"
    PROJECT_CREATE = "project:create"
    PROJECT_UPDATE = "project:update"
    PROJECT_DELETE = "project:delete"

    # Test plans
    TEST_PLAN_LIST = "test-plan:list"
    TEST_PLAN_CREATE = "test-plan:create"
    TEST_PLAN_UPDATE = "test-plan:update"
    TEST_PLAN_DELETE = "test-plan:delete"

    # Test suites
    TEST_SUITE_LIST = "test-suite:list"
    TEST_SUITE_CREATE = "test-suite:create"
    TEST_SUITE_UPDATE = "test-suite:update"
    TEST_SUITE_DELETE = "test-suite:delete"

    # Test cases
    TEST_CASE_LIST = "test-case:list"
    TEST_CASE_CREATE = "test-case:create"
    TEST_CASE_UPDATE = "test-case:update"
    TEST_CASE_DELETE = "test-case:delete"

    # Test runs
    TEST_RUN_LIST = "test-run:list"
    TEST_RUN_CREATE = "test-run:create"
    TEST_RUN_UPDATE = "test-run:update"
    TEST_RUN_DELETE = "test-run:delete"

    # Test run items
    TEST_RUN_ITEM_LIST = "test-run-item:list"
    TEST_RUN_ITEM_UPDATE = "test-run-item:update"

    # Test run metrics
    TEST_RUN_METRICS_VIEW = "test-run-metrics:view"
    TEST_RUN_METRICS_UPDATE = "test-run-metrics:update"

    # Artifacts
    ARTIFACT_LIST = "artifact:list"
    ARTIFACT_UPLOAD = "artifact:upload"
    ARTIFACT_DELETE = "artifact:delete"

    # Users (platform administration)
    USER_LIST = "user:list"
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"

    # Bugs
    BUG_LIST = "bug:list"
    BUG_CREATE = "bug:create"
    BUG_UPDATE = "bug:update"
    BUG_DELETE = "bug:delete"
    BUG_COMMENT_CREATE = "bug-comment:create"
    BUG_COMMENT_DELETE = "bug-comment:delete"

    # Organizations
    ORG_LIST = "org:list"
    ORG_CREATE = "org:create"
    ORG_UPDATE = "org:update"
    ORG_DELETE = "org:delete"
    ORG_MEMBER_LIST = "org-member:list"
    ORG_MEMBER_MANAGE = "org-member:manage"

    def __init__(self, value: str) -> None:
        resource, _, action = value.partition(":")
        self.resource = resource
        self.action = PermissionAction(action)

    def __str__(self) -> str:
        return self.value


ALL_PERMISSIONS: FrozenSet[Permission] = frozenset(Permission)

# Permissions that only grant read/list access; used for the read-only roles.
READ_ONLY_PERMISSIONS: FrozenSet[Permission] = frozenset(
    {
        Permission.PROJECT_LIST,
        Permission.TEST_PLAN_LIST,
        Permission.TEST_SUITE_LIST,
        Permission.TEST_CASE_LIST,
        Permission.TEST_RUN_LIST,
        Permission.TEST_RUN_ITEM_LIST,
        Permission.TEST_RUN_METRICS_VIEW,
        Permission.ARTIFACT_LIST,
        Permission.BUG_LIST,
        Permission.USER_LIST,
    }
)

# Never granted through an organization role.
PLATFORM_ONLY_PERMISSIONS: FrozenSet[Permission] = frozenset({Permission.USER_CREATE})


def parse_permission(value: "str | Permission") -> Permission:
    """
    Resolve a wire identifier such as ``"test-run:delete"`` to a Permission.

    Raises:
        UnknownPermissionError: If the identifier is not in the registry
    """
    if isinstance(value, Permission):
        return value
    try:
        return Permission(value)
    except ValueError:
        raise UnknownPermissionError(value) from None


def validate_permission_registry() -> None:
    """
    Check the registry invariants: every identifier is ``resource:action``
    and the read-only subset contains only list/view actions.
    """
    for permission in Permission:
        if not permission.resource or permission.value.count(":") != 1:
            raise UnknownPermissionError(permission.value)
    for permission in READ_ONLY_PERMISSIONS:
        if permission.action not in READ_ACTIONS:
            raise UnknownPermissionError(permission.value)


class GlobalRole(str, Enum):
    """Platform-wide roles, independent of any organization or project."""

    super_admin = "super_admin"
    support = "support"
    auditor = "auditor"


class OrganizationRole(str, Enum):
    """Roles scoped to a single organization (tenant)."""

    owner = "owner"
    admin = "admin"
    member = "member"
    billing = "billing"


class ProjectRole(str, Enum):
    """Project membership roles, ordered viewer < editor < admin."""

    viewer = "viewer"
    editor = "editor"
    admin = "admin"


class PolicyContext(BaseModel):
    """Everything the decision engine knows about the caller and the target."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    global_roles: FrozenSet[GlobalRole] = Field(default_factory=frozenset)
    organization_id: Optional[str] = None
    organization_role: Optional[OrganizationRole] = None
    project_id: Optional[str] = None
    resource_owner_id: Optional[str] = None

    @model_validator(mode="after")
    def _organization_role_requires_organization(self) -> "PolicyContext":
        if self.organization_role is not None and self.organization_id is None:
            raise ValueError("organization_role requires organization_id")
        return self

    @property
    def owns_resource(self) -> bool:
        return (
            self.resource_owner_id is not None
            and self.resource_owner_id == self.user_id
        )


validate_permission_registry()
