"""
Fixtures wiring projects, runs and bugs into the mocked Prisma client.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from unittest.mock import Mock

import pytest
from prisma.enums import BugSeverity, BugStatus, MemberRole, TestRunStatus
from prisma.models import Bug, Project, ProjectMember, TestRun

from .auth_fixtures import TEST_ORGANIZATION_ID

OTHER_ORGANIZATION_ID = "9b1f4c33-0000-4a6e-8d2e-000000000002"

CREATED_AT = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


def make_project(project_id: str, organization_id: Optional[str]) -> Mock:
    project = Mock(spec=Project)
    project.id = project_id
    project.organizationId = organization_id
    return project


def make_run(
    run_id: str,
    project_id: str,
    organization_id: Optional[str],
    created_by_id: Optional[str] = None,
) -> Mock:
    """Mock TestRun row with its project included."""
    run = Mock(spec=TestRun)
    run.id = run_id
    run.projectId = project_id
    run.name = "Nightly regression"
    run.status = TestRunStatus.queued
    run.createdById = created_by_id
    run.createdAt = CREATED_AT
    run.updatedAt = CREATED_AT
    run.project = make_project(project_id, organization_id)
    return run


def make_bug(
    bug_id: str,
    project_id: str,
    organization_id: Optional[str],
    reporter_id: Optional[str] = None,
    title: str = "Login button misaligned",
) -> Mock:
    """Mock Bug row with its project included."""
    bug = Mock(spec=Bug)
    bug.id = bug_id
    bug.projectId = project_id
    bug.title = title
    bug.description = None
    bug.status = BugStatus.open
    bug.severity = BugSeverity.medium
    bug.reporterId = reporter_id
    bug.createdAt = CREATED_AT
    bug.updatedAt = CREATED_AT
    bug.project = make_project(project_id, organization_id)
    return bug


@pytest.fixture
def memberships(mock_prisma: Mock) -> Dict[tuple, Mock]:
    """ProjectMember rows served by ``projectmember.find_unique``."""
    rows: Dict[tuple, Mock] = {}

    def _find_unique(where: Dict[str, Any], **kwargs: Any) -> Optional[Mock]:
        key = where["projectId_userId"]
        return rows.get((key["projectId"], key["userId"]))

    mock_prisma.projectmember.find_unique.side_effect = _find_unique
    return rows


@pytest.fixture
def add_member(memberships: Dict[tuple, Mock]) -> Callable[[str, str, str], Mock]:
    """Add a project membership to the mocked database."""

    def _add_member(project_id: str, user_id: str, role: str) -> Mock:
        member = Mock(spec=ProjectMember)
        member.projectId = project_id
        member.userId = user_id
        member.role = MemberRole(role)
        memberships[(project_id, user_id)] = member
        return member

    return _add_member


@pytest.fixture
def runs(mock_prisma: Mock) -> Dict[str, Mock]:
    """TestRun rows served by ``testrun.find_unique`` and ``testrun.delete``."""
    rows: Dict[str, Mock] = {}

    def _find_unique(where: Dict[str, Any], **kwargs: Any) -> Optional[Mock]:
        return rows.get(where["id"])

    def _delete(where: Dict[str, Any], **kwargs: Any) -> Optional[Mock]:
        return rows.pop(where["id"], None)

    mock_prisma.testrun.find_unique.side_effect = _find_unique
    mock_prisma.testrun.delete.side_effect = _delete
    return rows


@pytest.fixture
def bugs(mock_prisma: Mock) -> Dict[str, Mock]:
    """Bug rows served by the ``bug`` actions of the mocked client."""
    rows: Dict[str, Mock] = {}

    def _find_unique(where: Dict[str, Any], **kwargs: Any) -> Optional[Mock]:
        return rows.get(where["id"])

    def _update(where: Dict[str, Any], data: Dict[str, Any], **kwargs: Any) -> Mock:
        bug = rows[where["id"]]
        for field, value in data.items():
            setattr(bug, field, value)
        return bug

    def _delete(where: Dict[str, Any], **kwargs: Any) -> Optional[Mock]:
        return rows.pop(where["id"], None)

    mock_prisma.bug.find_unique.side_effect = _find_unique
    mock_prisma.bug.update.side_effect = _update
    mock_prisma.bug.delete.side_effect = _delete
    return rows


@pytest.fixture
def seeded_run(runs: Dict[str, Mock]) -> Mock:
    """Test run in project p1 of the test organization."""
    run = make_run("run-1", "p1", TEST_ORGANIZATION_ID, created_by_id="user-1")
    runs[run.id] = run
    return run


@pytest.fixture
def seeded_bug(bugs: Dict[str, Mock]) -> Mock:
    """Bug in project p1 of the test organization, reported by user-1."""
    bug = make_bug("bug-1", "p1", TEST_ORGANIZATION_ID, reporter_id="user-1")
    bugs[bug.id] = bug
    return bug


@pytest.fixture
def foreign_bug(bugs: Dict[str, Mock]) -> Mock:
    """Bug belonging to another organization."""
    bug = make_bug(
        "bug-foreign",
        "p9",
        OTHER_ORGANIZATION_ID,
        reporter_id="someone-else",
        title="Crash on export",
    )
    bugs[bug.id] = bug
    return bug
