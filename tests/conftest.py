"""
Global pytest configuration and fixtures for the QA Manager API test suite.
"""

import os

# Set test environment variables before the application settings load
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only-32-chars"
os.environ["JWT_ALGORITHM"] = "HS256"

from typing import Any, Callable, Dict, Generator, Optional  # noqa: E402
from unittest.mock import AsyncMock, Mock  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from prisma import Prisma  # noqa: E402
from src.core.database import get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.shared.permissions.models import ProjectRole  # noqa: E402

# Import fixtures from fixture modules
from tests.fixtures.auth_fixtures import *  # noqa: F403, F401, E402
from tests.fixtures.data_fixtures import *  # noqa: F403, F401, E402


@pytest.fixture
def test_jwt_secret() -> str:
    """JWT secret for generating test tokens."""
    return "test-secret-key-for-testing-only-32-chars"


@pytest.fixture
def make_token(test_jwt_secret: str) -> Callable[..., str]:
    """Factory issuing signed access tokens with the given claims."""

    def _make_token(
        sub: Optional[str] = "user-1",
        global_roles: Optional[list] = None,
        organization_id: Optional[str] = None,
        organization_role: Optional[str] = None,
        **extra: Any,
    ) -> str:
        payload: Dict[str, Any] = {
            "email": f"{sub}@example.com",
            "global_roles": global_roles or [],
            **extra,
        }
        if sub is not None:
            payload["sub"] = sub
        if organization_id is not None:
            payload["organization_id"] = organization_id
        if organization_role is not None:
            payload["organization_role"] = organization_role
        return jwt.encode(payload, test_jwt_secret, algorithm="HS256")

    return _make_token


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> Callable[..., Dict[str, str]]:
    """Factory for Authorization headers carrying a signed token."""

    def _auth_headers(**claims: Any) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(**claims)}"}

    return _auth_headers


@pytest.fixture
def mock_prisma() -> Mock:
    """
    Mock Prisma client for unit tests that don't need real database.
    """
    mock_db = Mock(spec=Prisma)
    # Make async methods return AsyncMock
    mock_db.projectmember.find_unique = AsyncMock(return_value=None)
    mock_db.testrun.find_unique = AsyncMock(return_value=None)
    mock_db.testrun.delete = AsyncMock()
    mock_db.bug.find_unique = AsyncMock(return_value=None)
    mock_db.bug.find_many = AsyncMock(return_value=[])
    mock_db.bug.update = AsyncMock()
    mock_db.bug.delete = AsyncMock()

    return mock_db


@pytest.fixture
def client(mock_prisma: Mock) -> Generator[TestClient, None, None]:
    """FastAPI test client whose requests read from ``mock_prisma``."""
    app.dependency_overrides[get_db] = lambda: mock_prisma
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_resolver() -> Mock:
    """Membership resolver whose lookup is an AsyncMock (no membership)."""
    resolver = Mock()
    resolver.lookup = AsyncMock(return_value=None)
    return resolver


@pytest.fixture
def editor_resolver(mock_resolver: Mock) -> Mock:
    """Membership resolver reporting the editor role."""
    mock_resolver.lookup.return_value = ProjectRole.editor
    return mock_resolver
