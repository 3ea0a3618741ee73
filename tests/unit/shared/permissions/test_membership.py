"""
Tests for project membership resolution.
"""

import asyncio
from typing import Callable
from unittest.mock import AsyncMock, Mock

import pytest

from src.shared.permissions.exceptions import MembershipLookupError
from src.shared.permissions.membership import (
    CachedMembershipResolver,
    DatabaseMembershipResolver,
    resolve_project_role,
)
from src.shared.permissions.models import ProjectRole


class TestDatabaseMembershipResolver:
    """Test lookups against the ProjectMember table"""

    @pytest.mark.asyncio
    async def test_member_role(
        self, mock_prisma: Mock, add_member: Callable[[str, str, str], Mock]
    ) -> None:
        add_member("p1", "u1", "editor")

        role = await DatabaseMembershipResolver(mock_prisma).lookup("p1", "u1")

        assert role is ProjectRole.editor
        mock_prisma.projectmember.find_unique.assert_awaited_once_with(
            where={"projectId_userId": {"projectId": "p1", "userId": "u1"}}
        )

    @pytest.mark.asyncio
    async def test_non_member_is_none(
        self, mock_prisma: Mock, add_member: Callable[[str, str, str], Mock]
    ) -> None:
        add_member("p1", "u1", "admin")

        resolver = DatabaseMembershipResolver(mock_prisma)

        assert await resolver.lookup("p1", "u2") is None
        assert await resolver.lookup("p2", "u1") is None

    @pytest.mark.asyncio
    async def test_unknown_stored_role_raises(self, mock_prisma: Mock) -> None:
        mock_prisma.projectmember.find_unique.return_value = Mock(role="owner")

        with pytest.raises(ValueError):
            await DatabaseMembershipResolver(mock_prisma).lookup("p1", "u1")

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, mock_prisma: Mock) -> None:
        mock_prisma.projectmember.find_unique.side_effect = ConnectionError("down")

        with pytest.raises(ConnectionError):
            await DatabaseMembershipResolver(mock_prisma).lookup("p1", "u1")


class TestCachedMembershipResolver:
    """Test per-request memoization"""

    @pytest.mark.asyncio
    async def test_repeated_lookup_hits_store_once(self, editor_resolver: Mock) -> None:
        cached = CachedMembershipResolver(editor_resolver)

        assert await cached.lookup("p1", "u1") is ProjectRole.editor
        assert await cached.lookup("p1", "u1") is ProjectRole.editor

        editor_resolver.lookup.assert_awaited_once_with("p1", "u1")

    @pytest.mark.asyncio
    async def test_non_membership_is_cached(self, mock_resolver: Mock) -> None:
        cached = CachedMembershipResolver(mock_resolver)

        assert await cached.lookup("p1", "u1") is None
        assert await cached.lookup("p1", "u1") is None

        assert mock_resolver.lookup.await_count == 1

    @pytest.mark.asyncio
    async def test_distinct_keys_are_separate(self, mock_resolver: Mock) -> None:
        cached = CachedMembershipResolver(mock_resolver)

        await cached.lookup("p1", "u1")
        await cached.lookup("p2", "u1")

        assert mock_resolver.lookup.await_count == 2

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self) -> None:
        resolver = Mock()
        resolver.lookup = AsyncMock(
            side_effect=[ConnectionError("down"), ProjectRole.viewer]
        )
        cached = CachedMembershipResolver(resolver)

        with pytest.raises(ConnectionError):
            await cached.lookup("p1", "u1")
        assert await cached.lookup("p1", "u1") is ProjectRole.viewer


class TestResolveProjectRole:
    """Test timeout and error translation"""

    @pytest.mark.asyncio
    async def test_returns_role(self, editor_resolver: Mock) -> None:
        role = await resolve_project_role(editor_resolver, "p1", "u1", timeout=1.0)

        assert role is ProjectRole.editor

    @pytest.mark.asyncio
    async def test_timeout_becomes_lookup_error(self) -> None:
        async def slow_lookup(project_id: str, user_id: str) -> ProjectRole:
            await asyncio.sleep(1)
            return ProjectRole.viewer

        resolver = Mock()
        resolver.lookup = slow_lookup

        with pytest.raises(MembershipLookupError) as exc_info:
            await resolve_project_role(resolver, "p1", "u1", timeout=0.01)

        assert exc_info.value.reason == "timed out"
        assert exc_info.value.user_id == "u1"

    @pytest.mark.asyncio
    async def test_store_error_becomes_lookup_error(self) -> None:
        resolver = Mock()
        resolver.lookup = AsyncMock(side_effect=OSError("connection reset"))

        with pytest.raises(MembershipLookupError) as exc_info:
            await resolve_project_role(resolver, "p1", "u1")

        assert exc_info.value.reason == "connection reset"
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_lookup_error_passes_through(self) -> None:
        original = MembershipLookupError("p1", "u1", "replica lag")
        resolver = Mock()
        resolver.lookup = AsyncMock(side_effect=original)

        with pytest.raises(MembershipLookupError) as exc_info:
            await resolve_project_role(resolver, "p1", "u1")

        assert exc_info.value is original

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        resolver = Mock()
        resolver.lookup = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await resolve_project_role(resolver, "p1", "u1")
