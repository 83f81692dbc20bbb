"""Tests for snapshot acquisition."""

from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest

from sweeper.backends.memory import InMemoryResourceStore
from sweeper.errors import SnapshotUnavailable
from sweeper.models.resource import Resource
from sweeper.planning.predicates import AttributeEquals
from sweeper.snapshot.capture import capture
from tests.fixtures.resources import browser_tabs


class TestCapture:
    """Test suite for capture()."""

    @pytest.mark.asyncio
    async def test_captures_in_enumeration_order(self) -> None:
        """Test snapshot preserves the source's order."""
        store = InMemoryResourceStore(browser_tabs())

        snapshot = await capture(store)

        assert snapshot.ids == ("t1", "t2", "t3", "t4", "t5", "t6")
        assert snapshot.scope is None

    @pytest.mark.asyncio
    async def test_scope_is_passed_to_source(self) -> None:
        """Test scope narrows enumeration."""
        store = InMemoryResourceStore(browser_tabs(), scope_attribute="window")

        snapshot = await capture(store, scope="2")

        assert snapshot.ids == ("t4", "t5", "t6")
        assert snapshot.scope == "2"

    @pytest.mark.asyncio
    async def test_enumeration_called_once(self) -> None:
        """Test the source is awaited exactly once and mappings are accepted."""
        source = Mock()
        source.list_resources = AsyncMock(return_value=[{"id": "a", "url": "u"}, Resource(id="b")])

        snapshot = await capture(source, scope="w")

        source.list_resources.assert_awaited_once_with("w")
        assert snapshot.ids == ("a", "b")

    @pytest.mark.asyncio
    async def test_resource_filter(self) -> None:
        """Test an optional filter narrows the captured resources."""
        store = InMemoryResourceStore(browser_tabs())

        snapshot = await capture(store, resource_filter=AttributeEquals("title", "News"))

        assert snapshot.ids == ("t2", "t6")

    @pytest.mark.asyncio
    async def test_snapshot_is_isolated_from_later_mutation(self) -> None:
        """Test removals after capture do not alter the snapshot."""
        store = InMemoryResourceStore(browser_tabs())
        snapshot = await capture(store)

        await store.remove_resource("t1")

        assert "t1" in snapshot
        assert len(snapshot) == 6

    @pytest.mark.asyncio
    async def test_enumeration_failure_is_fatal(self) -> None:
        """Test permission/transport errors raise SnapshotUnavailable."""
        source = Mock()
        source.list_resources = AsyncMock(side_effect=PermissionError("tabs permission denied"))

        with pytest.raises(SnapshotUnavailable, match="permission denied"):
            await capture(source)

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_fatal(self) -> None:
        """Test a source returning duplicate ids yields no snapshot."""
        source = Mock()
        source.list_resources = AsyncMock(return_value=[{"id": "a"}, {"id": "a"}])

        with pytest.raises(SnapshotUnavailable, match="Duplicate"):
            await capture(source)

    @pytest.mark.asyncio
    async def test_malformed_record_is_fatal(self) -> None:
        """Test records without ids yield no snapshot."""
        source = Mock()
        source.list_resources = AsyncMock(return_value=[{"url": "u"}])

        with pytest.raises(SnapshotUnavailable, match="Malformed"):
            await capture(source)

    @pytest.mark.asyncio
    async def test_failing_filter_is_fatal(self) -> None:
        """Test a filter error never produces a partial snapshot."""
        store = InMemoryResourceStore(browser_tabs())

        def broken(resource):
            raise RuntimeError("boom")

        with pytest.raises(SnapshotUnavailable, match="filter failed"):
            await capture(store, resource_filter=broken)
