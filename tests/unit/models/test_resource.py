"""Tests for Resource and Snapshot models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from sweeper.models.resource import Resource
from sweeper.models.snapshot import Snapshot


class TestResource:
    """Test suite for Resource model."""

    def test_from_dict_splits_id_and_attributes(self) -> None:
        """Test building a resource from a plain mapping."""
        resource = Resource.from_dict({"id": "tab-1", "url": "https://a/", "title": "A"})

        assert resource.id == "tab-1"
        assert resource.get("url") == "https://a/"
        assert resource["title"] == "A"
        assert "id" not in resource.attributes

    def test_from_dict_custom_id_field_and_numeric_id(self) -> None:
        """Test custom id field with a non-string identifier."""
        resource = Resource.from_dict({"tabId": 42, "url": "https://a/"}, id_field="tabId")

        assert resource.id == "42"

    def test_from_dict_missing_id_raises(self) -> None:
        """Test a record without an id is rejected."""
        with pytest.raises(ValueError, match="missing 'id'"):
            Resource.from_dict({"url": "https://a/"})

    def test_empty_id_raises(self) -> None:
        """Test empty identifiers are rejected."""
        with pytest.raises(ValueError):
            Resource(id="")

    def test_attributes_are_read_only(self) -> None:
        """Test the engine cannot mutate resource attributes."""
        source = {"url": "https://a/"}
        resource = Resource(id="r1", attributes=source)
        source["url"] = "https://changed/"

        assert resource.get("url") == "https://a/"
        with pytest.raises(TypeError):
            resource.attributes["url"] = "https://b/"  # type: ignore[index]

    def test_hash_uses_identity(self) -> None:
        """Test resources are hashable despite mapping attributes."""
        a = Resource(id="r1", attributes={"tags": {"x": "1"}})
        b = Resource(id="r1", attributes={"tags": {"x": "1"}})

        assert a == b
        assert len({a, b}) == 1

    def test_to_dict_round_trips_fields(self) -> None:
        """Test serialization keeps id and attributes."""
        resource = Resource(id="r1", attributes={"title": "T"})

        assert resource.to_dict() == {"id": "r1", "title": "T"}


class TestSnapshot:
    """Test suite for Snapshot model."""

    def test_preserves_order_and_exposes_ids(self) -> None:
        """Test snapshot keeps enumeration order."""
        snapshot = Snapshot.from_resources([{"id": "b"}, {"id": "a"}, {"id": "c"}], scope="w1")

        assert snapshot.ids == ("b", "a", "c")
        assert len(snapshot) == 3
        assert snapshot.scope == "w1"
        assert "a" in snapshot
        assert snapshot.get("c").id == "c"
        assert snapshot.get("zzz") is None

    def test_duplicate_ids_rejected(self) -> None:
        """Test ids must be unique within a snapshot."""
        with pytest.raises(ValueError, match="Duplicate resource id"):
            Snapshot(resources=(Resource(id="x"), Resource(id="x")))

    def test_snapshot_is_immutable(self) -> None:
        """Test snapshot fields cannot be reassigned."""
        snapshot = Snapshot(resources=[Resource(id="x")])

        assert isinstance(snapshot.resources, tuple)
        with pytest.raises(AttributeError):
            snapshot.scope = "other"  # type: ignore[misc]

    def test_to_dict(self) -> None:
        """Test snapshot serialization."""
        captured_at = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
        snapshot = Snapshot(resources=(Resource(id="x", attributes={"url": "u"}),), captured_at=captured_at)

        data = snapshot.to_dict()

        assert data["captured_at"] == "2026-10-01T12:00:00+00:00"
        assert data["resource_count"] == 1
        assert data["resources"] == [{"id": "x", "url": "u"}]
