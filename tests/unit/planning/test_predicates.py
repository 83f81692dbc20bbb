"""Tests for predicates and the predicate filter."""

from __future__ import annotations

import pytest

from sweeper.models.resource import Resource
from sweeper.models.snapshot import Snapshot
from sweeper.models.summary import ErrorPhase
from sweeper.planning.predicates import (
    AttributeContains,
    AttributeEquals,
    AttributeMatches,
    FunctionPredicate,
    as_predicate,
    filter_resources,
    parse_attribute_pair,
)
from tests.fixtures.resources import browser_tabs, make_tab, scenario_snapshot


class TestPredicates:
    """Test suite for built-in predicates."""

    def test_attribute_equals(self) -> None:
        """Test exact attribute equality."""
        predicate = AttributeEquals("window", "2")

        assert predicate.matches(make_tab("t", window="2"))
        assert not predicate.matches(make_tab("t", window="1"))
        assert predicate.describe() == "window == '2'"

    def test_attribute_contains_case_insensitive(self) -> None:
        """Test substring match ignores case by default."""
        predicate = AttributeContains("url", "YOUTUBE")

        assert predicate.matches(make_tab("t", "https://www.youtube.com/watch?v=1"))
        assert not predicate.matches(make_tab("t", "https://example.com/"))

    def test_attribute_contains_case_sensitive(self) -> None:
        """Test case-sensitive substring match."""
        predicate = AttributeContains("title", "News", case_sensitive=True)

        assert predicate.matches(make_tab("t", title="Daily News"))
        assert not predicate.matches(make_tab("t", title="daily news"))

    def test_missing_attribute_never_matches(self) -> None:
        """Test resources without the attribute are not selected."""
        assert not AttributeContains("title", "x").matches(make_tab("t", "u"))
        assert not AttributeMatches("title", ".*").matches(make_tab("t", "u"))

    def test_attribute_matches_regex(self) -> None:
        """Test regex search semantics."""
        predicate = AttributeMatches("url", r"^https://docs\.")

        assert predicate.matches(make_tab("t", "https://docs.python.org/"))
        assert not predicate.matches(make_tab("t", "https://example.com/docs."))

    def test_combinators(self) -> None:
        """Test and/or/not composition."""
        docs = AttributeContains("url", "docs")
        window_two = AttributeEquals("window", "2")
        tab = make_tab("t", "https://docs.python.org/", window="1")

        assert not (docs & window_two).matches(tab)
        assert (docs | window_two).matches(tab)
        assert (~window_two).matches(tab)
        assert "and" in (docs & window_two).describe()

    def test_as_predicate_wraps_callables(self) -> None:
        """Test plain callables become predicates."""
        predicate = as_predicate(lambda r: r.id == "x")

        assert isinstance(predicate, FunctionPredicate)
        assert predicate(Resource(id="x"))
        with pytest.raises(TypeError):
            as_predicate("not callable")  # type: ignore[arg-type]


class TestFilterResources:
    """Test suite for filter_resources()."""

    def test_scenario_key_equals_b(self) -> None:
        """Test predicate key == b selects exactly id3."""
        result = filter_resources(scenario_snapshot(), AttributeEquals("key", "b"))

        assert result.removal_set == {"id3"}
        assert result.errors == ()
        assert result.removal_set.reason("id3") == "matched key == 'b'"

    def test_selects_exactly_matching_set(self) -> None:
        """Test the selection equals {r | predicate(r)}."""
        tabs = browser_tabs()
        predicate = AttributeContains("title", "python")

        result = filter_resources(Snapshot(resources=tuple(tabs)), predicate)

        assert set(result.removal_set) == {t.id for t in tabs if predicate(t)}
        assert result.removal_set.ids == ("t1", "t3", "t5")

    def test_predicate_error_excludes_only_that_resource(self) -> None:
        """Test a failing predicate does not abort the pass."""

        def picky(resource: Resource) -> bool:
            if resource.id == "id2":
                raise KeyError("key")
            return resource.get("key") == "a"

        result = filter_resources(scenario_snapshot(), picky)

        assert result.removal_set == {"id1"}
        assert len(result.errors) == 1
        assert result.errors[0].resource_id == "id2"
        assert result.errors[0].phase == ErrorPhase.PREDICATE
        assert result.errors[0].error_type == "PredicateError"

    def test_no_matches(self) -> None:
        """Test an unmatched predicate yields an empty set."""
        result = filter_resources(scenario_snapshot(), AttributeEquals("key", "z"))

        assert not result.removal_set


class TestParseAttributePair:
    """Test suite for ATTR=VALUE parsing."""

    def test_splits_on_first_equals(self) -> None:
        """Test values may contain '='."""
        assert parse_attribute_pair("url=https://a/?q=1") == ("url", "https://a/?q=1")

    @pytest.mark.parametrize("text", ["url", "=value"])
    def test_invalid(self, text: str) -> None:
        """Test malformed pairs raise ValueError."""
        with pytest.raises(ValueError):
            parse_attribute_pair(text)
