"""
tests/test_closure.py — Tests for category closure resolution

Covers product and category-name entry points, transitive expansion,
cycle safety and the closure size guard (category forest in conftest).
"""

import logging
from unittest.mock import MagicMock

import pytest

from src.content.closure import CategoryClosureResolver
from tests.content_fixtures import LONG_CODE


@pytest.fixture
def resolver(store):
    return CategoryClosureResolver(store)


class TestForProduct:
    def test_direct_category_and_ancestors(self, resolver):
        assert resolver.for_product("40001765") == {2, 1}

    def test_code_wider_than_64_bits(self, resolver):
        assert resolver.for_product(LONG_CODE) == {3, 2, 1}

    def test_several_direct_categories(self, resolver):
        assert resolver.for_product("555") == {6, 4, 1, 3, 2}

    def test_unknown_product(self, resolver):
        assert resolver.for_product("999999999") == frozenset()

    def test_product_without_categories(self, resolver):
        assert resolver.for_product("777") == frozenset()


class TestForCategory:
    def test_name_and_ancestors(self, resolver):
        assert resolver.for_category("Cheese") == {3, 2, 1}

    def test_case_insensitive_lowest_id_wins(self, resolver):
        # "Dairy" (2, en) and "dairy" (8, de) share a name.
        assert resolver.find_category("DAIRY") == 2
        assert resolver.for_category("dairy") == {2, 1}

    def test_language_filter(self, store):
        resolver = CategoryClosureResolver(store, category_lang="de")
        assert resolver.find_category("Dairy") == 8
        assert resolver.for_category("Dairy") == {8}

    def test_unknown_name(self, resolver):
        assert resolver.for_category("Spaceship") == frozenset()

    def test_root_contains_itself(self, resolver):
        assert resolver.for_category("Food") == {1}

    def test_diamond_collapses(self, resolver):
        # Canned Soup reaches Food directly and through Soup.
        assert resolver.for_category("Canned Soup") == {6, 4, 1}


class TestCycles:
    def test_two_cycle_terminates(self, resolver):
        assert resolver.for_category("CycleA") == {9, 10}
        assert resolver.for_category("CycleB") == {9, 10}

    def test_self_loop_terminates(self, resolver):
        assert resolver.for_category("Loop") == {11}

    def test_seed_always_included(self, resolver):
        for name, seed_id in [("Food", 1), ("Dairy", 2), ("CycleA", 9), ("Loop", 11)]:
            assert seed_id in resolver.for_category(name)

    def test_long_cycle_in_memory(self):
        # 0 → 1 → … → 199 → 0, served by a fake store.
        parents = {i: (i + 1) % 200 for i in range(200)}
        store = MagicMock()
        store.query.side_effect = lambda sql, ids: [
            {"parent_id": parents[i]} for i in ids if i in parents
        ]
        resolver = CategoryClosureResolver(store)
        assert resolver.expand([0]) == frozenset(range(200))

    def test_size_guard(self, store, caplog):
        resolver = CategoryClosureResolver(store, max_categories=1)
        with caplog.at_level(logging.WARNING):
            assert resolver.for_category("Cheese") == {3}
        assert "limit 1" in caplog.text

    def test_size_guard_within_one_round(self, caplog):
        # Category 0 has 50 parents, all fetched in the same round.
        store = MagicMock()
        store.query.side_effect = lambda sql, ids: (
            [{"parent_id": p} for p in range(1, 51)] if 0 in ids else []
        )
        resolver = CategoryClosureResolver(store, max_categories=10)
        with caplog.at_level(logging.WARNING):
            closure = resolver.expand([0])
        assert len(closure) == 10
        assert 0 in closure
        assert "limit 10" in caplog.text


class TestResolve:
    def test_dispatch_code(self, resolver):
        assert resolver.resolve("40001765") == {2, 1}

    def test_dispatch_name(self, resolver):
        assert resolver.resolve("Soup Mix") == {5, 4, 1}

    def test_numeric_looking_name_is_not_a_product(self, resolver):
        assert resolver.resolve("100% Juice") == {12}

    def test_empty_term(self, resolver):
        assert resolver.resolve("") == frozenset()

    def test_expand_ignores_duplicates_and_none(self, resolver):
        assert resolver.expand([3, 3, None]) == {3, 2, 1}
