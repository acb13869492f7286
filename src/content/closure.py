"""
src/content/closure.py — Category Closure Resolver

Computes the closure of a starting category: the category itself plus
every ancestor reachable through categories_structure parent links.

The starting point is either a product (all of its directly assigned
categories seed the closure) or a category name. Parent links are meant
to form a forest but are not trusted to: expansion is a breadth-first
worklist over a visited set, so cycles and diamonds cannot repeat work
or loop forever.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from src.content.normalizer import is_code
from src.content.store import ContentStore, batched, placeholders

logger = logging.getLogger(__name__)


class CategoryClosureResolver:
    """
    Resolves search terms to category closures.

    Usage:
        resolver = CategoryClosureResolver(store)
        resolver.resolve("40001765")  # -> frozenset({12, 3, 1})
        resolver.resolve("dairy")     # -> frozenset({3, 1})
    """

    def __init__(
        self,
        store: ContentStore,
        max_categories: int = 10_000,
        category_lang: Optional[str] = None,
    ):
        self.store = store
        self.max_categories = max_categories
        self.category_lang = category_lang

    def resolve(self, term: str) -> frozenset[int]:
        """Closure for a normalized term, dispatching on code vs. name."""
        if not term:
            return frozenset()
        if is_code(term):
            return self.for_product(term)
        return self.for_category(term)

    def for_product(self, code: str) -> frozenset[int]:
        """Closure of all categories directly assigned to a product."""
        logger.debug("Resolving product code %s", code)
        rows = self.store.query(
            """SELECT product_categories.category_id
               FROM products
                   INNER JOIN product_categories ON products.id = product_categories.product_id
               WHERE products.code = ?
               ORDER BY product_categories.category_id""",
            (code,),
        )
        return self.expand(r["category_id"] for r in rows)

    def for_category(self, name: str) -> frozenset[int]:
        """Closure of the category with this name (case-insensitive)."""
        seed = self.find_category(name)
        if seed is None:
            return frozenset()
        return self.expand([seed])

    def find_category(self, name: str) -> Optional[int]:
        """Id of the category named `name`; the lowest id among duplicates."""
        sql = "SELECT id FROM categories WHERE name = ? COLLATE NOCASE"
        params: list = [name]
        if self.category_lang:
            sql += " AND lang LIKE ?"
            params.append(f"{self.category_lang}%")
        sql += " ORDER BY id LIMIT 1"

        rows = self.store.query(sql, params)
        if not rows:
            logger.debug("No category named %r", name)
            return None
        return rows[0]["id"]

    def expand(self, seed: Iterable[int]) -> frozenset[int]:
        """
        Add all transitive parents to the seed categories.

        Each round fetches the parents of the whole frontier at once. Only
        ids not yet visited enter the next frontier, which bounds the work
        by the number of distinct categories.
        """
        visited: set[int] = set()
        frontier: list[int] = []
        for category_id in seed:
            if category_id is not None and category_id not in visited:
                visited.add(category_id)
                frontier.append(category_id)

        while frontier:
            next_frontier: list[int] = []
            for parent_id in self._parents_of(frontier):
                if parent_id in visited:
                    continue
                # Seeds are never dropped, even beyond the cap.
                if len(visited) >= self.max_categories:
                    logger.warning(
                        "Category closure stopped at %d categories (limit %d)",
                        len(visited),
                        self.max_categories,
                    )
                    return frozenset(visited)
                visited.add(parent_id)
                next_frontier.append(parent_id)
            frontier = next_frontier

        return frozenset(visited)

    # ── Internal ───────────────────────────────────────────────────

    def _parents_of(self, category_ids: list[int]) -> list[int]:
        parents: list[int] = []
        for chunk in batched(sorted(category_ids)):
            rows = self.store.query(
                f"""SELECT DISTINCT parent_id FROM categories_structure
                    WHERE category_id IN ({placeholders(len(chunk))})
                        AND parent_id IS NOT NULL
                    ORDER BY parent_id""",
                chunk,
            )
            parents.extend(r["parent_id"] for r in rows)
        return parents
