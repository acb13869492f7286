"""
src/content/store.py — Content Database Storage

Read-only SQLite access to the food rescue content database: products,
categories with their parent structure, and topics with their content.

One connection is shared by all readers. Queries are serialized with a
lock, which is enough because nothing ever writes to the database.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Optional, Sequence

from src.content.errors import QueryFailure, StoreUnavailable

logger = logging.getLogger(__name__)

REQUIRED_TABLES = (
    "products",
    "product_categories",
    "categories",
    "categories_structure",
    "topics",
    "topic_categories",
    "topic_contents",
)


class ContentStore:
    """
    Read-only handle to the content database.

    Usage:
        store = ContentStore("foodrescue-content.sqlite3")
        store.open()
        rows = store.query("SELECT name FROM categories WHERE id = ?", (7,))
    """

    def __init__(self, db_path: str = "foodrescue-content.sqlite3"):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._unavailable: Optional[str] = None
        self._lock = threading.Lock()

    def __enter__(self) -> "ContentStore":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def available(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            if self._unavailable is not None:
                # Already reported at open time.
                raise StoreUnavailable(self._unavailable)
            self.open()
        return self._conn

    def open(self):
        """Open the database read-only and check its table structure.

        Raises:
            StoreUnavailable: if the file is missing, cannot be opened, or
                lacks one of the required tables. The failure is logged
                once and every later access raises it again.
        """
        if self._conn is not None:
            return
        try:
            self._conn = self._connect()
        except StoreUnavailable as exc:
            self._unavailable = str(exc)
            logger.error("Content database unavailable: %s", exc)
            raise
        self._unavailable = None
        logger.info("Opened content database %s", self.db_path)

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    # ── Read Operations ────────────────────────────────────────────

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        """Run one read query and return its rows as dicts.

        Raises:
            StoreUnavailable: if the database could not be opened.
            QueryFailure: if SQLite rejects or fails the query.
        """
        conn = self.conn
        with self._lock:
            try:
                rows = conn.execute(sql, tuple(params)).fetchall()
            except sqlite3.Error as exc:
                raise QueryFailure(f"{exc} (query: {' '.join(sql.split())})") from exc
        return [dict(r) for r in rows]

    def get_tables(self) -> set[str]:
        rows = self.query("SELECT name FROM sqlite_master WHERE type IN ('table', 'view')")
        return {r["name"] for r in rows}

    # ── Internal ───────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        path = Path(self.db_path)
        if not path.is_file():
            raise StoreUnavailable(f"database file not found: {path}")

        # mode=ro keeps sqlite3 from silently creating an empty database.
        uri = f"{path.resolve().as_uri()}?mode=ro"
        conn = None
        try:
            conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            names = {
                row["name"]
                for row in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type IN ('table', 'view')"
                )
            }
        except sqlite3.Error as exc:
            if conn is not None:
                conn.close()
            raise StoreUnavailable(f"could not open database {path}: {exc}") from exc

        missing = [t for t in REQUIRED_TABLES if t not in names]
        if missing:
            conn.close()
            raise StoreUnavailable(
                f"database {path} lacks required tables: {', '.join(missing)}"
            )
        return conn


# ── Helpers ────────────────────────────────────────────────────────


def batched(ids: Sequence[int], size: int = 500) -> list[list[int]]:
    """Split ids into chunks small enough for one SQL IN (...) list."""
    return [list(ids[i : i + size]) for i in range(0, len(ids), size)]


def placeholders(count: int) -> str:
    return ", ".join("?" * count)


# ── Schema ─────────────────────────────────────────────────────────

# The tables this package reads. The package never executes this; it
# documents the expected layout and builds fixture databases.
CONTENT_SCHEMA = """
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY,
    code TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_products_code ON products(code);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    lang TEXT DEFAULT 'en'
);

CREATE TABLE IF NOT EXISTS product_categories (
    product_id INTEGER NOT NULL REFERENCES products(id),
    category_id INTEGER NOT NULL REFERENCES categories(id)
);

CREATE TABLE IF NOT EXISTS categories_structure (
    category_id INTEGER NOT NULL REFERENCES categories(id),
    parent_id INTEGER REFERENCES categories(id)
);

CREATE TABLE IF NOT EXISTS topics (
    id INTEGER PRIMARY KEY,
    section TEXT,
    version TEXT
);

CREATE TABLE IF NOT EXISTS topic_categories (
    topic_id INTEGER NOT NULL REFERENCES topics(id),
    category_id INTEGER NOT NULL REFERENCES categories(id)
);

CREATE TABLE IF NOT EXISTS topic_contents (
    topic_id INTEGER NOT NULL REFERENCES topics(id),
    title TEXT,
    content TEXT
);
"""
