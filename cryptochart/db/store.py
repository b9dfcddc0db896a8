"""SQLite watchlist store for CryptoChart."""

import sqlite3
from pathlib import Path
from typing import Iterable, Optional


class WatchlistStore:
    """SQLite-backed persistence for named watchlists.

    Only symbol identifiers are stored; prices are fetched fresh on every
    poll. A list that has never been saved loads as the given default.
    """

    REQUIRED_TABLES = [
        "watchlist",
        "watchlist_names",
    ]

    def __init__(self, db_path: Path):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS watchlist (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    list_name TEXT NOT NULL DEFAULT 'default',
                    position INTEGER NOT NULL,
                    UNIQUE(symbol, list_name)
                )
            """)

            # Lists that have been saved at least once, even if now empty
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS watchlist_names (
                    list_name TEXT PRIMARY KEY
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Watchlist ====================

    def load_watchlist(
        self,
        list_name: str = "default",
        default: Optional[Iterable[str]] = None,
    ) -> list[str]:
        """Load the symbols of a watchlist in saved order.

        Args:
            list_name: Name of the watchlist.
            default: Symbols to return if the list was never saved.

        Returns:
            List of symbols.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT 1 FROM watchlist_names WHERE list_name = ?",
                (list_name,),
            )
            if cursor.fetchone() is None:
                return list(default or [])

            cursor.execute(
                "SELECT symbol FROM watchlist WHERE list_name = ? ORDER BY position",
                (list_name,),
            )
            return [row["symbol"] for row in cursor.fetchall()]
        finally:
            conn.close()

    def save_watchlist(self, symbols: Iterable[str], list_name: str = "default") -> None:
        """Replace a watchlist's contents.

        Duplicate symbols are collapsed, keeping the first occurrence.

        Args:
            symbols: Symbols in display order.
            list_name: Name of the watchlist.
        """
        unique = list(dict.fromkeys(symbols))
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM watchlist WHERE list_name = ?", (list_name,))
            cursor.executemany(
                """
                INSERT INTO watchlist (symbol, list_name, position)
                VALUES (?, ?, ?)
                """,
                [(symbol, list_name, i) for i, symbol in enumerate(unique)],
            )
            cursor.execute(
                "INSERT OR IGNORE INTO watchlist_names (list_name) VALUES (?)",
                (list_name,),
            )
            conn.commit()
        finally:
            conn.close()

    def add_to_watchlist(
        self,
        symbol: str,
        list_name: str = "default",
        default: Optional[Iterable[str]] = None,
    ) -> bool:
        """Append a symbol to a watchlist.

        Returns:
            False if the symbol was already present.
        """
        current = self.load_watchlist(list_name, default)
        if symbol in current:
            return False
        self.save_watchlist([*current, symbol], list_name)
        return True

    def remove_from_watchlist(
        self,
        symbol: str,
        list_name: str = "default",
        default: Optional[Iterable[str]] = None,
    ) -> bool:
        """Remove a symbol from a watchlist.

        Returns:
            False if the symbol was not present.
        """
        current = self.load_watchlist(list_name, default)
        if symbol not in current:
            return False
        self.save_watchlist([s for s in current if s != symbol], list_name)
        return True

    def get_watchlist_names(self) -> list[str]:
        """Get all saved watchlist names."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT list_name FROM watchlist_names")
            return [row["list_name"] for row in cursor.fetchall()]
        finally:
            conn.close()
