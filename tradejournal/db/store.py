"""SQLite data store for TradeJournal."""

import sqlite3
from datetime import date
from pathlib import Path
from typing import Optional

from tradejournal.models import Account, EntryKind, JournalEntry
from tradejournal.models.account import DEFAULT_ACCOUNT_NAME, DEFAULT_INITIAL_BALANCE


ENTRY_COLUMNS = [
    "id",
    "date",
    "time",
    "kind",
    "market",
    "entry_price",
    "stop_loss_price",
    "take_profit_price",
    "exit_price",
    "position_size",
    "risk_reward_ratio",
    "profit_or_loss",
    "balance_at_entry",
    "screenshot",
    "notes",
    "discipline_rating",
    "emotional_state",
    "session",
    "reason_for_entry",
    "reason_for_exit",
]


class JournalStore:
    """SQLite-based data store for TradeJournal."""

    REQUIRED_TABLES = [
        "accounts",
        "entries",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

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
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    initial_balance REAL NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    id TEXT NOT NULL,
                    account_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    time TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    market TEXT NOT NULL,
                    entry_price REAL,
                    stop_loss_price REAL,
                    take_profit_price REAL,
                    exit_price REAL,
                    position_size REAL,
                    risk_reward_ratio TEXT,
                    profit_or_loss REAL,
                    balance_at_entry REAL NOT NULL,
                    screenshot TEXT,
                    notes TEXT,
                    discipline_rating INTEGER NOT NULL
                        CHECK(discipline_rating >= 1 AND discipline_rating <= 5),
                    emotional_state TEXT,
                    session TEXT,
                    reason_for_entry TEXT,
                    reason_for_exit TEXT,
                    PRIMARY KEY (account_id, id),
                    FOREIGN KEY (account_id) REFERENCES accounts(id)
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_entries_account_date "
                "ON entries (account_id, date, time)"
            )

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

    # ==================== Accounts ====================

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get an account by ID.

        Args:
            account_id: Account ID.

        Returns:
            Account if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, initial_balance FROM accounts WHERE id = ?",
                (account_id,),
            )
            row = cursor.fetchone()
            if row:
                return Account(
                    id=row["id"],
                    name=row["name"],
                    initial_balance=row["initial_balance"],
                )
            return None
        finally:
            conn.close()

    def save_account(self, account: Account) -> None:
        """Save or update an account.

        Args:
            account: Account to save.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO accounts (id, name, initial_balance)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    initial_balance = excluded.initial_balance
                """,
                (account.id, account.name, account.initial_balance),
            )
            conn.commit()
        finally:
            conn.close()

    # ==================== Entries ====================

    @staticmethod
    def _entry_params(account_id: str, entry: JournalEntry) -> tuple:
        return (
            entry.id,
            account_id,
            entry.date.isoformat(),
            entry.time,
            entry.kind.value,
            entry.market,
            entry.entry_price,
            entry.stop_loss_price,
            entry.take_profit_price,
            entry.exit_price,
            entry.position_size,
            entry.risk_reward_ratio,
            entry.profit_or_loss,
            entry.balance_at_entry,
            entry.screenshot,
            entry.notes,
            entry.discipline_rating,
            entry.emotional_state,
            entry.session,
            entry.reason_for_entry,
            entry.reason_for_exit,
        )

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> JournalEntry:
        values = {column: row[column] for column in ENTRY_COLUMNS}
        values["date"] = date.fromisoformat(row["date"])
        values["kind"] = EntryKind(row["kind"])
        return JournalEntry(**values)

    _INSERT_ENTRY = f"""
        INSERT INTO entries (id, account_id, {', '.join(ENTRY_COLUMNS[1:])})
        VALUES ({', '.join('?' * (len(ENTRY_COLUMNS) + 1))})
    """

    _UPDATE_ENTRY = f"""
        UPDATE entries SET {', '.join(c + ' = ?' for c in ENTRY_COLUMNS[1:])}
        WHERE account_id = ? AND id = ?
    """

    def _ensure_account(self, cursor: sqlite3.Cursor, account_id: str) -> None:
        cursor.execute(
            """
            INSERT OR IGNORE INTO accounts (id, name, initial_balance)
            VALUES (?, ?, ?)
            """,
            (account_id, DEFAULT_ACCOUNT_NAME, DEFAULT_INITIAL_BALANCE),
        )

    def add_entry(self, account_id: str, entry: JournalEntry) -> None:
        """Add a journal entry.

        Args:
            account_id: Owning account ID.
            entry: Entry to add.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._ensure_account(cursor, account_id)
            cursor.execute(self._INSERT_ENTRY, self._entry_params(account_id, entry))
            conn.commit()
        finally:
            conn.close()

    def replace_entry(self, account_id: str, entry: JournalEntry) -> None:
        """Replace an existing entry with the same ID.

        Args:
            account_id: Owning account ID.
            entry: New version of the entry.

        Raises:
            KeyError: If no entry with that ID exists for the account.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            params = self._entry_params(account_id, entry)
            cursor.execute(self._UPDATE_ENTRY, params[2:] + (account_id, entry.id))
            if cursor.rowcount == 0:
                raise KeyError(entry.id)
            conn.commit()
        finally:
            conn.close()

    def replace_all_entries(self, account_id: str, entries: list[JournalEntry]) -> None:
        """Replace every entry of an account in one transaction.

        Args:
            account_id: Owning account ID.
            entries: The new full set of entries.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._ensure_account(cursor, account_id)
            cursor.execute("DELETE FROM entries WHERE account_id = ?", (account_id,))
            cursor.executemany(
                self._INSERT_ENTRY,
                [self._entry_params(account_id, entry) for entry in entries],
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

    def clear_entries(self, account_id: str) -> int:
        """Delete all entries of an account.

        Args:
            account_id: Account ID.

        Returns:
            Number of deleted entries.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM entries WHERE account_id = ?", (account_id,))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def get_entries(self, account_id: str) -> list[JournalEntry]:
        """Get all entries of an account, oldest first.

        Args:
            account_id: Account ID.

        Returns:
            List of entries ordered by date and time.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {', '.join(ENTRY_COLUMNS)}
                FROM entries
                WHERE account_id = ?
                ORDER BY date ASC, time ASC, rowid ASC
                """,
                (account_id,),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_entry(self, account_id: str, entry_id: str) -> Optional[JournalEntry]:
        """Get an entry by ID.

        Args:
            account_id: Account ID.
            entry_id: Entry ID.

        Returns:
            Entry if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {', '.join(ENTRY_COLUMNS)}
                FROM entries
                WHERE account_id = ? AND id = ?
                """,
                (account_id, entry_id),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_entry(row)
            return None
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
