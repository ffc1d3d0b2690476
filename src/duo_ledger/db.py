"""SQLite database operations for duo-ledger."""

import sqlite3
from datetime import datetime
from pathlib import Path

from .models import EntryKind, LedgerEntry, Member

_ENTRY_COLUMNS = """
    id, amount_minor, payer_id, kind, category, description,
    currency, occurred_at, created_at
"""


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        # Members table; seq preserves registration order
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS members (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                username TEXT,
                first_name TEXT,
                joined_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        # Ledger entries table
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS ledger_entries (
                id TEXT PRIMARY KEY,
                amount_minor INTEGER NOT NULL CHECK (amount_minor >= 0),
                payer_id TEXT NOT NULL,
                kind TEXT NOT NULL,
                category TEXT NOT NULL,
                description TEXT NOT NULL,
                currency TEXT NOT NULL,
                occurred_at TIMESTAMP NOT NULL,
                created_at TIMESTAMP NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_ledger_entries_occurred_at
            ON ledger_entries (occurred_at)
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Member operations
    # ========================================================================

    def upsert_member(self, member: Member) -> Member:
        """
        Insert a member, or update the names of an existing one.

        Names that are None leave the stored value untouched.
        """
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO members (id, username, first_name, joined_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                username = COALESCE(excluded.username, members.username),
                first_name = COALESCE(excluded.first_name, members.first_name)
            """,
            (
                member.id,
                member.username,
                member.first_name,
                datetime.now().isoformat(),
            ),
        )
        self.conn.commit()
        stored = self.get_member(member.id)
        if stored is None:
            raise RuntimeError(f"Failed to save member {member.id}")
        return stored

    def get_member(self, member_id: str) -> Member | None:
        """Get a member by id."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, username, first_name FROM members WHERE id = ?",
            (member_id,),
        )
        row = cursor.fetchone()
        return self._row_to_member(row) if row else None

    def get_members(self) -> list[Member]:
        """Get all members in registration order."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT id, username, first_name FROM members ORDER BY seq")
        return [self._row_to_member(row) for row in cursor.fetchall()]

    def get_active_members(self) -> list[Member]:
        """Get members with at least one ledger entry, in registration order."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT m.id, m.username, m.first_name
            FROM members m
            WHERE EXISTS (
                SELECT 1 FROM ledger_entries e WHERE e.payer_id = m.id
            )
            ORDER BY m.seq
            """
        )
        return [self._row_to_member(row) for row in cursor.fetchall()]

    @staticmethod
    def _row_to_member(row: sqlite3.Row) -> Member:
        return Member(
            id=row["id"], username=row["username"], first_name=row["first_name"]
        )

    # ========================================================================
    # Ledger entry operations
    # ========================================================================

    def save_entry(self, entry: LedgerEntry) -> LedgerEntry:
        """Save a ledger entry, replacing any entry with the same id."""
        cursor = self.conn.cursor()
        cursor.execute(
            f"""
            INSERT OR REPLACE INTO ledger_entries ({_ENTRY_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.amount_minor,
                entry.payer_id,
                entry.kind.value,
                entry.category,
                entry.description,
                entry.currency,
                entry.occurred_at.isoformat(),
                entry.created_at.isoformat(),
            ),
        )
        self.conn.commit()
        return entry

    def get_entry(self, entry_id: str) -> LedgerEntry | None:
        """Get a ledger entry by id."""
        cursor = self.conn.cursor()
        cursor.execute(
            f"SELECT {_ENTRY_COLUMNS} FROM ledger_entries WHERE id = ?",
            (entry_id,),
        )
        row = cursor.fetchone()
        return self._row_to_entry(row) if row else None

    def list_entries(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[LedgerEntry]:
        """Get entries whose occurred_at falls within [start, end], oldest first."""
        query = f"SELECT {_ENTRY_COLUMNS} FROM ledger_entries"
        conditions = []
        params: list[str] = []
        if start is not None:
            conditions.append("occurred_at >= ?")
            params.append(start.isoformat())
        if end is not None:
            conditions.append("occurred_at <= ?")
            params.append(end.isoformat())
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY occurred_at, created_at"

        cursor = self.conn.cursor()
        cursor.execute(query, params)
        return [self._row_to_entry(row) for row in cursor.fetchall()]

    def get_last_entries(self, limit: int) -> list[LedgerEntry]:
        """Get the most recently created entries, newest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            f"""
            SELECT {_ENTRY_COLUMNS} FROM ledger_entries
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        return [self._row_to_entry(row) for row in cursor.fetchall()]

    def search_entries(
        self, term: str, start: datetime | None = None, end: datetime | None = None
    ) -> list[LedgerEntry]:
        """Case-insensitive description search within an optional range."""
        needle = term.lower().strip()
        return [
            entry
            for entry in self.list_entries(start, end)
            if needle in entry.description.lower()
        ]

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry. Returns True if a row was removed."""
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM ledger_entries WHERE id = ?", (entry_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> LedgerEntry:
        return LedgerEntry(
            id=row["id"],
            amount_minor=row["amount_minor"],
            payer_id=row["payer_id"],
            kind=EntryKind.coerce(row["kind"]),
            category=row["category"],
            description=row["description"],
            currency=row["currency"],
            occurred_at=datetime.fromisoformat(row["occurred_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
