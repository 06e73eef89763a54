"""SQLite storage for income and expense movements."""

import logging
import sqlite3
from datetime import datetime, timezone

from app.config import settings

logger = logging.getLogger(__name__)

_store = None

COLUMNS = ("id", "description", "amount", "type", "category", "date", "created_at", "updated_at")
UPDATABLE = ("description", "amount", "type", "category", "date")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MovementStore:
    """SQLite-backed movement ledger."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._init_tables()

    def _init_tables(self):
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS movements (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                description TEXT NOT NULL,
                amount REAL NOT NULL,
                type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
                category TEXT NOT NULL DEFAULT 'general',
                date TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_movements_date ON movements(date);
            CREATE INDEX IF NOT EXISTS idx_movements_type ON movements(type);
        """)
        self.conn.commit()

    def create(self, description: str, amount: float, type: str, category: str, date: str) -> dict:
        """Insert a movement and return it with its assigned id."""
        timestamp = _now()
        cursor = self.conn.execute(
            "INSERT INTO movements (description, amount, type, category, date, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (description, amount, type, category, date, timestamp, timestamp),
        )
        self.conn.commit()
        return self.get(cursor.lastrowid)

    def get(self, movement_id: int) -> dict | None:
        row = self.conn.execute(
            f"SELECT {', '.join(COLUMNS)} FROM movements WHERE id = ?",
            (movement_id,),
        ).fetchone()
        return dict(row) if row else None

    def list_movements(
        self,
        type: str | None = None,
        category: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[dict]:
        """List movements, newest date first, optionally filtered."""
        where, params = self._filters(type, category, date_from, date_to)
        cursor = self.conn.execute(
            f"SELECT {', '.join(COLUMNS)} FROM movements{where} ORDER BY date DESC, id DESC",
            params,
        )
        return [dict(row) for row in cursor.fetchall()]

    def update(self, movement_id: int, changes: dict) -> dict | None:
        """Apply a partial update. Returns None when the movement doesn't exist."""
        if self.get(movement_id) is None:
            return None
        fields = {k: v for k, v in changes.items() if k in UPDATABLE}
        if fields:
            assignments = ", ".join(f"{name} = ?" for name in fields)
            self.conn.execute(
                f"UPDATE movements SET {assignments}, updated_at = ? WHERE id = ?",
                (*fields.values(), _now(), movement_id),
            )
            self.conn.commit()
        return self.get(movement_id)

    def delete(self, movement_id: int) -> bool:
        cursor = self.conn.execute("DELETE FROM movements WHERE id = ?", (movement_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def summary(
        self,
        type: str | None = None,
        category: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> dict:
        """Return income and expense totals, the balance and the movement count."""
        where, params = self._filters(type, category, date_from, date_to)
        cursor = self.conn.execute(
            f"SELECT type, COALESCE(SUM(amount), 0), COUNT(*) FROM movements{where} GROUP BY type",
            params,
        )
        totals = {"income": 0.0, "expense": 0.0}
        count = 0
        for movement_type, total, n in cursor.fetchall():
            totals[movement_type] = round(total, 2)
            count += n
        return {
            "income": totals["income"],
            "expense": totals["expense"],
            "balance": round(totals["income"] - totals["expense"], 2),
            "count": count,
        }

    @staticmethod
    def _filters(type, category, date_from, date_to) -> tuple[str, list]:
        clauses, params = [], []
        if type:
            clauses.append("type = ?")
            params.append(type)
        if category:
            clauses.append("category = ?")
            params.append(category)
        if date_from:
            clauses.append("date >= ?")
            params.append(date_from)
        if date_to:
            clauses.append("date <= ?")
            params.append(date_to)
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def close(self):
        self.conn.close()


def get_movement_store() -> MovementStore:
    """Get or initialize the movement store singleton."""
    global _store
    if _store is None:
        _store = MovementStore(settings.sqlite_path)
        logger.info(f"Movement store initialized at {settings.sqlite_path}")
    return _store
