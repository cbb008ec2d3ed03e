import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)


class SQLiteSessionStore:
    """Keeps one serialized identity per key (one key per browser)."""

    def __init__(self, db_path: str, key: str = "userInfo"):
        self.db_path = db_path
        self.key = key

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def _get_current_version(self, conn) -> int:
        row = conn.execute("SELECT version FROM schema_info").fetchone()
        return row[0] if row else 0

    def _migrate_v1(self, conn):
        """Baseline schema (v1)."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS session_identity (
                key TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

    def init_db(self):
        MIGRATIONS = [self._migrate_v1]

        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_info (
                    version INTEGER NOT NULL
                )
            """)
            current_version = self._get_current_version(conn)
            has_version_row = conn.execute("SELECT COUNT(*) FROM schema_info").fetchone()[0] > 0
            if not has_version_row:
                conn.execute("INSERT INTO schema_info (version) VALUES (?)", (current_version,))

            for i in range(current_version, len(MIGRATIONS)):
                target_version = i + 1
                try:
                    MIGRATIONS[i](conn)
                    conn.execute("UPDATE schema_info SET version = ?", (target_version,))
                except Exception as e:
                    raise RuntimeError(f"Session store migration to v{target_version} failed: {e}") from e

            conn.commit()

    def load(self) -> Optional[Dict[str, Any]]:
        with self._conn() as conn:
            row = conn.execute("SELECT payload FROM session_identity WHERE key = ?", (self.key,)).fetchone()
        if not row:
            return None
        try:
            record = json.loads(row[0])
        except ValueError:
            log.warning(f"Stored session for key {self.key[:8]}... is not valid JSON")
            return None
        return record if isinstance(record, dict) else None

    def save(self, record: Dict[str, Any]) -> None:
        payload = json.dumps(record)
        now_iso = datetime.utcnow().isoformat()
        with self._conn() as conn:
            conn.execute("""
                INSERT INTO session_identity (key, payload, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
            """, (self.key, payload, now_iso))
            conn.commit()

    def clear(self) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM session_identity WHERE key = ?", (self.key,))
            conn.commit()
