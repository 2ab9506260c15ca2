import csv
import io
import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from models import ProgramProgress, SavedWorkout, SubstitutionLog

logger = logging.getLogger(__name__)

PROGRESS_KEY = "programProgress"
WORKOUTS_KEY = "workouts"
SUBSTITUTIONS_KEY = "substitutions"


class StorageError(RuntimeError):
    """Raised when the store cannot be read or written."""


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "store": (
            """CREATE TABLE store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT
                );""",
            ["key", "value", "updated_at"],
        ),
    }

    def __init__(self, db_path: str = "trainer.db") -> None:
        self._db_path = db_path
        try:
            self._ensure_schema()
        except sqlite3.Error as e:
            raise StorageError(f"cannot open store {db_path}: {e}") from e

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;")
        conn.execute(f"DROP TABLE {table}_old;")

    def vacuum(self) -> None:
        """Run SQLite VACUUM to reduce database size."""
        with self._connection() as conn:
            conn.execute("VACUUM;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.lastrowid
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e


class KeyValueRepository(BaseRepository):
    """JSON blobs addressed by key. Writes replace the whole value."""

    def get(self, key: str) -> Optional[Any]:
        rows = self.fetch_all("SELECT value FROM store WHERE key = ?;", (key,))
        if not rows:
            return None
        try:
            return json.loads(rows[0][0])
        except json.JSONDecodeError as e:
            raise StorageError(f"corrupt value for {key}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        self.execute(
            "INSERT INTO store (key, value, updated_at) VALUES (?, ?, datetime('now')) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at;",
            (key, json.dumps(value, ensure_ascii=False)),
        )

    def delete(self, key: str) -> None:
        self.execute("DELETE FROM store WHERE key = ?;", (key,))

    def keys(self) -> List[str]:
        return [r[0] for r in self.fetch_all("SELECT key FROM store ORDER BY key;")]


class ProgressRepository(KeyValueRepository):
    """Repository for the single program progress record."""

    def load(self) -> Optional[ProgramProgress]:
        data = self.get(PROGRESS_KEY)
        if data is None:
            return None
        try:
            return ProgramProgress.from_json(data)
        except ValidationError as e:
            raise StorageError(f"invalid program progress: {e}") from e

    def save(self, progress: ProgramProgress) -> None:
        self.set(PROGRESS_KEY, progress.to_json())


class _HistoryRepository(KeyValueRepository):
    key = ""
    model = None

    def fetch_all_records(self) -> list:
        data = self.get(self.key)
        if not data:
            return []
        if not isinstance(data, list):
            raise StorageError(f"invalid {self.key} history: expected a list")
        try:
            return [self.model.from_json(item) for item in data]
        except (ValidationError, TypeError) as e:
            raise StorageError(f"invalid {self.key} history: {e}") from e

    def append(self, record) -> None:
        # read-modify-write of the whole list
        data = self.get(self.key) or []
        if not isinstance(data, list):
            raise StorageError(f"invalid {self.key} history: expected a list")
        data.append(record.to_json())
        self.set(self.key, data)
        logger.debug("%s history now holds %d records", self.key, len(data))

    def delete_all(self) -> None:
        self.delete(self.key)


class WorkoutHistoryRepository(_HistoryRepository):
    """Completed workout sessions."""

    key = WORKOUTS_KEY
    model = SavedWorkout

    def export_csv(self) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["Date", "Phase", "Exercise", "Reps", "Weight", "Timestamp"])
        for workout in self.fetch_all_records():
            for entry in workout.log:
                writer.writerow(
                    [
                        workout.date.isoformat(),
                        workout.phase,
                        entry.exercise,
                        entry.reps or "",
                        entry.weight or "",
                        entry.timestamp.isoformat(),
                    ]
                )
        return output.getvalue()

    def export_json(self) -> str:
        return json.dumps(
            [w.to_json() for w in self.fetch_all_records()], ensure_ascii=False
        )


class SubstitutionHistoryRepository(_HistoryRepository):
    """Alternative exercises performed while a machine was busy."""

    key = SUBSTITUTIONS_KEY
    model = SubstitutionLog

    def fetch_for_machine(self, machine_id: str) -> list[SubstitutionLog]:
        return [
            r for r in self.fetch_all_records() if r.original_machine_id == machine_id
        ]
