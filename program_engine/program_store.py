"""
SQLite persistence for generated programs, raw responses and logged sets.
"""

import json
import os
import re
import sqlite3
from contextlib import contextmanager


def normalize_exercise_name(name):
    """Return a stable lowercase key for exercise history lookups."""
    return re.sub(r"[^a-z0-9]+", " ", (name or "").lower()).strip()


class ProgramStore:
    """Small SQLite wrapper for program and training-log storage."""

    def __init__(self, db_path):
        self.db_path = db_path
        parent = os.path.dirname(db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")

    def close(self):
        self.conn.close()

    @contextmanager
    def transaction(self):
        """Context manager for atomic write operations."""
        try:
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def init_schema(self):
        """Create core schema if it does not already exist."""
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS programs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                program_json TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                complexity_tier TEXT,
                attempt_count INTEGER,
                validation_error_count INTEGER,
                periodization_model TEXT,
                created_at TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS generation_attempts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT,
                tier TEXT NOT NULL,
                outcome TEXT NOT NULL,
                raw_response TEXT,
                error TEXT,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS set_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                program_id INTEGER,
                exercise_name TEXT NOT NULL,
                normalized_name TEXT NOT NULL,
                weight_kg REAL NOT NULL,
                reps INTEGER NOT NULL,
                rpe REAL,
                is_pb INTEGER NOT NULL DEFAULT 0,
                pb_type TEXT,
                logged_at TEXT NOT NULL DEFAULT (datetime('now')),
                FOREIGN KEY(program_id) REFERENCES programs(id) ON DELETE SET NULL
            );

            CREATE INDEX IF NOT EXISTS idx_programs_user ON programs(user_id, is_active);
            CREATE INDEX IF NOT EXISTS idx_set_logs_user_exercise
                ON set_logs(user_id, normalized_name);
            """
        )
        self.conn.commit()

    def save_program(self, user_id, program, metadata=None):
        """Store a new active program, deactivating the user's previous one."""
        metadata = metadata or {}
        with self.transaction():
            self.conn.execute(
                "UPDATE programs SET is_active = 0, updated_at = datetime('now') WHERE user_id = ?",
                (user_id,),
            )
            cursor = self.conn.execute(
                """
                INSERT INTO programs (
                    user_id,
                    program_json,
                    complexity_tier,
                    attempt_count,
                    validation_error_count,
                    periodization_model
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    json.dumps(program),
                    metadata.get("complexity_tier"),
                    metadata.get("attempt_count"),
                    metadata.get("validation_error_count"),
                    metadata.get("periodization_model"),
                ),
            )
        return int(cursor.lastrowid)

    def get_active_program(self, user_id):
        """Return {"id", "program", ...} for the user's active program, or None."""
        row = self.conn.execute(
            """
            SELECT *
            FROM programs
            WHERE user_id = ? AND is_active = 1
            ORDER BY id DESC
            LIMIT 1
            """,
            (user_id,),
        ).fetchone()
        if not row:
            return None
        record = dict(row)
        record["program"] = json.loads(record.pop("program_json"))
        return record

    def update_program(self, program_id, program):
        """Overwrite a program row. Last writer wins."""
        with self.transaction():
            cursor = self.conn.execute(
                """
                UPDATE programs
                SET program_json = ?, updated_at = datetime('now')
                WHERE id = ?
                """,
                (json.dumps(program), program_id),
            )
        return cursor.rowcount > 0

    def record_raw_response(self, attempt, user_id=None):
        """Store one generation attempt's raw response for diagnostics."""
        with self.transaction():
            self.conn.execute(
                """
                INSERT INTO generation_attempts (user_id, tier, outcome, raw_response, error)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    attempt.get("tier"),
                    attempt.get("outcome") or "unknown",
                    attempt.get("raw_response"),
                    attempt.get("error"),
                ),
            )

    def raw_response_sink(self, user_id=None):
        """Callable suitable for ProgramGenerator(response_sink=...)."""
        def _sink(attempt):
            self.record_raw_response(attempt, user_id=user_id)

        return _sink

    def get_generation_attempts(self, user_id=None):
        if user_id is None:
            rows = self.conn.execute("SELECT * FROM generation_attempts ORDER BY id").fetchall()
        else:
            rows = self.conn.execute(
                "SELECT * FROM generation_attempts WHERE user_id = ? ORDER BY id",
                (user_id,),
            ).fetchall()
        return [dict(row) for row in rows]

    def log_set(self, user_id, exercise_name, weight_kg, reps, rpe=None, program_id=None, pb=None):
        """Insert one logged set and return its id."""
        normalized = normalize_exercise_name(exercise_name)
        if not normalized:
            raise ValueError("Exercise name cannot be empty")

        pb = pb or {}
        with self.transaction():
            cursor = self.conn.execute(
                """
                INSERT INTO set_logs (
                    user_id,
                    program_id,
                    exercise_name,
                    normalized_name,
                    weight_kg,
                    reps,
                    rpe,
                    is_pb,
                    pb_type
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    program_id,
                    exercise_name.strip(),
                    normalized,
                    float(weight_kg),
                    int(reps),
                    rpe,
                    1 if pb.get("is_pb") else 0,
                    pb.get("pb_type"),
                ),
            )
        return int(cursor.lastrowid)

    def get_exercise_history(self, user_id, exercise_name):
        """Return prior sets for one exercise as dicts with weight_kg and reps."""
        rows = self.conn.execute(
            """
            SELECT exercise_name, weight_kg, reps, rpe, logged_at
            FROM set_logs
            WHERE user_id = ? AND normalized_name = ?
            ORDER BY id
            """,
            (user_id, normalize_exercise_name(exercise_name)),
        ).fetchall()
        return [dict(row) for row in rows]

    def get_recent_sets(self, user_id, limit=20):
        rows = self.conn.execute(
            """
            SELECT exercise_name, weight_kg, reps, rpe, logged_at
            FROM set_logs
            WHERE user_id = ?
            ORDER BY id DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()
        return [dict(row) for row in reversed(rows)]
