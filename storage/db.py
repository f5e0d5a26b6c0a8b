#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import sqlite3
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "2"


class Database:
    def __init__(self, db_path: Union[str, Path] = "pomoterm.db"):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON;")

    def connect(self) -> sqlite3.Connection:
        return self.conn

    def _table_exists(self, name: str) -> bool:
        r = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (name,),
        ).fetchone()
        return bool(r)

    def _cols(self, table: str) -> List[str]:
        return [
            r["name"]
            for r in self.conn.execute(f"PRAGMA table_info({table});").fetchall()
        ]

    def init_schema(self):
        cur = self.conn.cursor()

        cur.execute("""
            CREATE TABLE IF NOT EXISTS schema_meta (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)

        cur.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'pending',
                pomodoros_completed INTEGER NOT NULL DEFAULT 0,
                total_pomodoro_time INTEGER NOT NULL DEFAULT 0,
                current_pomodoro_time INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL
            );
        """)

        cur.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id TEXT PRIMARY KEY,
                task_id INTEGER NOT NULL,
                kind TEXT NOT NULL,
                start_ts INTEGER NOT NULL,
                end_ts INTEGER,
                duration_sec INTEGER,
                outcome TEXT
            );
        """)

        # sessions migration (schema 1 had no outcome column)
        if "outcome" not in self._cols("sessions"):
            logger.info("Migrating sessions table: adding outcome column.")
            cur.execute("ALTER TABLE sessions ADD COLUMN outcome TEXT;")

        cur.execute("""
            CREATE TABLE IF NOT EXISTS daily_stats (
                day TEXT PRIMARY KEY,
                seconds INTEGER NOT NULL DEFAULT 0
            );
        """)

        cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);")
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_sessions_task ON sessions(task_id);"
        )

        cur.execute(
            """
            INSERT INTO schema_meta(key, value) VALUES('schema_version', ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (SCHEMA_VERSION,),
        )

        self.conn.commit()

    def close(self):
        try:
            self.conn.close()
        except sqlite3.Error:
            logger.debug("Closing database failed.", exc_info=True)
