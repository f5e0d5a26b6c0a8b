# storage/repos.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import datetime as dt
import time
import uuid
from typing import List, Optional, Tuple

from domain.models import SessionLog, Task, TaskStatus
from storage.db import Database


def _now_ts() -> int:
    return int(time.time())


_TASK_COLS = """
    id, title, status, pomodoros_completed, total_pomodoro_time,
    current_pomodoro_time, created_at
"""


def _row_to_task(r) -> Task:
    d = dict(r)
    d["status"] = TaskStatus(d["status"])
    return Task(**d)


class TaskRepo:
    def __init__(self, db: Database):
        self.db = db

    def create(self, title: str, created_at: Optional[int] = None) -> Task:
        ts = created_at if created_at is not None else _now_ts()
        cur = self.db.conn.execute(
            "INSERT INTO tasks(title, status, created_at) VALUES(?,?,?)",
            (title, TaskStatus.PENDING.value, ts),
        )
        self.db.conn.commit()
        return self.get(cur.lastrowid)

    def list(self, status: Optional[TaskStatus] = None) -> List[Task]:
        if status:
            rows = self.db.conn.execute(
                f"SELECT {_TASK_COLS} FROM tasks WHERE status=? ORDER BY id ASC",
                (status.value,),
            ).fetchall()
        else:
            rows = self.db.conn.execute(
                f"SELECT {_TASK_COLS} FROM tasks ORDER BY id ASC"
            ).fetchall()
        return [_row_to_task(r) for r in rows]

    def get(self, task_id: int) -> Optional[Task]:
        r = self.db.conn.execute(
            f"SELECT {_TASK_COLS} FROM tasks WHERE id=?",
            (task_id,),
        ).fetchone()
        return _row_to_task(r) if r else None

    def save(self, task: Task) -> None:
        # created_at is immutable; never written back
        self.db.conn.execute(
            """
            UPDATE tasks
            SET title=?, status=?, pomodoros_completed=?,
                total_pomodoro_time=?, current_pomodoro_time=?
            WHERE id=?
            """,
            (
                task.title,
                task.status.value,
                task.pomodoros_completed,
                task.total_pomodoro_time,
                task.current_pomodoro_time,
                task.id,
            ),
        )
        self.db.conn.commit()

    def delete_task(self, task_id: int) -> None:
        self.db.conn.execute("DELETE FROM sessions WHERE task_id=?", (task_id,))
        self.db.conn.execute("DELETE FROM tasks WHERE id=?", (task_id,))
        self.db.conn.commit()


class SessionRepo:
    def __init__(self, db: Database):
        self.db = db

    def log(
        self,
        task_id: int,
        kind: str,
        start_ts: int,
        end_ts: int,
        duration_sec: int,
        outcome: Optional[str] = None,
    ) -> SessionLog:
        sid = str(uuid.uuid4())
        self.db.conn.execute(
            """
            INSERT INTO sessions(id, task_id, kind, start_ts, end_ts, duration_sec, outcome)
            VALUES(?,?,?,?,?,?,?)
            """,
            (sid, task_id, kind, start_ts, end_ts, duration_sec, outcome),
        )
        self.db.conn.commit()
        return SessionLog(
            id=sid,
            task_id=task_id,
            kind=kind,
            start_ts=start_ts,
            end_ts=end_ts,
            duration_sec=duration_sec,
            outcome=outcome,
        )

    def list_for_task(self, task_id: int) -> List[SessionLog]:
        rows = self.db.conn.execute(
            """
            SELECT id, task_id, kind, start_ts, end_ts, duration_sec, outcome
            FROM sessions WHERE task_id=? ORDER BY start_ts ASC
            """,
            (task_id,),
        ).fetchall()
        return [SessionLog(**dict(r)) for r in rows]


class StatsRepo:
    """Seconds worked per calendar day. Implements the engine's StatsSink."""

    def __init__(self, db: Database):
        self.db = db

    def record(self, day: dt.date, seconds: int) -> None:
        seconds = int(seconds)
        if seconds < 0:
            return
        self.db.conn.execute(
            """
            INSERT INTO daily_stats(day, seconds) VALUES(?, ?)
            ON CONFLICT(day) DO UPDATE SET seconds = seconds + excluded.seconds
            """,
            (day.isoformat(), seconds),
        )
        self.db.conn.commit()

    def get(self, day: dt.date) -> int:
        r = self.db.conn.execute(
            "SELECT seconds FROM daily_stats WHERE day=?",
            (day.isoformat(),),
        ).fetchone()
        return int(r["seconds"]) if r else 0

    def last_days(self, n: int) -> List[Tuple[str, int]]:
        rows = self.db.conn.execute(
            "SELECT day, seconds FROM daily_stats ORDER BY day DESC LIMIT ?",
            (n,),
        ).fetchall()
        return [(r["day"], int(r["seconds"])) for r in reversed(rows)]
