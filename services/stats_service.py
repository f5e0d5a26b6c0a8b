# -*- coding: utf-8 -*-

import datetime as dt
from dataclasses import dataclass
from typing import Callable, List, Tuple

from domain.models import TaskStatus
from storage.db import Database
from storage.repos import StatsRepo, TaskRepo


@dataclass(frozen=True)
class StatsSummary:
    total_tasks: int
    completed_tasks: int
    completion_rate: float  # percent, 2dp
    total_pomodoros: int
    total_time_sec: int


class StatsService:
    def __init__(self, db: Database, today: Callable[[], dt.date] = dt.date.today):
        self.db = db
        self.days = StatsRepo(db)
        self.tasks = TaskRepo(db)
        self.today = today

    def record(self, day: dt.date, seconds: int) -> None:
        self.days.record(day, seconds)

    def summary(self) -> StatsSummary:
        tasks = self.tasks.list()
        total = len(tasks)
        completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
        rate = round(completed / total * 100, 2) if total else 0.0
        return StatsSummary(
            total_tasks=total,
            completed_tasks=completed,
            completion_rate=rate,
            total_pomodoros=sum(t.pomodoros_completed for t in tasks),
            total_time_sec=sum(t.total_pomodoro_time for t in tasks),
        )

    def last_days(self, n: int = 7) -> List[Tuple[str, int]]:
        return self.days.last_days(n)

    def total_today_work_sec(self) -> int:
        return self.days.get(self.today())

    def total_task_work_sec(self, task_id: int) -> int:
        row = self.db.connect().execute(
            """
            SELECT COALESCE(SUM(duration_sec), 0) AS total
            FROM sessions
            WHERE kind='work'
              AND end_ts IS NOT NULL
              AND task_id = ?
            """,
            (task_id,),
        ).fetchone()
        return int(row["total"] or 0)
