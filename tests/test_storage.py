# tests/test_storage.py

from __future__ import annotations

import datetime as dt
import sqlite3
from pathlib import Path

import pytest

from domain.models import TaskStatus
from storage.db import Database
from storage.repos import SessionRepo, StatsRepo, TaskRepo


@pytest.fixture()
def db(tmp_path: Path) -> Database:
    d = Database(tmp_path / "data" / "test.db")
    d.init_schema()
    yield d
    d.close()


def test_task_ids_are_assigned_monotonically(db: Database) -> None:
    repo = TaskRepo(db)
    a = repo.create("first")
    b = repo.create("second")
    repo.delete_task(b.id)
    c = repo.create("third")

    assert (a.id, b.id) == (1, 2)
    assert c.id == 3
    assert [t.title for t in repo.list()] == ["first", "third"]


def test_task_save_roundtrip_keeps_created_at(db: Database) -> None:
    repo = TaskRepo(db)
    task = repo.create("write", created_at=1_700_000_000)
    task.add_time(30)
    task.complete_pomodoro()
    task.add_time(7)
    task.mark_complete()
    task.created_at = 1
    repo.save(task)

    loaded = repo.get(task.id)
    assert loaded.status == TaskStatus.COMPLETED
    assert loaded.pomodoros_completed == 1
    assert loaded.total_pomodoro_time == 30
    assert loaded.current_pomodoro_time == 7
    assert loaded.created_at == 1_700_000_000


def test_list_by_status(db: Database) -> None:
    repo = TaskRepo(db)
    repo.create("a")
    done = repo.create("b")
    done.mark_complete()
    repo.save(done)

    assert [t.title for t in repo.list(TaskStatus.PENDING)] == ["a"]
    assert [t.title for t in repo.list(TaskStatus.COMPLETED)] == ["b"]


def test_delete_task_drops_its_sessions(db: Database) -> None:
    tasks = TaskRepo(db)
    sessions = SessionRepo(db)
    task = tasks.create("t")
    sessions.log(task.id, "work", 10, 20, 10, "expired")

    tasks.delete_task(task.id)

    assert tasks.get(task.id) is None
    assert sessions.list_for_task(task.id) == []


def test_session_log(db: Database) -> None:
    sessions = SessionRepo(db)
    sessions.log(1, "work", 100, 125, 25, "expired")
    sessions.log(1, "short_break", 125, 130, 5, "expired")

    logs = sessions.list_for_task(1)
    assert [(s.kind, s.duration_sec, s.outcome) for s in logs] == [
        ("work", 25, "expired"),
        ("short_break", 5, "expired"),
    ]


def test_stats_accumulate_per_day(db: Database) -> None:
    stats = StatsRepo(db)
    d1 = dt.date(2026, 10, 18)
    d2 = dt.date(2026, 10, 19)
    stats.record(d1, 1500)
    stats.record(d1, 300)
    stats.record(d2, 60)
    stats.record(d2, -10)

    assert stats.get(d1) == 1800
    assert stats.get(d2) == 60
    assert stats.get(dt.date(2026, 1, 1)) == 0


def test_stats_last_days_returns_most_recent_ascending(db: Database) -> None:
    stats = StatsRepo(db)
    for day in range(1, 11):
        stats.record(dt.date(2026, 10, day), day * 60)

    last = stats.last_days(7)
    assert [d for d, _ in last] == [f"2026-10-{day:02d}" for day in range(4, 11)]
    assert last[-1] == ("2026-10-10", 600)


def test_init_schema_migrates_sessions_without_outcome(tmp_path: Path) -> None:
    path = tmp_path / "old.db"
    conn = sqlite3.connect(path)
    conn.execute(
        """
        CREATE TABLE sessions (
            id TEXT PRIMARY KEY,
            task_id INTEGER NOT NULL,
            kind TEXT NOT NULL,
            start_ts INTEGER NOT NULL,
            end_ts INTEGER,
            duration_sec INTEGER
        )
        """
    )
    conn.execute("INSERT INTO sessions VALUES('x', 1, 'work', 1, 2, 1)")
    conn.commit()
    conn.close()

    db = Database(path)
    db.init_schema()
    try:
        logs = SessionRepo(db).list_for_task(1)
        assert len(logs) == 1
        assert logs[0].outcome is None
        version = db.conn.execute(
            "SELECT value FROM schema_meta WHERE key='schema_version'"
        ).fetchone()["value"]
        assert version == "2"
    finally:
        db.close()
