# tests/test_services.py

from __future__ import annotations

import datetime as dt
import os
from pathlib import Path

import pytest
import yaml

from app import AppContext
from domain.models import SessionConfig, Task, TaskStatus
from services.config_service import ConfigError, ConfigService
from services.notes_service import NotesService


# ----- tasks -----
def test_create_task_strips_title_and_creates_notes(app: AppContext) -> None:
    task = app.tasks.create_task("  Write report  ")

    assert task.title == "Write report"
    assert task.status == TaskStatus.PENDING
    path = app.notes.notes_path(task)
    assert path.exists()
    assert path.read_text(encoding="utf-8").startswith("# Notes for Task 1: Write report\n")


def test_create_task_rejects_empty_title(app: AppContext) -> None:
    with pytest.raises(ValueError, match="empty"):
        app.tasks.create_task("   ")


def test_unknown_task_id(app: AppContext) -> None:
    with pytest.raises(ValueError, match="Task not found."):
        app.tasks.get_task(42)
    with pytest.raises(ValueError, match="Task not found."):
        app.tasks.complete_task(42)
    with pytest.raises(ValueError, match="Task not found."):
        app.tasks.delete_task(42)
    with pytest.raises(ValueError, match="Task not found."):
        app.tasks.save_task(Task(id=42, title="ghost"))


def test_complete_and_delete(app: AppContext) -> None:
    a = app.tasks.create_task("a")
    b = app.tasks.create_task("b")

    app.tasks.complete_task(a.id)
    app.tasks.delete_task(b.id)

    tasks = app.tasks.list_tasks()
    assert [(t.id, t.status) for t in tasks] == [(a.id, TaskStatus.COMPLETED)]


# ----- stats -----
def test_summary_without_tasks(app: AppContext) -> None:
    s = app.stats.summary()
    assert s.total_tasks == 0
    assert s.completion_rate == 0.0


def test_summary_counts(app: AppContext) -> None:
    for title in ("a", "b", "c"):
        app.tasks.create_task(title)
    app.tasks.complete_task(1)
    t = app.tasks.get_task(2)
    t.add_time(1500)
    t.complete_pomodoro()
    app.tasks.save_task(t)

    s = app.stats.summary()
    assert s.total_tasks == 3
    assert s.completed_tasks == 1
    assert s.completion_rate == 33.33
    assert s.total_pomodoros == 1
    assert s.total_time_sec == 1500


def test_today_total(app: AppContext) -> None:
    app.stats.today = lambda: dt.date(2026, 10, 19)
    app.stats.record(dt.date(2026, 10, 19), 120)
    app.stats.record(dt.date(2026, 10, 18), 999)
    assert app.stats.total_today_work_sec() == 120


# ----- config -----
def test_missing_config_writes_defaults(tmp_path: Path) -> None:
    svc = ConfigService(tmp_path / "sub" / "config.yml")

    cfg = svc.load()

    assert cfg == SessionConfig()
    saved = yaml.safe_load((tmp_path / "sub" / "config.yml").read_text())
    assert saved["work_duration"] == 1500
    assert saved["pomodoros_before_long_break"] == 4


def test_partial_config_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("work_duration: 3000\nextra: 1\n")

    cfg = ConfigService(path).load()

    assert cfg.work_duration == 3000
    assert cfg.break_duration == 300


@pytest.mark.parametrize(
    "text",
    [
        "work_duration: 0\n",
        "break_duration: -5\n",
        "pomodoros_before_long_break: four\n",
        "- just\n- a list\n",
        "work_duration: [unclosed\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, text: str) -> None:
    path = tmp_path / "config.yml"
    path.write_text(text)
    with pytest.raises(ConfigError):
        ConfigService(path).load()


def test_update_converts_minutes(tmp_path: Path) -> None:
    svc = ConfigService(tmp_path / "config.yml")

    cfg = svc.update(work_minutes=50, long_break_minutes=20, pomodoros_before_long_break=3)

    assert cfg.work_duration == 3000
    assert cfg.break_duration == 300
    assert cfg.long_break_duration == 1200
    assert cfg.pomodoros_before_long_break == 3
    assert svc.load() == cfg


def test_update_rejects_zero(tmp_path: Path) -> None:
    svc = ConfigService(tmp_path / "config.yml")
    with pytest.raises(ConfigError):
        svc.update(break_minutes=0)
    assert svc.load() == SessionConfig()


# ----- notes -----
def test_notes_path_replaces_unsafe_characters(tmp_path: Path) -> None:
    notes = NotesService(tmp_path)
    task = Task(id=3, title="Fix bug #12 (urgent)")
    assert notes.notes_path(task) == tmp_path / "task_3_Fix_bug__12__urgent_.md"


def test_append_session_notes(tmp_path: Path) -> None:
    notes = NotesService(tmp_path)
    task = Task(id=1, title="t", created_at=0)

    notes.append_session_notes(task, "  did the thing\n")
    notes.append_session_notes(task, "   ")

    text = notes.read(task)
    assert text.startswith("# Notes for Task 1: t\nCreated at: ")
    assert text.count("--- Notes from Pomodoro session ---") == 1
    assert text.endswith("--- Notes from Pomodoro session ---\ndid the thing\n")


def test_export_html(tmp_path: Path) -> None:
    notes = NotesService(tmp_path / "notes")
    task = Task(id=1, title="Report", created_at=0)
    notes.create_notes_file(task)
    notes.append_session_notes(task, "- [x] outline\n- [ ] draft")

    out = notes.export_html(task, tmp_path / "out" / "report.html")

    html = out.read_text(encoding="utf-8")
    assert "<title>Notes for Task 1: Report</title>" in html
    assert "Session 1</h2>" in html
    assert "task-list-item" in html


@pytest.mark.skipif(os.name == "nt", reason="uses the POSIX `true` command")
def test_open_in_editor_creates_missing_file(tmp_path: Path) -> None:
    notes = NotesService(tmp_path, editor="true")
    task = Task(id=5, title="t")

    assert notes.open_in_editor(task) == 0
    assert notes.notes_path(task).exists()
