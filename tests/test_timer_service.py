# tests/test_timer_service.py

from __future__ import annotations

import datetime as dt

import pytest

from app import AppContext
from core.session_engine import ExitReason, Phase, SessionResult, TaskAlreadyCompleted
from core.signals import Signal
from domain.models import TaskStatus
from storage.repos import SessionRepo

from .fakes import ProgressRecorder, ScriptedSignals


def _today_seconds(app: AppContext) -> int:
    return app.stats.days.get(dt.date.today())


def test_expired_session_is_persisted_and_logged(app: AppContext) -> None:
    task = app.tasks.create_task("write")
    progress = ProgressRecorder()
    app.timer.set_on_progress(progress)

    result = app.timer.run(task.id)

    assert isinstance(result, SessionResult)
    assert result.reason == ExitReason.EXPIRED
    stored = app.tasks.get_task(task.id)
    assert stored.pomodoros_completed == 1
    assert stored.total_pomodoro_time == 5
    assert stored.current_pomodoro_time == 0
    # recorded once, by the engine
    assert _today_seconds(app) == 5

    logs = SessionRepo(app.db).list_for_task(task.id)
    assert [(s.kind, s.duration_sec, s.outcome) for s in logs] == [
        ("work", 5, "expired"),
        ("short_break", 2, "expired"),
    ]
    assert progress.remaining(Phase.WORK) == [5, 4, 3, 2, 1]
    assert app.stats.total_task_work_sec(task.id) == 5


def test_stopped_session_keeps_partial_time_and_reports_it(
    app: AppContext, signals: ScriptedSignals
) -> None:
    task = app.tasks.create_task("write")
    signals.schedule(3, Signal.STOP)

    result = app.timer.run(task.id)

    assert result.reason == ExitReason.STOPPED_BY_USER
    stored = app.tasks.get_task(task.id)
    assert stored.current_pomodoro_time == 3
    assert stored.total_pomodoro_time == 0
    assert stored.pomodoros_completed == 0
    assert _today_seconds(app) == 3
    logs = SessionRepo(app.db).list_for_task(task.id)
    assert [(s.kind, s.duration_sec, s.outcome) for s in logs] == [("work", 3, "stopped")]


def test_complete_now_persists_completed_status(app: AppContext, signals: ScriptedSignals) -> None:
    task = app.tasks.create_task("write")
    signals.schedule(2, Signal.COMPLETE_NOW)

    result = app.timer.run(task.id)

    assert result.task_marked_done is True
    stored = app.tasks.get_task(task.id)
    assert stored.status == TaskStatus.COMPLETED
    assert stored.current_pomodoro_time == 2
    assert _today_seconds(app) == 2


def test_completed_task_is_not_started(app: AppContext) -> None:
    task = app.tasks.create_task("done already")
    app.tasks.complete_task(task.id)

    result = app.timer.run(task.id)

    assert result == TaskAlreadyCompleted(task_id=task.id)
    assert SessionRepo(app.db).list_for_task(task.id) == []
    assert _today_seconds(app) == 0


def test_immediate_stop_saves_nothing(app: AppContext, signals: ScriptedSignals) -> None:
    task = app.tasks.create_task("write")
    signals.schedule(0, Signal.STOP)

    result = app.timer.run(task.id)

    assert result.elapsed == 0
    assert result.needs_save is False
    assert _today_seconds(app) == 0


def test_unknown_task(app: AppContext) -> None:
    with pytest.raises(ValueError, match="Task not found."):
        app.timer.run(99)


def test_cadence_carries_over_between_runs(app: AppContext) -> None:
    task = app.tasks.create_task("write")

    phases = [app.timer.run(task.id).break_phase for _ in range(4)]

    assert phases == [Phase.SHORT_BREAK] * 3 + [Phase.LONG_BREAK]
    assert app.tasks.get_task(task.id).pomodoros_completed == 4


def test_task_is_saved_before_the_break_starts(app: AppContext) -> None:
    task = app.tasks.create_task("write")

    def interrupt(progress) -> None:
        if progress.phase != Phase.WORK:
            raise KeyboardInterrupt

    app.timer.set_on_progress(interrupt)

    with pytest.raises(KeyboardInterrupt):
        app.timer.run(task.id)

    stored = app.tasks.get_task(task.id)
    assert stored.pomodoros_completed == 1
    assert stored.total_pomodoro_time == 5
    assert stored.current_pomodoro_time == 0
    assert _today_seconds(app) == 5
