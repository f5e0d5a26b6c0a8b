#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from dataclasses import dataclass
from typing import Optional

from core.settings import Settings
from core.signals import SignalQueue, SignalSource
from services.config_service import ConfigService
from services.notes_service import NotesService
from services.stats_service import StatsService
from services.task_service import TaskService
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import SessionRepo


@dataclass
class AppContext:
    settings: Settings
    db: Database
    tasks: TaskService
    stats: StatsService
    notes: NotesService
    config: ConfigService
    timer: TimerService
    signals: SignalSource


def build_context(
    settings: Settings,
    signals: Optional[SignalSource] = None,
    tick_seconds: float = 1.0,
) -> AppContext:
    db = Database(db_path=settings.db_path)
    db.init_schema()

    notes = NotesService(settings.notes_dir, editor=settings.editor)
    task_service = TaskService(db, notes=notes)
    stats_service = StatsService(db)
    config_service = ConfigService(settings.config_path)
    signals = signals if signals is not None else SignalQueue()

    timer_service = TimerService(
        task_service,
        SessionRepo(db),
        stats_service,
        config_service,
        signals=signals,
        tick_seconds=tick_seconds,
    )

    return AppContext(
        settings=settings,
        db=db,
        tasks=task_service,
        stats=stats_service,
        notes=notes,
        config=config_service,
        timer=timer_service,
        signals=signals,
    )


def main():
    from ui.cli import cli

    cli(prog_name="pomoterm")


if __name__ == "__main__":
    main()
