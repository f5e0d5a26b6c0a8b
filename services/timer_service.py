# -*- coding: utf-8 -*-

import logging
import time
from typing import Callable, Optional, Union

from core.session_engine import (
    Phase,
    Progress,
    SessionEngine,
    SessionResult,
    TaskAlreadyCompleted,
)
from core.signals import SignalSource
from domain.models import SessionConfig, Task
from services.config_service import ConfigService
from services.stats_service import StatsService
from services.task_service import TaskService
from storage.repos import SessionRepo

logger = logging.getLogger(__name__)


def _now_ts() -> int:
    return int(time.time())


class TimerService:
    """
    Orchestrates:
    - SessionEngine runs (one engine per process, so break cadence carries over)
    - Saving the task once the work interval expires and after every session that mutated it
    - SQLite session logging (work + break phases)
    - Reporting partial work time to daily stats
    - Progress callbacks for the UI
    """

    def __init__(
        self,
        task_service: TaskService,
        session_repo: SessionRepo,
        stats_service: StatsService,
        config_service: ConfigService,
        signals: Optional[SignalSource] = None,
        tick_seconds: float = 1.0,
    ):
        self.task_service = task_service
        self.session_repo = session_repo
        self.stats_service = stats_service
        self.config_service = config_service

        self.engine = SessionEngine(
            signals=signals,
            stats=stats_service,
            tick_seconds=tick_seconds,
            today=stats_service.today,
        )
        self.engine.set_on_progress(self._emit_progress)

        self.active_task: Optional[Task] = None
        self._work_ended_ts: Optional[int] = None
        self._on_progress: Optional[Callable[[Progress], None]] = None

    # ----- Callbacks -----
    def set_on_progress(self, fn: Callable[[Progress], None]) -> None:
        self._on_progress = fn

    def _emit_progress(self, progress: Progress) -> None:
        if progress.phase != Phase.WORK and self._work_ended_ts is None:
            self._work_ended_ts = _now_ts()
            # stats already hold this interval; persist the task before the break
            if self.active_task is not None:
                self.task_service.save_task(self.active_task)
        if self._on_progress:
            self._on_progress(progress)

    # ----- Public API -----
    def run(
        self, task_id: int, config: Optional[SessionConfig] = None
    ) -> Union[SessionResult, TaskAlreadyCompleted]:
        task = self.task_service.get_task(task_id)
        cfg = config or self.config_service.load()

        self.active_task = task
        self._work_ended_ts = None
        start_ts = _now_ts()
        try:
            result = self.engine.start_session(task, cfg)
        finally:
            self.active_task = None

        if isinstance(result, TaskAlreadyCompleted):
            return result

        end_ts = _now_ts()
        if result.needs_save:
            self.task_service.save_task(task)

        self._log_sessions(task, result, start_ts, end_ts)

        # engine only reports full intervals; worked seconds still count for the day
        if not result.completed and result.elapsed > 0:
            self.stats_service.record(self.stats_service.today(), result.elapsed)

        logger.info(
            "Session for task %s ended: %s (%ss).",
            task.id,
            result.reason.value,
            result.elapsed,
        )
        return result

    # ----- Session logging internals -----
    def _log_sessions(
        self, task: Task, result: SessionResult, start_ts: int, end_ts: int
    ) -> None:
        work_end = self._work_ended_ts or end_ts
        self.session_repo.log(
            task_id=task.id,
            kind=Phase.WORK.value,
            start_ts=start_ts,
            end_ts=work_end,
            duration_sec=result.elapsed,
            outcome=result.reason.value,
        )
        if result.break_phase is not None:
            self.session_repo.log(
                task_id=task.id,
                kind=result.break_phase.value,
                start_ts=work_end,
                end_ts=end_ts,
                duration_sec=result.break_elapsed,
                outcome="stopped" if result.break_aborted else "expired",
            )
