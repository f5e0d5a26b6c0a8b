# -*- coding: utf-8 -*-

import datetime as dt
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Union

from core.signals import Signal, SignalSource
from domain.models import SessionConfig, Task

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


class EngineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"
    STOPPED_BY_USER = "stopped_by_user"
    COMPLETED_BY_USER = "completed_by_user"


class ExitReason(str, Enum):
    EXPIRED = "expired"
    STOPPED_BY_USER = "stopped"
    COMPLETED_BY_USER = "completed"


@dataclass(frozen=True)
class Progress:
    phase: Phase
    seconds_remaining: int
    paused: bool


@dataclass(frozen=True)
class TaskAlreadyCompleted:
    task_id: int


@dataclass(frozen=True)
class SessionResult:
    reason: ExitReason
    completed: bool
    elapsed: int
    task_marked_done: bool = False
    break_phase: Optional[Phase] = None
    break_elapsed: int = 0
    break_aborted: bool = False
    paused_ticks: int = 0

    @property
    def needs_save(self) -> bool:
        """True when the task was mutated and the caller has to persist it."""
        return self.completed or self.task_marked_done or self.elapsed > 0


class StatsSink(Protocol):
    def record(self, day: dt.date, seconds: int) -> None:
        ...


class _NoSignals:
    def poll(self, timeout: float) -> Optional[Signal]:
        if timeout > 0:
            time.sleep(timeout)
        return None


@dataclass
class _Countdown:
    phase: Phase
    duration: int
    elapsed: int = 0
    paused: bool = False
    pause_started: Optional[float] = None
    paused_ticks: int = 0
    exit_signal: Optional[Signal] = None

    @property
    def remaining(self) -> int:
        return max(0, self.duration - self.elapsed)


class SessionEngine:
    """
    Runs one timed work interval per start_session() call.

    - Countdown advances in logical ticks; work time is attributed to the task
      one second per running tick, never by timestamp subtraction.
    - Each tick waits on the signal source until the tick deadline; that wait is
      the only suspension point, so stop / complete exit within one tick.
    - completed_intervals lives as long as the engine instance and drives the
      short / long break cadence. reset_cadence() clears it.

    The engine never renders or persists; callers consume SessionResult.
    """

    def __init__(
        self,
        signals: Optional[SignalSource] = None,
        stats: Optional[StatsSink] = None,
        tick_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], dt.date] = dt.date.today,
    ):
        self.signals: SignalSource = signals or _NoSignals()
        self.stats = stats
        self.tick_seconds = float(tick_seconds)
        self.clock = clock
        self.today = today

        self.state = EngineState.IDLE
        self.completed_intervals = 0

        self._on_progress: Optional[Callable[[Progress], None]] = None

    # ----- Callbacks -----
    def set_on_progress(self, fn: Optional[Callable[[Progress], None]]) -> None:
        self._on_progress = fn

    def _emit(self, run: _Countdown) -> None:
        if self._on_progress:
            self._on_progress(
                Progress(
                    phase=run.phase,
                    seconds_remaining=run.remaining,
                    paused=run.paused,
                )
            )

    # ----- Public API -----
    def reset_cadence(self) -> None:
        self.completed_intervals = 0

    def break_phase_for(self, completed_intervals: int, config: SessionConfig) -> Phase:
        cadence = config.pomodoros_before_long_break
        if completed_intervals > 0 and completed_intervals % cadence == 0:
            return Phase.LONG_BREAK
        return Phase.SHORT_BREAK

    def start_session(
        self, task: Task, config: SessionConfig
    ) -> Union[SessionResult, TaskAlreadyCompleted]:
        if task.is_completed():
            logger.info("Refusing session for completed task %s.", task.id)
            return TaskAlreadyCompleted(task_id=task.id)

        logger.info(
            "Session started for task %s (%ss work).", task.id, config.work_duration
        )
        self.state = EngineState.RUNNING
        work = _Countdown(phase=Phase.WORK, duration=config.work_duration)
        self._run_countdown(work, task=task)

        if work.exit_signal == Signal.STOP:
            self.state = EngineState.STOPPED_BY_USER
            logger.info("Session stopped after %ss.", work.elapsed)
            return SessionResult(
                reason=ExitReason.STOPPED_BY_USER,
                completed=False,
                elapsed=work.elapsed,
                paused_ticks=work.paused_ticks,
            )

        if work.exit_signal == Signal.COMPLETE_NOW:
            task.mark_complete()
            self.state = EngineState.COMPLETED_BY_USER
            logger.info("Task %s marked done after %ss.", task.id, work.elapsed)
            return SessionResult(
                reason=ExitReason.COMPLETED_BY_USER,
                completed=False,
                elapsed=work.elapsed,
                task_marked_done=True,
                paused_ticks=work.paused_ticks,
            )

        return self._handle_completion(task, config, work)

    # ----- Internals -----
    def _handle_completion(
        self, task: Task, config: SessionConfig, work: _Countdown
    ) -> SessionResult:
        task.complete_pomodoro()
        self.completed_intervals += 1
        self.state = EngineState.EXPIRED
        worked = max(0, work.duration)
        if self.stats is not None:
            self.stats.record(self.today(), worked)

        phase = self.break_phase_for(self.completed_intervals, config)
        duration = (
            config.long_break_duration
            if phase == Phase.LONG_BREAK
            else config.break_duration
        )
        logger.info(
            "Pomodoro %s completed; %s for %ss.",
            self.completed_intervals,
            phase.value,
            duration,
        )

        rest = _Countdown(phase=phase, duration=duration)
        self._run_countdown(rest)
        self.state = EngineState.EXPIRED

        return SessionResult(
            reason=ExitReason.EXPIRED,
            completed=True,
            elapsed=worked,
            break_phase=phase,
            break_elapsed=rest.elapsed,
            break_aborted=rest.exit_signal is not None,
            paused_ticks=work.paused_ticks,
        )

    def _run_countdown(self, run: _Countdown, task: Optional[Task] = None) -> None:
        while run.elapsed < run.duration:
            self._emit(run)
            deadline = self.clock() + self.tick_seconds

            while True:
                signal = self._poll(deadline)
                if signal is None:
                    break
                if self._apply(run, signal, is_work=task is not None):
                    return

            # tick commit; signals seen during this tick are already applied
            if run.paused:
                run.paused_ticks += 1
                continue
            run.elapsed += 1
            if task is not None:
                task.add_time(1)

    def _poll(self, deadline: float) -> Optional[Signal]:
        while True:
            remaining = deadline - self.clock()
            try:
                signal = self.signals.poll(max(0.0, remaining))
            except OSError:
                logger.warning("Control input unavailable; no signal this tick.", exc_info=True)
                signal = None
                remaining = deadline - self.clock()
                if remaining > 0:
                    time.sleep(remaining)
            if signal is not None:
                return signal
            if self.clock() >= deadline:
                return None

    def _apply(self, run: _Countdown, signal: Signal, is_work: bool) -> bool:
        """
        Apply one control signal between tick commits.
        Returns True if the countdown must exit now.
        """
        logger.debug("Signal %s during %s.", signal.value, run.phase.value)

        if signal == Signal.TOGGLE_PAUSE:
            run.paused = not run.paused
            if run.paused:
                run.pause_started = self.clock()
                if is_work:
                    self.state = EngineState.PAUSED
            else:
                if run.pause_started is not None:
                    logger.debug(
                        "Resumed after %.1fs paused.", self.clock() - run.pause_started
                    )
                run.pause_started = None
                if is_work:
                    self.state = EngineState.RUNNING
            return False

        if signal == Signal.STOP:
            run.exit_signal = Signal.STOP
            return True

        if signal == Signal.COMPLETE_NOW and is_work:
            run.exit_signal = Signal.COMPLETE_NOW
            return True

        # complete-now during a break: nothing to complete
        return False
