# -*- coding: utf-8 -*-

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass
class Task:
    """
    One tracked task.

    Time fields only move through add_time / complete_pomodoro / mark_complete.
    While a session runs the task belongs to the engine; nothing else may
    mutate it until start_session returns.
    """

    id: int
    title: str
    status: TaskStatus = TaskStatus.PENDING
    pomodoros_completed: int = 0
    total_pomodoro_time: int = 0
    current_pomodoro_time: int = 0
    created_at: int = field(default_factory=lambda: int(time.time()))

    def add_time(self, seconds: int) -> None:
        seconds = int(seconds)
        if seconds < 0:
            return
        self.current_pomodoro_time += seconds

    def complete_pomodoro(self) -> None:
        self.pomodoros_completed += 1
        self.total_pomodoro_time += self.current_pomodoro_time
        self.current_pomodoro_time = 0

    def mark_complete(self) -> None:
        self.status = TaskStatus.COMPLETED

    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


@dataclass(frozen=True)
class SessionConfig:
    work_duration: int = 25 * 60
    break_duration: int = 5 * 60
    long_break_duration: int = 15 * 60
    pomodoros_before_long_break: int = 4

    def __post_init__(self):
        for name in (
            "work_duration",
            "break_duration",
            "long_break_duration",
            "pomodoros_before_long_break",
        ):
            value = getattr(self, name)
            # bool is an int subclass; True is not a duration
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}.")


@dataclass(frozen=True)
class SessionLog:
    id: str
    task_id: int
    kind: str  # work | short_break | long_break
    start_ts: int
    end_ts: Optional[int]
    duration_sec: Optional[int]
    outcome: Optional[str] = None  # expired | stopped | completed
