# -*- coding: utf-8 -*-

import queue
from enum import Enum
from typing import Optional, Protocol


class Signal(str, Enum):
    TOGGLE_PAUSE = "toggle_pause"
    STOP = "stop"
    COMPLETE_NOW = "complete_now"


class SignalSource(Protocol):
    def poll(self, timeout: float) -> Optional[Signal]:
        """Wait up to `timeout` seconds for the next signal; None if none came."""
        ...


class SignalQueue:
    """
    Thread-safe channel between an input listener and the session engine.
    Producers call put() from any thread; the engine polls with a bounded wait.
    """

    def __init__(self):
        self._q: "queue.Queue[Signal]" = queue.Queue()

    def put(self, signal: Signal) -> None:
        self._q.put(signal)

    def poll(self, timeout: float) -> Optional[Signal]:
        try:
            if timeout <= 0:
                return self._q.get_nowait()
            return self._q.get(timeout=timeout)
        except queue.Empty:
            return None

    def clear(self) -> None:
        # drop keys pressed before a session started
        while True:
            try:
                self._q.get_nowait()
            except queue.Empty:
                return
