# -*- coding: utf-8 -*-

import logging
import os
import sys
import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from core.signals import Signal, SignalQueue

if os.name == "nt":  # pragma: no cover
    import msvcrt
else:
    import select
    import termios
    import tty

logger = logging.getLogger(__name__)

KEYMAP = {
    "p": Signal.TOGGLE_PAUSE,
    "s": Signal.STOP,
    "c": Signal.COMPLETE_NOW,
}

KEY_HINT = "Press 'p' to pause/resume, 's' to stop, or 'c' to complete"


def map_key(key: Optional[str]) -> Optional[Signal]:
    if not key:
        return None
    return KEYMAP.get(key.lower())


@contextmanager
def _cbreak(fd: int) -> Iterator[None]:
    """Single-key reads without echo; no-op when fd is not a terminal."""
    if os.name == "nt" or not os.isatty(fd):
        yield
        return
    old = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


class KeypressListener:
    """
    Background thread: terminal keys -> SignalQueue.
    p / s / c map to the three control signals; anything else is dropped.
    A failed read counts as "no key" for that poll.
    """

    def __init__(
        self,
        sink: SignalQueue,
        fd: Optional[int] = None,
        poll_interval: float = 0.1,
    ):
        self.sink = sink
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def __enter__(self) -> "KeypressListener":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="keypress-listener", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.poll_interval * 5)
            self._thread = None

    def _run(self) -> None:
        try:
            with _cbreak(self.fd):
                while not self._stop.is_set():
                    signal = map_key(self._read_key())
                    if signal is not None:
                        logger.debug("Key mapped to %s.", signal.value)
                        self.sink.put(signal)
        except (OSError, ValueError):
            logger.warning("Keypress listener stopped; controls disabled.", exc_info=True)

    def _read_key(self) -> Optional[str]:
        if os.name == "nt":  # pragma: no cover
            if msvcrt.kbhit():
                return msvcrt.getwch()
            time.sleep(self.poll_interval)
            return None

        try:
            ready, _, _ = select.select([self.fd], [], [], self.poll_interval)
            if not ready:
                return None
            data = os.read(self.fd, 1)
        except (OSError, termios.error):
            logger.debug("Key read failed; treating as no input.", exc_info=True)
            time.sleep(self.poll_interval)
            return None
        if not data:
            # EOF: nothing more will arrive
            self._stop.set()
            return None
        return data.decode("utf-8", errors="ignore")
