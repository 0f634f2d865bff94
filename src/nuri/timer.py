"""nuri.timer
Runs a callback over and over on a worker thread until told to stop.
"""

import logging
import threading

from typing import Callable, Self

LOGGER = logging.getLogger(__name__)


class CallbackTimer:
    """Invokes a callback repeatedly, sleeping ``interval`` seconds between invocations.

    stop() wakes a sleeping worker immediately and waits for a running callback to return.
    An exception raised by the callback ends the loop and is left to threading.excepthook.
    """

    def __init__(self: Self) -> None:
        self._running: threading.Event = threading.Event()
        self._wake: threading.Event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self: Self, interval: float, callback: Callable[[], object]) -> None:
        if interval < 0:
            raise ValueError(f"interval must be non-negative, got {interval!r}")
        if self._running.is_set():
            self.stop()
        # Each run gets its own wake event so a stale worker cannot be woken by the next run.
        self._wake = threading.Event()
        self._running.set()
        self._thread = threading.Thread(
            target=self._loop,
            args=(interval, callback, self._wake),
            name=f"CallbackTimer-{id(self):x}",
            daemon=True,
        )
        LOGGER.debug("starting %s every %ss", self._thread.name, interval)
        self._thread.start()

    def _loop(self: Self, interval: float, callback: Callable[[], object], wake: threading.Event) -> None:
        try:
            while self._running.is_set() and not wake.is_set():
                callback()
                wake.wait(interval)
        finally:
            if self._wake is wake:
                self._running.clear()

    def stop(self: Self) -> None:
        self._running.clear()
        self._wake.set()
        thread: threading.Thread | None = self._thread
        if thread is None:
            return
        LOGGER.debug("stopping %s", thread.name)
        # stop() may be called from the callback, and a thread cannot join itself.
        if thread is not threading.current_thread() and thread.is_alive():
            thread.join()

    def join(self: Self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def is_running(self: Self) -> bool:
        return self._running.is_set() and self._thread is not None and self._thread.is_alive()

    def __enter__(self: Self) -> Self:
        return self

    def __exit__(self: Self, *exc_info: object) -> None:
        self.stop()
