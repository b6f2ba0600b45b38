"""Periodic tick sources that drive the order countdown."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Protocol

TickCallback = Callable[[], None]


class TickSource(Protocol):
    """Anything that can call back once per tick until stopped."""

    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class IntervalTickSource:
    """Fire a callback on a daemon thread at a fixed real-time interval.

    Ticks are delivered sequentially from one thread, so they arrive in
    strictly increasing order. `stop()` is idempotent and may be called
    from inside the callback itself.
    """

    def __init__(
        self,
        interval_seconds: float = 1.0,
        *,
        logger: logging.Logger | None = None,
        name: str = "order-tick-source",
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0.")
        self.interval_seconds = interval_seconds
        self.logger = logger or logging.getLogger("restaurant_client")
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.ticks_fired = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def start(self, callback: TickCallback) -> None:
        if self._thread is not None:
            raise RuntimeError("Tick source already started.")
        self._thread = threading.Thread(
            target=self._run,
            args=(callback,),
            name=self._name,
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(self.interval_seconds * 2, 1.0))

    def _run(self, callback: TickCallback) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.ticks_fired += 1
            try:
                callback()
            except Exception:
                self.logger.exception("Tick callback failed; stopping tick source.")
                self._stop_event.set()
