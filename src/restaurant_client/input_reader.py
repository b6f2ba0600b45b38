"""Background line reader so the countdown can keep ticking while we wait on stdin."""

from __future__ import annotations

import queue
import sys
import threading
from typing import TextIO


class LineReader:
    """Read lines from a stream on a daemon thread into a single-consumer queue.

    `None` is queued once the stream reaches EOF.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._lines: queue.Queue[str | None] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._eof = False

    @property
    def eof(self) -> bool:
        return self._eof

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="stdin-reader", daemon=True)
        self._thread.start()

    def read_line(self, timeout: float | None = None) -> str | None:
        """Return the next line without its newline, or None at EOF.

        Raises queue.Empty when `timeout` expires first.
        """
        if self._eof:
            return None
        self.start()
        line = self._lines.get(timeout=timeout)
        if line is None:
            self._eof = True
        return line

    def _run(self) -> None:
        try:
            for line in iter(self._stream.readline, ""):
                self._lines.put(line.rstrip("\r\n"))
        finally:
            self._lines.put(None)
