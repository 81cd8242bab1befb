# tether/core/recording/async_writer.py
from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from queue import Queue, Empty
from typing import Callable, List, Optional


class AsyncWriter:
    """
    Threaded, batched line writer.

    Lines are queued by write() and appended to `path` every flush_interval
    seconds (and once more on close()).
    """

    def __init__(
        self,
        path: Path,
        write_func: Optional[Callable[[Path, List[str]], None]] = None,
        flush_interval: float = 0.5,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._path = Path(path)
        self._write_func = write_func or self._append_lines
        self._flush_interval = float(flush_interval)

        self._log = logger or logging.getLogger(__name__)

        self._queue: Queue[str] = Queue()
        self._stop_event = threading.Event()

        self._thread = threading.Thread(target=self._worker, name=f"tether-writer-{self._path.name}", daemon=True)
        self._thread.start()

    @property
    def path(self) -> Path:
        return self._path

    # ---------------- Public API ----------------
    def write(self, line: str) -> None:
        """Queue a line for writing (no-op after close())."""
        if self._stop_event.is_set():
            return
        self._queue.put(line)

    def close(self) -> None:
        """Write out what is queued and stop the writer thread."""
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        self._thread.join(timeout=None)

    # ---------------- Internal ----------------
    def _worker(self) -> None:
        pending: List[str] = []
        due = time.monotonic() + self._flush_interval

        while True:
            stopping = self._stop_event.is_set()
            pending.extend(self._take_queued(block=not stopping))

            if pending and (stopping or time.monotonic() >= due):
                self._flush_safe(pending)
                pending = []
                due = time.monotonic() + self._flush_interval

            if stopping and self._queue.empty():
                return

    def _take_queued(self, *, block: bool) -> List[str]:
        lines: List[str] = []
        try:
            lines.append(self._queue.get(timeout=0.1) if block else self._queue.get_nowait())
            while True:
                lines.append(self._queue.get_nowait())
        except Empty:
            pass
        return lines

    def _flush_safe(self, batch: List[str]) -> None:
        try:
            self._write_func(self._path, batch)
        except Exception:
            # batch is dropped, the writer keeps going
            self._log.exception("ASYNC_WRITER_FLUSH_FAILED path=%s batch_len=%d", self._path, len(batch))

    @staticmethod
    def _append_lines(path: Path, batch: List[str]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            for line in batch:
                f.write(line + "\n")
