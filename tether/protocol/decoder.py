from __future__ import annotations

import logging
from typing import Iterator, Optional

from .defs import FRAME_TERMINATOR, MAX_FRAGMENT


class FrameDecoder:
    """
    Incremental splitter for terminator-delimited text frames.

    push() appends whatever the transport returned; pull() hands out one
    complete frame (without its terminator) or None, keeping any trailing
    partial frame for the next push(). Frames longer than max_fragment are
    dropped whole. Output never depends on how the input was chunked.
    """

    def __init__(
        self,
        terminator: str = FRAME_TERMINATOR,
        *,
        max_fragment: Optional[int] = MAX_FRAGMENT,
        logger: Optional[logging.Logger] = None,
    ):
        if len(terminator) != 1:
            raise ValueError("terminator must be a single character")
        self.terminator = terminator
        self.max_fragment = max_fragment
        self._buffer = ""
        # inside an overlong frame, waiting for its terminator
        self._discarding = False
        self._log = logger or logging.getLogger(__name__)

    @property
    def buffer(self) -> str:
        return self._buffer

    def __len__(self) -> int:
        return len(self._buffer)

    # ---------------- Public API ----------------
    def push(self, text: str) -> None:
        """Append received text to the buffer."""
        self._buffer += text
        self._log.debug("Decoder fed %d chars, buffer_len=%d", len(text), len(self._buffer))

    def pull(self) -> Optional[str]:
        """Return the next complete frame, or None if only a fragment remains."""
        while True:
            idx = self._buffer.find(self.terminator)
            if idx < 0:
                self._check_fragment()
                return None

            frame = self._buffer[:idx]
            self._buffer = self._buffer[idx + 1:]

            if self._discarding:
                # tail of a frame whose head was already dropped
                self._discarding = False
                continue
            if self._too_long(len(frame)):
                self._log.warning("FRAME_OVERFLOW len=%d max=%d, frame discarded", len(frame), self.max_fragment)
                continue
            return frame

    def frames(self) -> Iterator[str]:
        """Drain every complete frame currently buffered, in arrival order."""
        while True:
            frame = self.pull()
            if frame is None:
                return
            yield frame

    def clear(self) -> None:
        self._buffer = ""
        self._discarding = False

    # ---------------- Helpers ----------------
    def _too_long(self, length: int) -> bool:
        return self.max_fragment is not None and length > self.max_fragment

    def _check_fragment(self) -> None:
        if self._discarding:
            self._buffer = ""
            return
        if not self._too_long(len(self._buffer)):
            return
        self._log.warning(
            "FRAGMENT_OVERFLOW len=%d max=%d, discarding until next terminator",
            len(self._buffer),
            self.max_fragment,
        )
        self._buffer = ""
        self._discarding = True
