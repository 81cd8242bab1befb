# tether/core/recording/events.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from tether.core.recording.async_writer import AsyncWriter
from tether.interfaces.event_sink import EventSink
from tether.protocol.events import TetherEvent


@dataclass
class EventTraceLogger(EventSink):
    """
    Records session events as JSON lines:

        {"address": "...", "kind": "position", "x": 0.12, ..., "ts_utc": "..."}

    Also mirrors each event to `logger` at DEBUG level.
    """
    logger: logging.Logger
    file_path: Optional[Path] = None
    flush_interval_s: float = 0.5

    def __post_init__(self) -> None:
        self._writer: Optional[AsyncWriter] = None
        if self.file_path is not None:
            self.file_path = Path(self.file_path)
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self._writer = AsyncWriter(
                path=self.file_path,
                flush_interval=self.flush_interval_s,
                logger=self.logger,
            )

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    def on_event(self, address: str, event: TetherEvent) -> None:
        self.logger.debug("EVENT address=%s %s", address, event)
        if self._writer is None:
            return

        out = {"address": address}
        out.update(event.as_dict())
        out["ts_utc"] = datetime.now(timezone.utc).isoformat()

        self._writer.write(json.dumps(out, ensure_ascii=False))
