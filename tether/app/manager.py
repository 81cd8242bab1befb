# tether/app/manager.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from tether.app.config import TetherConfig
from tether.core.context import Context
from tether.core.errors import SessionError
from tether.interfaces.event_sink import EventSink
from tether.runtime.session import TetherSession
from tether.runtime.state import Position, SessionStatus
from tether.transport.base import Transport

TransportBuilder = Callable[[str], Transport]  # address -> unopened transport


class SessionManager:
    """
    App-level registry of TetherSessions keyed by peer address.

    Owned by the host application; nothing here is process-global. Transports
    come from the metadata-driven TransportFactory unless a transport_builder
    is injected (tests, custom links).
    """

    def __init__(
        self,
        config: TetherConfig,
        *,
        context: Optional[Context] = None,
        transport_builder: Optional[TransportBuilder] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._log = logger or logging.getLogger(__name__)

        if transport_builder is None:
            context = context or Context.load(config.metadata_dir)
            transport_builder = self._factory_builder(context)
        self._context = context
        self._build_transport = transport_builder

        self._lock = threading.RLock()
        self._sessions: Dict[str, TetherSession] = {}

    @property
    def config(self) -> TetherConfig:
        return self._config

    @property
    def context(self) -> Optional[Context]:
        return self._context

    def _factory_builder(self, context: Context) -> TransportBuilder:
        def _build(address: str) -> Transport:
            created = context.transport_factory.create(
                self._config.transport_type_id,
                address=address,
                overrides=self._config.transport_overrides,
            )
            self._log.info(
                "TRANSPORT_CREATED address=%s driver=%s params=%s",
                address,
                created.meta.driver,
                created.params,
            )
            return created.transport

        return _build

    # ---------------- Registry ----------------
    def create(self, address: str) -> TetherSession:
        """Return the session for `address`, creating it (stopped) if needed."""
        with self._lock:
            session = self._sessions.get(address)
            if session is None:
                c = self._config
                session = TetherSession(
                    address,
                    self._build_transport(address),
                    timeout_s=c.timeout_s,
                    idle_wait_s=c.idle_wait_s,
                    connect_retry_s=c.connect_retry_s,
                    join_timeout_s=c.join_timeout_s,
                    event_queue_size=c.event_queue_size,
                    logger=self._log,
                )
                self._sessions[address] = session
            return session

    def get(self, address: str) -> Optional[TetherSession]:
        with self._lock:
            return self._sessions.get(address)

    def remove(self, address: str) -> None:
        with self._lock:
            session = self._sessions.pop(address, None)
        if session is not None:
            session.close()

    def addresses(self) -> List[str]:
        with self._lock:
            return sorted(self._sessions)

    def _require(self, address: str) -> TetherSession:
        session = self.get(address)
        if session is None:
            raise SessionError(
                f"No session for address '{address}'.",
                hint="Call start(address) or create(address) first.",
                details={"address": address},
            )
        return session

    # ---------------- Host surface ----------------
    def start(self, address: str) -> TetherSession:
        session = self.create(address)
        session.start()
        return session

    def stop(self, address: str) -> None:
        session = self.get(address)
        if session is not None:
            session.stop()

    def send_command(self, address: str, text: str) -> bool:
        session = self.get(address)
        if session is None:
            return False
        return session.send_command(text)

    def subscribe(self, address: str, sink: EventSink) -> Callable[[], None]:
        return self.create(address).subscribe(sink)

    def status(self, address: str) -> SessionStatus:
        return self._require(address).status()

    def position(self, address: str) -> Optional[Position]:
        return self._require(address).position

    def is_connected(self, address: str) -> bool:
        session = self.get(address)
        return session is not None and session.is_connected

    def stop_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()

        for s in sessions:
            try:
                s.close()
            except Exception:
                self._log.exception("SESSION_CLOSE_ERROR address=%s", s.address)

    def __enter__(self) -> "SessionManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop_all()
