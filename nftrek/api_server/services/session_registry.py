"""
Session registry: one MintOrchestrator per active UI session.

Sessions left idle longer than the idle TTL are disposed on the next lookup, and
the registry never holds more than max_sessions orchestrators; the least
recently used idle ones go first. A session with a mint in flight is never
evicted.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from nftrek.core.orchestrator import MintOrchestrator

from .websocket_manager import StatusWebSocketManager

logger = logging.getLogger(__name__)

OrchestratorFactory = Callable[[str], MintOrchestrator]


class OrchestratorRegistry:
    """Creates, hands out and disposes per-session orchestrators."""

    def __init__(
        self,
        factory: OrchestratorFactory,
        status_manager: Optional[StatusWebSocketManager] = None,
        idle_ttl_seconds: float = 900.0,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.factory = factory
        self.status_manager = status_manager
        self.idle_ttl_seconds = idle_ttl_seconds
        self.max_sessions = max_sessions
        self.clock = clock
        self._sessions: Dict[str, MintOrchestrator] = {}
        self._last_used: Dict[str, float] = {}

    def get_or_create(self, session_id: str) -> MintOrchestrator:
        self.evict_idle()
        orchestrator = self._sessions.get(session_id)
        if orchestrator is None or orchestrator.disposed:
            self._make_room()
            orchestrator = self.factory(session_id)
            if self.status_manager is not None:
                orchestrator.subscribe(self.status_manager.listener_for(session_id))
            self._sessions[session_id] = orchestrator
            logger.info(f"OrchestratorRegistry: created session {session_id}")
        self._last_used[session_id] = self.clock()
        return orchestrator

    def get(self, session_id: str) -> Optional[MintOrchestrator]:
        orchestrator = self._sessions.get(session_id)
        if orchestrator is not None:
            self._last_used[session_id] = self.clock()
        return orchestrator

    def dispose(self, session_id: str) -> bool:
        """Dispose a session; returns False if it was unknown or still minting."""
        orchestrator = self._sessions.get(session_id)
        if orchestrator is None:
            return False
        if orchestrator.in_flight:
            logger.warning(f"OrchestratorRegistry: refusing to dispose session {session_id} mid-attempt")
            return False
        self._drop(session_id)
        logger.info(f"OrchestratorRegistry: disposed session {session_id}")
        return True

    def dispose_all(self) -> None:
        for orchestrator in self._sessions.values():
            orchestrator.dispose()
        self._sessions.clear()
        self._last_used.clear()

    def evict_idle(self) -> List[str]:
        """Dispose sessions idle past the TTL; returns the evicted session ids."""
        now = self.clock()
        evicted = []
        for session_id, orchestrator in list(self._sessions.items()):
            if orchestrator.in_flight:
                self._last_used[session_id] = now
                continue
            last_used = self._last_used.setdefault(session_id, now)
            if now - last_used > self.idle_ttl_seconds:
                self._drop(session_id)
                evicted.append(session_id)
        if evicted:
            logger.info(f"OrchestratorRegistry: evicted {len(evicted)} idle session(s)")
        return evicted

    def _make_room(self) -> None:
        if len(self._sessions) < self.max_sessions:
            return
        idle = sorted(
            (session_id for session_id, orch in self._sessions.items() if not orch.in_flight),
            key=lambda session_id: self._last_used.get(session_id, 0.0),
        )
        for session_id in idle[:len(self._sessions) - self.max_sessions + 1]:
            self._drop(session_id)
            logger.info(f"OrchestratorRegistry: evicted least recently used session {session_id}")

    def _drop(self, session_id: str) -> None:
        self._sessions.pop(session_id).dispose()
        self._last_used.pop(session_id, None)

    def in_flight_sessions(self) -> List[str]:
        return [session_id for session_id, orch in self._sessions.items() if orch.in_flight]

    def summary(self) -> Dict[str, Any]:
        return {
            "active_sessions": len(self._sessions),
            "in_flight": self.in_flight_sessions(),
            "statuses": {session_id: orch.status.value for session_id, orch in self._sessions.items()},
        }
