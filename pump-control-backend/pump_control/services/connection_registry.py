"""
In-memory registry of the live WebSocket session of each area
"""
import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional

from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)

class ConnectionRegistry:
    """
    Holds at most one session per area.

    A session is any object exposing ``send_json`` as a coroutine and the
    Starlette ``client_state`` / ``application_state`` attributes.
    """

    def __init__(self, send_timeout: float = 5.0):
        self.send_timeout = send_timeout
        self._sessions: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def register(self, area_name: str, session: Any) -> Optional[Any]:
        """Bind session to the area, returning the session it replaced (if any)"""
        with self._lock:
            previous = self._sessions.get(area_name)
            self._sessions[area_name] = session

        if previous is not None and previous is not session:
            logger.info(f"Session for area {area_name} superseded by a new connection")
            return previous
        return None

    def unregister(self, area_name: str, session: Any) -> bool:
        """Remove the binding only if session is the one currently registered"""
        with self._lock:
            if self._sessions.get(area_name) is not session:
                return False
            del self._sessions[area_name]
        return True

    def lookup(self, area_name: str) -> Optional[Any]:
        with self._lock:
            return self._sessions.get(area_name)

    def areas(self) -> List[str]:
        with self._lock:
            return sorted(self._sessions)

    @staticmethod
    def _is_writable(session: Any) -> bool:
        return (
            getattr(session, "client_state", None) == WebSocketState.CONNECTED
            and getattr(session, "application_state", None) == WebSocketState.CONNECTED
        )

    async def send(self, area_name: str, payload: Dict[str, Any]) -> bool:
        """Best-effort push to the area's session; returns False when dropped"""
        session = self.lookup(area_name)
        if session is None:
            logger.debug(f"No session registered for area {area_name}, dropping message")
            return False

        if not self._is_writable(session):
            logger.debug(f"Session for area {area_name} is not writable, dropping message")
            return False

        try:
            await asyncio.wait_for(session.send_json(payload), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Timed out sending to area {area_name} after {self.send_timeout}s")
        except Exception as e:
            logger.debug(f"Dropped message for area {area_name}: {e}")
        return False
