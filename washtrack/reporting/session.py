"""Single-flight report sessions.

A preview is re-run on every edit. Only the newest request for a session may
deliver its result: issuing a request cancels the outstanding one, and a
request that is no longer the newest returns ``None`` no matter when it
finishes.
"""

import asyncio
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from washtrack.reporting.configuration import ReportConfiguration
from washtrack.utils.logger import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class ReportSession:
    """
    Serialises report runs for one consumer.

    Last-write-wins by request generation, never by completion order.
    Safe for single-threaded async use within one event loop.
    """

    def __init__(self, session_id: str = "default") -> None:
        self.session_id = session_id
        self._generation = 0
        self._task: Optional["asyncio.Future"] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(
        self,
        fetch: Callable[[ReportConfiguration], Awaitable[T]],
        config: ReportConfiguration,
    ) -> Optional[T]:
        """
        Run ``fetch(config)`` as the session's newest request.

        Returns:
            The fetch result, or None if a newer request superseded this one
        """
        self._generation += 1
        generation = self._generation

        if self.is_running:
            self._task.cancel()
            log.debug(
                "report request superseded",
                session_id=self.session_id,
                generation=generation - 1,
            )

        task = asyncio.ensure_future(fetch(config))
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation and task.cancelled():
                return None
            raise
        except Exception:
            if generation != self._generation:
                log.debug("stale report request failed", session_id=self.session_id)
                return None
            raise
        finally:
            if self._task is task and task.done():
                self._task = None

        if generation != self._generation:
            return None
        return result

    def cancel(self) -> bool:
        """Cancel the outstanding request, if any."""
        if not self.is_running:
            return False
        self._generation += 1
        self._task.cancel()
        return True


class ReportSessionRegistry:
    """
    Registry of preview sessions keyed by client session id.

    Idle sessions are pruned once the registry grows past ``max_sessions``.
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        self._sessions: Dict[str, ReportSession] = {}
        self.max_sessions = max_sessions

    def get_or_create(self, session_id: str) -> ReportSession:
        session = self._sessions.get(session_id)
        if session is None:
            if len(self._sessions) >= self.max_sessions:
                self.prune()
            session = ReportSession(session_id)
            self._sessions[session_id] = session
            log.debug("report session created", session_id=session_id, sessions=len(self._sessions))
        return session

    def get(self, session_id: str) -> Optional[ReportSession]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.cancel()

    def prune(self) -> int:
        """Drop sessions without an outstanding request."""
        idle = [sid for sid, s in self._sessions.items() if not s.is_running]
        for sid in idle:
            del self._sessions[sid]
        if idle:
            log.debug("report sessions pruned", removed=len(idle), sessions=len(self._sessions))
        return len(idle)

    @property
    def active_count(self) -> int:
        return len(self._sessions)


# Global singleton instance
report_sessions = ReportSessionRegistry()
