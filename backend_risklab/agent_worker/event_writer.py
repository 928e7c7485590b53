"""
Background writer for risk events.

Scoring requests hand their event to submit() and return immediately; the
append runs on a small thread pool. Every failure is caught and logged inside
the worker task, so nothing from persistence reaches the request path.
flush() waits for pending writes (tests, shutdown).
"""

from __future__ import annotations

import contextvars
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait

from backend_risklab.database.event_store import EventStore
from backend_risklab.database.models import RiskEvent
from backend_risklab.risklab_logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_WORKERS = 2
DEFAULT_FLUSH_TIMEOUT_SEC = 10.0


class EventWriter:
    """Fire-and-forget appends to an EventStore."""

    def __init__(self, store: EventStore, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self.store = store
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="risk-event-writer",
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    def _append_safe(self, event: RiskEvent) -> bool:
        """Append one event. Swallow all exceptions and log; never raise."""
        try:
            self.store.append(event)
            return True
        except Exception as e:
            logger.error(
                "risk_event_persist_failed",
                risk_level=event.risk_level.value,
                final_score=event.final_score,
                error=str(e),
                exc_info=True,
            )
            return False

    def _done(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def submit(self, event: RiskEvent) -> bool:
        """Schedule an append. Returns False (and logs) if the writer cannot accept it."""
        with self._lock:
            if self._closed:
                logger.warning("risk_event_writer_closed", risk_level=event.risk_level.value)
                return False
            try:
                # Carry the caller's bound log context (channel) into the worker thread.
                future = self._executor.submit(contextvars.copy_context().run, self._append_safe, event)
            except RuntimeError as e:
                logger.warning("risk_event_submit_failed", error=str(e))
                return False
            self._pending.add(future)
        future.add_done_callback(self._done)
        return True

    def flush(self, timeout: float | None = DEFAULT_FLUSH_TIMEOUT_SEC) -> bool:
        """Wait for writes submitted so far. Returns True if all finished within timeout."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            logger.warning("risk_event_flush_timeout", pending=len(not_done), timeout_sec=timeout)
        return not not_done

    def close(self, timeout: float | None = DEFAULT_FLUSH_TIMEOUT_SEC) -> None:
        """Stop accepting events, drain pending writes, and stop the pool."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.flush(timeout=timeout)
        self._executor.shutdown(wait=False)
        logger.info("risk_event_writer_stopped")
