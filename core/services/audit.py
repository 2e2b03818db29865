"""
Audit logger - structured events to the process log, forwarded
best-effort to the application_logs store.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from core.domain.constants import MAX_LOG_MESSAGE_LENGTH
from core.domain.models import LogEntry, LogLevel
from core.interfaces.repositories import IAuditLogRepository

logger = logging.getLogger(__name__)

_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.SECURITY: logging.WARNING,
    LogLevel.PERFORMANCE: logging.DEBUG,
    LogLevel.USER_ACTION: logging.INFO,
}


class AuditLogger:
    """
    Security events are always forwarded. Everything else only when the
    environment is production-like or ``forward_all`` is set.
    Forwarding never raises into the caller.
    """

    def __init__(
        self,
        sink: Optional[IAuditLogRepository],
        environment: str = "development",
        forward_all: bool = False,
    ):
        self.sink = sink
        self.environment = environment
        self.forward_all = forward_all
        self._pending: Set[asyncio.Task] = set()

    @property
    def production_like(self) -> bool:
        return self.environment.lower() in ("production", "staging")

    def should_forward(self, level: LogLevel) -> bool:
        if self.sink is None:
            return False
        return level == LogLevel.SECURITY or self.production_like or self.forward_all

    def emit(self, level: LogLevel, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        meta = meta or {}
        logger.log(_PY_LEVELS[level], f"[{level.value.upper()}] {message} {meta}" if meta else f"[{level.value.upper()}] {message}")

        if not self.should_forward(level):
            return

        entry = LogEntry(
            level=level,
            message=message[:MAX_LOG_MESSAGE_LENGTH],
            meta=meta,
            environment=self.environment,
            created_at=datetime.now(timezone.utc),
        )
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"Audit forward skipped, no event loop: {message}")
            return
        task = loop.create_task(self._forward(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _forward(self, entry: LogEntry) -> None:
        try:
            await self.sink.insert(entry)
        except Exception as e:
            logger.debug(f"Audit forward failed: {e}")

    async def flush(self) -> None:
        """Wait for in-flight forwards (shutdown, tests)"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # === Level helpers ===

    def info(self, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.INFO, message, meta)

    def warn(self, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.WARN, message, meta)

    def error(self, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.ERROR, message, meta)

    def security(self, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.SECURITY, message, meta)

    def performance(self, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.PERFORMANCE, message, meta)

    def user_action(self, action: str, user_id: Any, meta: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.USER_ACTION, f"User action: {action}", {"user_id": str(user_id), **(meta or {})})

    @asynccontextmanager
    async def measure(self, operation: str, meta: Optional[Dict[str, Any]] = None):
        """Emit a performance event with the elapsed time of the block"""
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            self.performance(f"{operation} took {elapsed_ms}ms", {"operation": operation, "duration_ms": elapsed_ms, **(meta or {})})
