"""Status sinks collecting the builder's trace and diagnostics.

Every message the configuration builder produces (the per-plugin
construction trace, conversion failures, unconsumed attributes) goes through
a :class:`~plugin_sdk.logging.protocol.StatusSinkProtocol`. The default sink
forwards to the ``plugin_sdk.status`` logger; tests and tools can collect the
records in memory instead.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from .events import get_event_logger
from .protocol import STATUS_LOGGER_NAME, ExcInfo, StatusSinkProtocol


@dataclass(frozen=True, slots=True)
class StatusRecord:
    level: int
    message: str
    node_path: str | None = None
    error: BaseException | None = None


class LoggingStatusSink(StatusSinkProtocol):
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(STATUS_LOGGER_NAME)
        self._events = get_event_logger()

    def record(
        self,
        level: int,
        message: str,
        *args: object,
        node_path: str | None = None,
        exc_info: ExcInfo = None,
    ) -> None:
        self._events.log(
            level,
            message,
            *args,
            logger=self._logger,
            extra={"node_path": node_path or ""},
            exc_info=exc_info,
        )


class InMemoryStatusSink(StatusSinkProtocol):
    """Keeps rendered status records; handy in tests."""

    def __init__(self, min_level: int = logging.DEBUG) -> None:
        self._min_level = min_level
        self._records: list[StatusRecord] = []
        self._lock = threading.Lock()

    def record(
        self,
        level: int,
        message: str,
        *args: object,
        node_path: str | None = None,
        exc_info: ExcInfo = None,
    ) -> None:
        if level < self._min_level:
            return
        rendered = message % args if args else message
        error = exc_info if isinstance(exc_info, BaseException) else None
        if isinstance(exc_info, tuple):
            error = exc_info[1]
        with self._lock:
            self._records.append(
                StatusRecord(
                    level=level,
                    message=rendered,
                    node_path=node_path,
                    error=error,
                )
            )

    def records(self, *, clear: bool = False) -> list[StatusRecord]:
        with self._lock:
            items = list(self._records)
            if clear:
                self._records.clear()
        return items

    def messages(self, level: int | None = None) -> list[str]:
        return [
            item.message
            for item in self.records()
            if level is None or item.level == level
        ]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
