from __future__ import annotations

import logging
from collections.abc import Mapping

from ..protocol import STATUS_LOGGER_NAME, ExcInfo, LoggingEventLoggerProtocol


class StandardLoggingEventLogger(LoggingEventLoggerProtocol):
    """Routes SDK events to ``logging`` with the caller's stack frame."""

    def log(
        self,
        level: int,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None:
        self._emit(level, message, args, logger, extra, exc_info, stacklevel)

    def debug(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None:
        self._emit(
            logging.DEBUG, message, args, logger, extra, exc_info, stacklevel
        )

    def info(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None:
        self._emit(
            logging.INFO, message, args, logger, extra, exc_info, stacklevel
        )

    def warning(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None:
        self._emit(
            logging.WARNING, message, args, logger, extra, exc_info, stacklevel
        )

    def error(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None:
        self._emit(
            logging.ERROR, message, args, logger, extra, exc_info, stacklevel
        )

    def exception(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None:
        self._emit(
            logging.ERROR,
            message,
            args,
            logger,
            extra,
            True if exc_info is None else exc_info,
            stacklevel,
        )

    @staticmethod
    def _emit(
        level: int,
        message: str,
        args: tuple[object, ...],
        logger: logging.Logger | None,
        extra: Mapping[str, object] | None,
        exc_info: ExcInfo,
        stacklevel: int,
    ) -> None:
        target = logger or logging.getLogger(STATUS_LOGGER_NAME)
        if not target.isEnabledFor(level):
            return
        kwargs: dict[str, object] = {"stacklevel": stacklevel + 1}
        if extra is not None:
            kwargs["extra"] = extra
        if exc_info is not None:
            kwargs["exc_info"] = exc_info
        target.log(level, message, *args, **kwargs)
