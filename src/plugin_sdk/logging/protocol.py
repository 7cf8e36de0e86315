from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Protocol, TypeAlias, runtime_checkable

STATUS_LOGGER_NAME = "plugin_sdk.status"

ExcInfo: TypeAlias = (
    bool
    | BaseException
    | tuple[type[BaseException], BaseException, TracebackType | None]
    | None
)


class LoggingConfiguratorProtocol(Protocol):
    """Protocol for logging configurators."""

    def configure(self) -> None:
        """Apply logging configuration."""


class LoggingEventLoggerProtocol(Protocol):
    """Thin facade over ``logging`` used by SDK modules."""

    def log(
        self,
        level: int,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None: ...

    def debug(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None: ...

    def info(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None: ...

    def warning(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None: ...

    def error(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None: ...

    def exception(
        self,
        message: str,
        *args: object,
        logger: logging.Logger | None = None,
        extra: Mapping[str, object] | None = None,
        exc_info: ExcInfo = None,
        stacklevel: int = 3,
    ) -> None: ...


@runtime_checkable
class StatusSinkProtocol(Protocol):
    """Receives the builder's human-readable trace and diagnostics."""

    def record(
        self,
        level: int,
        message: str,
        *args: object,
        node_path: str | None = None,
        exc_info: ExcInfo = None,
    ) -> None: ...
