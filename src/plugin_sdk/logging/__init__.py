"""Logging for the SDK: configuration, event logger facade, status sinks."""

from .events import get_event_logger
from .factory import (
    build_event_logger,
    build_logging_configurator,
    configure_logging,
)
from .protocol import (
    LoggingConfiguratorProtocol,
    LoggingEventLoggerProtocol,
    StatusSinkProtocol,
)
from .settings import LoggingSettings, load_logging_settings
from .status import (
    STATUS_LOGGER_NAME,
    InMemoryStatusSink,
    LoggingStatusSink,
    StatusRecord,
)

__all__ = [
    "LoggingConfiguratorProtocol",
    "LoggingEventLoggerProtocol",
    "LoggingSettings",
    "StatusSinkProtocol",
    "STATUS_LOGGER_NAME",
    "InMemoryStatusSink",
    "LoggingStatusSink",
    "StatusRecord",
    "build_event_logger",
    "build_logging_configurator",
    "configure_logging",
    "get_event_logger",
    "load_logging_settings",
]
