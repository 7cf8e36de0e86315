from __future__ import annotations

import logging

from .impl.events import StandardLoggingEventLogger
from .impl.standard import StandardLoggingConfigurator
from .protocol import (
    STATUS_LOGGER_NAME,
    LoggingConfiguratorProtocol,
    LoggingEventLoggerProtocol,
)
from .settings import LoggingSettings, load_logging_settings


def build_logging_configurator(
    settings: LoggingSettings | None = None,
) -> LoggingConfiguratorProtocol:
    return StandardLoggingConfigurator(settings or load_logging_settings())


def configure_logging(
    settings: LoggingSettings | None = None,
    *,
    status_level: int | None = None,
) -> LoggingConfiguratorProtocol:
    """Configure root logging once per process.

    ``status_level`` sets the level of the build trace logger on its own,
    so construction traces can be silenced without raising the root level.
    """
    configurator = build_logging_configurator(settings)
    configurator.configure()
    if status_level is not None:
        logging.getLogger(STATUS_LOGGER_NAME).setLevel(status_level)
    return configurator


def build_event_logger() -> LoggingEventLoggerProtocol:
    return StandardLoggingEventLogger()
