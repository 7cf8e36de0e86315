from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler

from ..protocol import LoggingConfiguratorProtocol
from ..settings import LoggingSettings

_CONFIGURED_MARKER = "_plugin_sdk_logging_configured"
_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_BUILTIN_LOG_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "thread": record.threadName,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = record.stack_info
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _BUILTIN_LOG_RECORD_ATTRS
        )
        return json.dumps(payload, ensure_ascii=True, default=str)


class StatusRecordFilter(logging.Filter):
    """Pass only records emitted by the configuration status sink."""

    def filter(self, record: logging.LogRecord) -> bool:
        return hasattr(record, "node_path")


class StandardLoggingConfigurator(LoggingConfiguratorProtocol):
    def __init__(self, settings: LoggingSettings) -> None:
        self._settings = settings

    def configure(self) -> None:
        logger = logging.getLogger()
        if getattr(logger, _CONFIGURED_MARKER, False):
            return
        logger.setLevel(self._settings.level)
        for handler in self._build_handlers(self._build_formatter()):
            logger.addHandler(handler)
        setattr(logger, _CONFIGURED_MARKER, True)

    def _build_formatter(self) -> logging.Formatter:
        if self._settings.log_format == "json":
            return JsonFormatter()
        return logging.Formatter(_TEXT_FORMAT)

    def _build_handlers(
        self, formatter: logging.Formatter
    ) -> list[logging.Handler]:
        handlers: list[logging.Handler] = []
        if self._settings.console_enabled:
            console = logging.StreamHandler()
            console.setLevel(self._settings.level)
            console.setFormatter(formatter)
            handlers.append(console)

        if self._settings.file_dir:
            handlers.append(
                self._build_file_handler(
                    self._settings.file_dir, "plugin_sdk.log", formatter
                )
            )
            status_handler = self._build_file_handler(
                self._settings.file_dir, "status.log", formatter
            )
            status_handler.addFilter(StatusRecordFilter())
            handlers.append(status_handler)
        return handlers

    def _build_file_handler(
        self,
        directory: str,
        filename: str,
        formatter: logging.Formatter,
    ) -> logging.Handler:
        os.makedirs(directory, exist_ok=True)
        handler = TimedRotatingFileHandler(
            os.path.join(directory, filename),
            when=self._settings.rotate_when,
            backupCount=self._settings.backup_count,
            encoding="utf-8",
            delay=True,
        )
        handler.setLevel(self._settings.level)
        handler.setFormatter(formatter)
        return handler
