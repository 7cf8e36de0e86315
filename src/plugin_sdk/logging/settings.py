from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, cast

from ..env import env_bool, env_int, env_level, env_optional, env_str

LogFormat = Literal["json", "text"]

_LOG_FORMATS = ("json", "text")


@dataclass(frozen=True, slots=True)
class LoggingSettings:
    level: int
    console_enabled: bool
    log_format: LogFormat
    file_dir: str | None
    rotate_when: str
    backup_count: int

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        log_format = env_str("LOG_FORMAT", "text").lower()
        if log_format not in _LOG_FORMATS:
            raise ValueError(f"Invalid LOG_FORMAT: {log_format!r}")
        return cls(
            level=env_level("LOG_LEVEL", logging.INFO),
            console_enabled=env_bool("LOG_CONSOLE_ENABLED", True),
            log_format=cast(LogFormat, log_format),
            file_dir=env_optional("LOG_FILE_DIR"),
            rotate_when=env_str("LOG_ROTATE_WHEN", "midnight"),
            backup_count=env_int("LOG_BACKUP_COUNT", 14) or 0,
        )


def load_logging_settings() -> LoggingSettings:
    return LoggingSettings.from_env()
