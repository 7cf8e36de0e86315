from __future__ import annotations

from enum import Enum


class Level(Enum):
    """Event severity, ordered from least to most verbose."""

    OFF = 0
    FATAL = 100
    ERROR = 200
    WARN = 300
    INFO = 400
    DEBUG = 500
    TRACE = 600
    ALL = 1_000_000

    def is_more_specific_than(self, other: "Level") -> bool:
        return self.value <= other.value

    def is_in_range(self, min_level: "Level", max_level: "Level") -> bool:
        return min_level.value <= self.value <= max_level.value


class FilterResult(Enum):
    """Outcome a filter reports for an event."""

    ACCEPT = "ACCEPT"
    NEUTRAL = "NEUTRAL"
    DENY = "DENY"
