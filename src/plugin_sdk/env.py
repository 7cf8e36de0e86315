"""Environment readers shared by the settings dataclasses.

Unset and blank variables fall back to the default everywhere. Malformed
values raise ``ValueError`` naming the variable, except for integers read
with ``lenient=True``, which are logged and ignored.
"""

from __future__ import annotations

import logging
import os

_LOGGER = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "n", "off"})


def _raw(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_str(name: str, default: str) -> str:
    raw = _raw(name)
    return default if raw is None else raw


def env_optional(name: str) -> str | None:
    return _raw(name)


def env_int(
    name: str, default: int | None, *, lenient: bool = False
) -> int | None:
    raw = _raw(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        if not lenient:
            raise ValueError(f"Invalid {name}: {raw!r}") from None
        _LOGGER.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = _raw(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid bool env var {name}={raw!r}")


def env_list(name: str) -> tuple[str, ...]:
    """Comma-separated values, blanks dropped."""
    raw = _raw(name) or ""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def env_level(name: str, default: int) -> int:
    raw = _raw(name)
    if raw is None:
        return default
    return parse_level(raw, name)


def parse_level(level_name: str, source: str = "level") -> int:
    level = logging.getLevelName(level_name.upper())
    if isinstance(level, int):
        return level
    raise ValueError(f"Invalid {source}: {level_name!r}")
