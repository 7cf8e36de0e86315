"""Builder configuration loaded from the environment."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .core.metadata import DEFAULT_CATEGORY
from .core.registry import PluginRegistry, get_registry
from .env import env_int, env_level, env_list, env_optional, env_str
from .logging import STATUS_LOGGER_NAME, LoggingStatusSink, get_event_logger

_LOGGER = logging.getLogger(__name__)
_EVENT_LOGGER = get_event_logger()


@dataclass(frozen=True, slots=True)
class BuilderSettings:
    """Configuration for plugin discovery and configuration building."""

    # Packages scanned for plugin classes
    packages: tuple[str, ...] = field(
        default_factory=lambda: env_list("PLUGIN_PACKAGES")
    )

    # Manifest file, or directory of *.plugins.yaml manifests
    manifest_path: str | None = field(
        default_factory=lambda: env_optional("PLUGIN_MANIFEST_PATH")
    )

    # Threads listing plugin roots; None lets the executor decide
    scan_workers: int | None = field(
        default_factory=lambda: env_int(
            "PLUGIN_SCAN_WORKERS", None, lenient=True
        )
    )

    # Level of the plugin_sdk.status logger
    status_level: int = field(
        default_factory=lambda: env_level(
            "PLUGIN_STATUS_LEVEL", logging.WARNING
        )
    )

    # Category used when a build does not name one
    default_category: str = field(
        default_factory=lambda: env_str(
            "PLUGIN_DEFAULT_CATEGORY", DEFAULT_CATEGORY
        )
    )

    @classmethod
    def from_env(cls) -> "BuilderSettings":
        return cls()


def load_builder_settings(
    *,
    use_dotenv: bool = True,
    dotenv_path: str | Path | None = None,
) -> BuilderSettings:
    """Load builder settings, reading a ``.env`` file first when asked.

    Values already present in the environment win over the file.
    """
    if use_dotenv:
        load_dotenv(dotenv_path)
    return BuilderSettings.from_env()


def build_status_sink(settings: BuilderSettings) -> LoggingStatusSink:
    logger = logging.getLogger(STATUS_LOGGER_NAME)
    logger.setLevel(settings.status_level)
    return LoggingStatusSink(logger)


def bootstrap_registry(
    settings: BuilderSettings | None = None,
    *,
    registry: PluginRegistry | None = None,
) -> PluginRegistry:
    """Populate ``registry`` (the default one if omitted) from settings."""
    resolved = settings or load_builder_settings()
    target = registry or get_registry()
    if resolved.packages:
        added = target.scan(
            resolved.packages, max_workers=resolved.scan_workers
        )
        _EVENT_LOGGER.info(
            "Discovered %d plugin type(s) in %s",
            added,
            ", ".join(resolved.packages),
            logger=_LOGGER,
        )
    if resolved.manifest_path:
        added = target.load_manifest(resolved.manifest_path)
        _EVENT_LOGGER.info(
            "Loaded %d plugin type(s) from manifest %s",
            added,
            resolved.manifest_path,
            logger=_LOGGER,
        )
    return target
