import logging
from pathlib import Path

import pytest

from plugin_sdk import (
    BuilderSettings,
    PluginRegistry,
    bootstrap_registry,
    load_builder_settings,
)
from plugin_sdk.logging import STATUS_LOGGER_NAME
from plugin_sdk.settings import build_status_sink

_ENV_KEYS = (
    "PLUGIN_PACKAGES",
    "PLUGIN_MANIFEST_PATH",
    "PLUGIN_SCAN_WORKERS",
    "PLUGIN_STATUS_LEVEL",
    "PLUGIN_DEFAULT_CATEGORY",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = BuilderSettings.from_env()

    assert settings.packages == ()
    assert settings.manifest_path is None
    assert settings.scan_workers is None
    assert settings.status_level == logging.WARNING
    assert settings.default_category == "Core"


def test_values_from_env(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("PLUGIN_PACKAGES", "a.plugins, b.plugins,")
    clean_env.setenv("PLUGIN_MANIFEST_PATH", "/etc/plugins")
    clean_env.setenv("PLUGIN_SCAN_WORKERS", "4")
    clean_env.setenv("PLUGIN_STATUS_LEVEL", "debug")
    clean_env.setenv("PLUGIN_DEFAULT_CATEGORY", "Lookup")

    settings = load_builder_settings(use_dotenv=False)

    assert settings.packages == ("a.plugins", "b.plugins")
    assert settings.manifest_path == "/etc/plugins"
    assert settings.scan_workers == 4
    assert settings.status_level == logging.DEBUG
    assert settings.default_category == "Lookup"


def test_bad_worker_count_falls_back(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("PLUGIN_SCAN_WORKERS", "many")

    assert BuilderSettings.from_env().scan_workers is None


def test_bad_status_level_raises(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("PLUGIN_STATUS_LEVEL", "chatty")

    with pytest.raises(ValueError):
        BuilderSettings.from_env()


def test_dotenv_file_is_read(
    clean_env: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    (tmp_path / ".env").write_text(
        "PLUGIN_DEFAULT_CATEGORY=FromDotenv\n", encoding="utf-8"
    )
    # registers the key so the value loaded from the file is undone
    clean_env.setenv("PLUGIN_DEFAULT_CATEGORY", "unset")
    clean_env.delenv("PLUGIN_DEFAULT_CATEGORY")

    settings = load_builder_settings(dotenv_path=tmp_path / ".env")

    assert settings.default_category == "FromDotenv"


def test_status_sink_sets_logger_level(clean_env: pytest.MonkeyPatch) -> None:
    logger = logging.getLogger(STATUS_LOGGER_NAME)
    previous = logger.level
    try:
        build_status_sink(BuilderSettings(status_level=logging.ERROR))
        assert logger.level == logging.ERROR
    finally:
        logger.setLevel(previous)


def test_bootstrap_scans_packages(clean_env: pytest.MonkeyPatch) -> None:
    registry = PluginRegistry()
    settings = BuilderSettings(packages=("tests.sample_plugins",))

    result = bootstrap_registry(settings, registry=registry)

    assert result is registry
    assert registry.find("Core", "Console") is not None
    assert registry.find("Core", "JsonLayout") is not None
    assert "tests.sample_plugins" in registry.scanned_packages


def test_bootstrap_loads_manifest(
    clean_env: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    manifest = tmp_path / "layouts.plugins.yaml"
    manifest.write_text(
        "plugins:\n  - tests.sample_plugins.layouts:PatternLayout\n",
        encoding="utf-8",
    )
    registry = PluginRegistry()

    bootstrap_registry(
        BuilderSettings(manifest_path=str(manifest)), registry=registry
    )

    assert [p.name for p in registry.plugins()] == ["PatternLayout"]
