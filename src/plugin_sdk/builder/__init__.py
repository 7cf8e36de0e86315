from .graph import (
    BuildResult,
    Configuration,
    ConfigurationBuilder,
    build,
    find_plugin_type,
    register_plugin,
)
from .plugin_builder import PluginBuilder

__all__ = [
    "BuildResult",
    "Configuration",
    "ConfigurationBuilder",
    "PluginBuilder",
    "build",
    "find_plugin_type",
    "register_plugin",
]
