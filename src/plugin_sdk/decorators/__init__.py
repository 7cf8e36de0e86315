"""Internal decorator exports. Prefer `plugin_sdk` top-level imports."""

from .plugin_decorator import DefaultPluginDecorator, Plugin

__all__ = ["Plugin", "DefaultPluginDecorator"]
