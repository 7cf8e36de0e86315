"""Small plugins used by the test suite."""

from plugin_sdk import PluginRegistry


def sample_registry() -> PluginRegistry:
    """A fresh registry holding every sample plugin."""
    from . import appenders, config, filters, layouts

    registry = PluginRegistry()
    for module in (layouts, filters, appenders, config):
        registry.register_from_module(module)
    return registry
