"""Public exports for plugin decorators."""

from plugin_sdk.decorators import DefaultPluginDecorator, Plugin
from plugin_sdk.injection.markers import (
    attribute,
    configuration,
    element,
    node,
    plugin_builder_factory,
    plugin_factory,
    value,
)

__all__ = [
    "Plugin",
    "DefaultPluginDecorator",
    "attribute",
    "configuration",
    "element",
    "node",
    "plugin_builder_factory",
    "plugin_factory",
    "value",
]
