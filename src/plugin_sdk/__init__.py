"""Public API entry point for plugin_sdk.

Use this module for supported imports. Subpackages are internal.
"""

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from plugin_decorators import DefaultPluginDecorator, Plugin

from .builder import (
    BuildResult,
    Configuration,
    ConfigurationBuilder,
    PluginBuilder,
    build,
    find_plugin_type,
    register_plugin,
)
from .convert import (
    Charset,
    ConversionResult,
    TypeConverter,
    TypeConverterRegistry,
    get_converters,
)
from .core import (
    DEFAULT_CATEGORY,
    AmbiguousBindingError,
    BuildIssue,
    ConfigurationError,
    ConstructionFailedError,
    ConstructionKind,
    ConstraintValidator,
    ConversionFailureError,
    FilterResult,
    InjectionKind,
    InjectionTarget,
    InvalidNodeTransitionError,
    InvalidValueError,
    IssueKind,
    Level,
    MissingRequiredValueError,
    Node,
    NodeState,
    PluginError,
    PluginNotFoundError,
    PluginRegistrationError,
    PluginRegistry,
    PluginType,
    PluginValidationError,
    Required,
    UnconsumedInputError,
    UnresolvedPluginError,
    ValidHost,
    ValidPort,
    get_registry,
)
from .discovery import (
    PackageScanner,
    PluginManifest,
    ResourceLocation,
    extract_path,
    load_manifest,
)
from .injection import (
    InjectionContext,
    InjectionEngine,
    PropertiesSubstitutor,
    Substitutor,
    attribute,
    configuration,
    element,
    node,
    plugin_builder_factory,
    plugin_factory,
    value,
)
from .logging import (
    InMemoryStatusSink,
    LoggingSettings,
    LoggingStatusSink,
    StatusRecord,
    StatusSinkProtocol,
    configure_logging,
)
from .settings import BuilderSettings, bootstrap_registry, load_builder_settings


def __getattr__(name: str) -> Any:
    if name in {"Plugin", "DefaultPluginDecorator"}:
        module = import_module("plugin_decorators")
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Plugin",
    "DefaultPluginDecorator",
    "attribute",
    "configuration",
    "element",
    "node",
    "value",
    "plugin_factory",
    "plugin_builder_factory",
    "ConstraintValidator",
    "Required",
    "ValidHost",
    "ValidPort",
    "build",
    "register_plugin",
    "find_plugin_type",
    "BuildResult",
    "BuildIssue",
    "IssueKind",
    "Configuration",
    "ConfigurationBuilder",
    "PluginBuilder",
    "Node",
    "NodeState",
    "PluginType",
    "InjectionTarget",
    "InjectionKind",
    "ConstructionKind",
    "DEFAULT_CATEGORY",
    "PluginRegistry",
    "get_registry",
    "PackageScanner",
    "PluginManifest",
    "ResourceLocation",
    "extract_path",
    "load_manifest",
    "Charset",
    "ConversionResult",
    "TypeConverter",
    "TypeConverterRegistry",
    "get_converters",
    "InjectionContext",
    "InjectionEngine",
    "PropertiesSubstitutor",
    "Substitutor",
    "Level",
    "FilterResult",
    "PluginError",
    "PluginRegistrationError",
    "PluginNotFoundError",
    "PluginValidationError",
    "InvalidNodeTransitionError",
    "ConfigurationError",
    "UnresolvedPluginError",
    "MissingRequiredValueError",
    "ConversionFailureError",
    "InvalidValueError",
    "AmbiguousBindingError",
    "UnconsumedInputError",
    "ConstructionFailedError",
    "StatusSinkProtocol",
    "LoggingStatusSink",
    "InMemoryStatusSink",
    "StatusRecord",
    "LoggingSettings",
    "configure_logging",
    "BuilderSettings",
    "load_builder_settings",
    "bootstrap_registry",
]
