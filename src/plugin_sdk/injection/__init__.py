from .context import InjectionContext
from .engine import InjectionEngine, InjectionOutcome
from .markers import (
    InjectionMarker,
    attribute,
    configuration,
    element,
    node,
    plugin_builder_factory,
    plugin_factory,
    value,
)
from .substitution import PropertiesSubstitutor, Substitutor, identity

__all__ = [
    "InjectionContext",
    "InjectionEngine",
    "InjectionOutcome",
    "InjectionMarker",
    "attribute",
    "configuration",
    "element",
    "node",
    "plugin_builder_factory",
    "plugin_factory",
    "value",
    "PropertiesSubstitutor",
    "Substitutor",
    "identity",
]
