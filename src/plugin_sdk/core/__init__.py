from .errors import (
    AmbiguousBindingError,
    ConfigurationError,
    ConstructionFailedError,
    ConversionFailureError,
    InvalidNodeTransitionError,
    InvalidValueError,
    MissingRequiredValueError,
    PluginError,
    PluginNotFoundError,
    PluginRegistrationError,
    PluginValidationError,
    UnconsumedInputError,
    UnresolvedPluginError,
)
from .constraints import ConstraintValidator, Required, ValidHost, ValidPort
from .issues import BuildIssue, IssueKind
from .levels import FilterResult, Level
from .metadata import (
    DEFAULT_CATEGORY,
    ConstructionKind,
    InjectionKind,
    InjectionTarget,
    PluginType,
)
from .node import Node, NodeState
from .registry import PluginRegistry, get_registry

__all__ = [
    "AmbiguousBindingError",
    "ConfigurationError",
    "ConstructionFailedError",
    "ConversionFailureError",
    "InvalidNodeTransitionError",
    "InvalidValueError",
    "MissingRequiredValueError",
    "PluginError",
    "PluginNotFoundError",
    "PluginRegistrationError",
    "PluginValidationError",
    "UnconsumedInputError",
    "UnresolvedPluginError",
    "ConstraintValidator",
    "Required",
    "ValidHost",
    "ValidPort",
    "BuildIssue",
    "IssueKind",
    "FilterResult",
    "Level",
    "DEFAULT_CATEGORY",
    "ConstructionKind",
    "InjectionKind",
    "InjectionTarget",
    "PluginType",
    "Node",
    "NodeState",
    "PluginRegistry",
    "get_registry",
]
