from __future__ import annotations


class PluginError(Exception):
    """Base exception for plugin SDK errors."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class PluginRegistrationError(PluginError):
    """Raised when a plugin type fails to register."""


class PluginNotFoundError(PluginError):
    """Raised when lookup for a category/name pair fails."""


class PluginValidationError(PluginError):
    """Raised when plugin metadata (markers, factory, builder) is malformed."""


class InvalidNodeTransitionError(PluginError):
    """Raised when a node is moved to a state its current state forbids."""

    def __init__(self, *, node_name: str, state: str, target: str) -> None:
        super().__init__(
            f"invalid node transition {state} -> {target} for node {node_name!r}"
        )
        self.node_name = node_name
        self.state = state
        self.target = target


class ConfigurationError(PluginError):
    """Base for errors caused by user configuration rather than plugin code.

    These are recorded on the build result and never escape ``build``.
    """


class UnresolvedPluginError(ConfigurationError):
    """No registered plugin type matches a node."""


class MissingRequiredValueError(ConfigurationError):
    """A required injection target resolved to no value."""


class ConversionFailureError(ConfigurationError):
    """A raw string was present but could not be converted."""


class AmbiguousBindingError(ConfigurationError):
    """Both a free-text body and a same-named attribute were given."""


class UnconsumedInputError(ConfigurationError):
    """Attributes or children were left over after construction."""


class ConstructionFailedError(ConfigurationError):
    """The plugin's factory or builder raised while constructing."""


class InvalidValueError(ConfigurationError):
    """An injected value failed one of its constraint validators."""
