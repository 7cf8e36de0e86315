from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from .constraints import ConstraintValidator, has_required

CollectionKind = Literal["list", "tuple", "set"]

DEFAULT_CATEGORY = "Core"


class ConstructionKind(str, Enum):
    FACTORY = "factory"
    BUILDER = "builder"


class InjectionKind(str, Enum):
    ATTRIBUTE = "attribute"
    ELEMENT = "element"
    VALUE = "value"
    NODE = "node"
    CONFIGURATION = "configuration"


_MISSING: Any = object()


@dataclass(frozen=True, slots=True)
class InjectionTarget:
    """One constructible member of a plugin: a factory parameter or a
    builder attribute.

    ``declared_type`` is the member's annotation with ``None`` stripped;
    for collection members it is the collection's element type and
    ``collection`` names the container to build. ``type_default`` is off for
    builder attributes, whose builder supplies its own defaults.
    """

    member: str
    name: str
    kind: InjectionKind
    declared_type: Any = str
    collection: CollectionKind | None = None
    optional: bool = False
    aliases: tuple[str, ...] = ()
    default: Any = _MISSING
    sensitive: bool = False
    validators: tuple[ConstraintValidator, ...] = ()
    substitute: bool = True
    type_default: bool = True

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    @property
    def required(self) -> bool:
        return has_required(self.validators)

    @property
    def is_collection(self) -> bool:
        return self.collection is not None

    def names(self) -> tuple[str, ...]:
        """Logical name followed by aliases, in declaration order."""
        return (self.name, *self.aliases)


@dataclass(frozen=True, slots=True)
class PluginType:
    """Registered descriptor binding category/name/aliases to a class."""

    category: str
    name: str
    plugin_class: type
    construction: ConstructionKind
    targets: tuple[InjectionTarget, ...] = ()
    element_name: str = ""
    aliases: tuple[str, ...] = ()
    type_fallback: bool = True
    defer_children: bool = False
    printable: bool = False
    entrypoint: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not self.element_name:
            object.__setattr__(self, "element_name", self.name)

    def key(self) -> tuple[str, str]:
        return self.category.lower(), self.name.lower()

    def matches_name(self, name: str) -> bool:
        return self.name.lower() == name.lower()

    def matches_alias(self, name: str) -> bool:
        lowered = name.lower()
        return any(alias.lower() == lowered for alias in self.aliases)

    def matches_element(self, name: str) -> bool:
        """True when ``name`` is this plugin's element kind, name or alias."""
        lowered = name.lower()
        return (
            self.element_name.lower() == lowered
            or self.matches_name(name)
            or self.matches_alias(name)
        )

    def describe(self) -> str:
        return (
            f"PluginType[category={self.category}, name={self.name}, "
            f"class={self.plugin_class.__module__}.{self.plugin_class.__qualname__}]"
        )
