"""Declarative injection markers.

Markers are placed where a value will be injected: as the default of a
factory parameter, or as a class attribute of a builder::

    @Plugin(name="Socket", category="Core", element_name="appender")
    class SocketAppender:
        @plugin_factory
        @classmethod
        def create(
            cls,
            host: str = attribute(required=True, validators=[ValidHost()]),
            port: int = attribute(default="4560", validators=[ValidPort()]),
            immediate_flush: bool = attribute("immediateFlush", default="true"),
            layout: Layout | None = element(),
        ) -> "SocketAppender": ...

The plugin decorator turns them into
:class:`~plugin_sdk.core.metadata.InjectionTarget` descriptors once, when the
class is registered. Validators run after injection, before the plugin is
constructed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..core.constraints import ConstraintValidator, Required, has_required
from ..core.metadata import _MISSING, InjectionKind

FACTORY_MARKER = "__plugin_factory__"
BUILDER_FACTORY_MARKER = "__plugin_builder_factory__"

_F = TypeVar("_F")


@dataclass(frozen=True, slots=True)
class InjectionMarker:
    kind: InjectionKind
    name: str | None = None
    aliases: tuple[str, ...] = ()
    default: Any = _MISSING
    sensitive: bool = False
    validators: tuple[ConstraintValidator, ...] = ()
    substitute: bool = True

    @property
    def required(self) -> bool:
        return has_required(self.validators)


def attribute(
    name: str | None = None,
    *,
    aliases: tuple[str, ...] | list[str] = (),
    default: Any = _MISSING,
    sensitive: bool = False,
    required: bool = False,
    validators: Iterable[ConstraintValidator] = (),
    substitute: bool = True,
) -> Any:
    """Inject a node attribute.

    ``name`` defaults to the member name. A string ``default`` goes through
    substitution and conversion like a configured value; any other default
    is used as is.
    """
    return InjectionMarker(
        kind=InjectionKind.ATTRIBUTE,
        name=name,
        aliases=tuple(aliases),
        default=default,
        sensitive=sensitive,
        validators=_validators(required, validators),
        substitute=substitute,
    )


def element(
    name: str | None = None,
    *,
    required: bool = False,
    validators: Iterable[ConstraintValidator] = (),
) -> Any:
    """Inject the object built for a child node (or all matching children
    when the member is declared as a list, tuple or set)."""
    return InjectionMarker(
        kind=InjectionKind.ELEMENT,
        name=name,
        validators=_validators(required, validators),
    )


def value(
    name: str | None = None,
    *,
    required: bool = False,
    validators: Iterable[ConstraintValidator] = (),
    substitute: bool = True,
) -> Any:
    """Inject the node's free text, or the attribute called ``name``."""
    return InjectionMarker(
        kind=InjectionKind.VALUE,
        name=name,
        validators=_validators(required, validators),
        substitute=substitute,
    )


def node(name: str | None = None) -> Any:
    return InjectionMarker(kind=InjectionKind.NODE, name=name)


def configuration(name: str | None = None) -> Any:
    return InjectionMarker(kind=InjectionKind.CONFIGURATION, name=name)


def plugin_factory(func: _F) -> _F:
    """Mark the classmethod or staticmethod that constructs the plugin."""
    _mark(func, FACTORY_MARKER)
    return func


def plugin_builder_factory(func: _F) -> _F:
    """Mark the classmethod or staticmethod returning a fresh builder.

    The method must carry a return annotation naming the builder class, and
    the builder must define ``build()``.
    """
    _mark(func, BUILDER_FACTORY_MARKER)
    return func


def _mark(func: object, marker: str) -> None:
    target: object = getattr(func, "__func__", func)
    if not callable(target):
        raise TypeError(f"{marker} can only mark functions, got {func!r}")
    setattr(target, marker, True)


def is_marked(obj: object, marker: str) -> bool:
    func: Callable[..., object] | object = getattr(obj, "__func__", obj)
    return bool(getattr(func, marker, False))


def _validators(
    required: bool, validators: Iterable[ConstraintValidator]
) -> tuple[ConstraintValidator, ...]:
    found = tuple(validators)
    for validator in found:
        if not isinstance(validator, ConstraintValidator):
            raise TypeError(f"{validator!r} is not a constraint validator")
    if required and not has_required(found):
        return (Required(), *found)
    return found
