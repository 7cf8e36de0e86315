"""Plugin decorator for configurable classes."""

from __future__ import annotations

import collections.abc
import inspect
import sys
import types
from typing import (
    Any,
    Callable,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from plugin_sdk.core import (
    DEFAULT_CATEGORY,
    ConstructionKind,
    InjectionKind,
    InjectionTarget,
    PluginType,
    PluginValidationError,
    get_registry,
)
from plugin_sdk.core.metadata import CollectionKind
from plugin_sdk.core.registry import PLUGIN_MARKER, PluginRegistry
from plugin_sdk.injection.markers import (
    BUILDER_FACTORY_MARKER,
    FACTORY_MARKER,
    InjectionMarker,
    is_marked,
)

_T = TypeVar("_T", bound=type)

_LIST_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
)
_SET_ORIGINS = (
    set,
    frozenset,
    collections.abc.Set,
    collections.abc.MutableSet,
)
_UNTYPED_KINDS = (
    InjectionKind.ELEMENT,
    InjectionKind.NODE,
    InjectionKind.CONFIGURATION,
)


class DefaultPluginDecorator:
    """Decorator used to declare and register plugin classes."""

    _registry: PluginRegistry

    def __init__(self, *, registry: PluginRegistry | None = None) -> None:
        self._registry = registry or get_registry()

    def __call__(
        self,
        *,
        name: str,
        category: str = DEFAULT_CATEGORY,
        element_name: str | None = None,
        aliases: tuple[str, ...] | list[str] = (),
        type_fallback: bool = True,
        defer_children: bool = False,
        printable: bool = False,
    ) -> Callable[[_T], _T]:
        """Register a plugin class.

        Args:
            name: Canonical plugin name, matched case-insensitively against
                node names
            category: Registry partition the plugin lives in
            element_name: Element kind used when the plugin is injected
                into a parent (``"appender"``, ``"layout"``); defaults to
                ``name``
            aliases: Alternative node names
            type_fallback: Whether the plugin may be chosen because its class
                fits the type a parent expects
            defer_children: Leave child nodes unbuilt; the plugin builds them
                itself from an injected ``node()``
            printable: Whether ``repr()`` of built objects may appear in the
                build trace

        Returns:
            A decorator that returns the class unchanged
        """
        if not name or not isinstance(name, str):
            raise PluginValidationError("name is required for registration")
        if not category or not isinstance(category, str):
            raise PluginValidationError("category must be a non-empty string")
        alias_tuple = tuple(aliases)
        for alias in alias_tuple:
            if not isinstance(alias, str) or not alias.strip():
                raise PluginValidationError(
                    "aliases must be non-empty strings"
                )

        def _decorator(target: _T) -> _T:
            if not inspect.isclass(target):
                raise PluginValidationError("plugin target must be a class")
            construction, method_name, targets = self._build_targets(target)
            plugin_type = PluginType(
                category=category,
                name=name,
                plugin_class=target,
                construction=construction,
                targets=targets,
                element_name=element_name or "",
                aliases=tuple(alias.strip() for alias in alias_tuple),
                type_fallback=type_fallback,
                defer_children=defer_children,
                printable=printable,
                entrypoint=method_name,
            )
            setattr(target, PLUGIN_MARKER, plugin_type)
            self._registry.register(plugin_type)
            return target

        return _decorator

    def _build_targets(
        self, plugin_cls: type
    ) -> tuple[ConstructionKind, str, tuple[InjectionTarget, ...]]:
        factory = _find_marked(plugin_cls, FACTORY_MARKER)
        builder_factory = _find_marked(plugin_cls, BUILDER_FACTORY_MARKER)
        if factory is not None and builder_factory is not None:
            raise PluginValidationError(
                f"{plugin_cls.__qualname__} declares both a plugin factory "
                "and a builder factory"
            )
        if factory is not None:
            method_name, raw = factory
            targets = self._factory_targets(plugin_cls, method_name, raw)
            return ConstructionKind.FACTORY, method_name, targets
        if builder_factory is not None:
            method_name, raw = builder_factory
            targets = self._builder_targets(plugin_cls, method_name, raw)
            return ConstructionKind.BUILDER, method_name, targets
        raise PluginValidationError(
            f"{plugin_cls.__qualname__} must define a @plugin_factory or "
            "@plugin_builder_factory method"
        )

    def _factory_targets(
        self, plugin_cls: type, method_name: str, raw: object
    ) -> tuple[InjectionTarget, ...]:
        func = _unwrap_method(plugin_cls, method_name, raw)
        hints = _resolve_hints(plugin_cls, func)
        signature = inspect.signature(getattr(plugin_cls, method_name))
        targets: list[InjectionTarget] = []
        for param in signature.parameters.values():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                raise PluginValidationError(
                    f"{plugin_cls.__qualname__}.{method_name} must not take "
                    "*args or **kwargs"
                )
            if param.kind is param.POSITIONAL_ONLY:
                raise PluginValidationError(
                    f"parameter '{param.name}' of "
                    f"{plugin_cls.__qualname__}.{method_name} must be "
                    "passable by keyword"
                )
            marker = param.default
            if not isinstance(marker, InjectionMarker):
                raise PluginValidationError(
                    f"parameter '{param.name}' of "
                    f"{plugin_cls.__qualname__}.{method_name} has no "
                    "injection marker"
                )
            targets.append(
                _make_target(param.name, marker, hints.get(param.name))
            )
        _check_unique_names(plugin_cls, targets)
        return tuple(targets)

    def _builder_targets(
        self, plugin_cls: type, method_name: str, raw: object
    ) -> tuple[InjectionTarget, ...]:
        func = _unwrap_method(plugin_cls, method_name, raw)
        builder_cls = _resolve_hints(plugin_cls, func).get("return")
        if not inspect.isclass(builder_cls):
            raise PluginValidationError(
                f"{plugin_cls.__qualname__}.{method_name} must be annotated "
                "to return the builder class"
            )
        build = getattr(builder_cls, "build", None)
        if build is None or not callable(build):
            raise PluginValidationError(
                f"builder {builder_cls.__qualname__} must define a callable "
                "'build' method"
            )

        markers: dict[str, InjectionMarker] = {}
        for klass in reversed(builder_cls.__mro__):
            for member, attr in vars(klass).items():
                if isinstance(attr, InjectionMarker):
                    markers[member] = attr
        hints = _resolve_hints(plugin_cls, builder_cls)
        targets = [
            _make_target(member, marker, hints.get(member), builder=True)
            for member, marker in markers.items()
        ]
        _check_unique_names(plugin_cls, targets)
        return tuple(targets)


def _find_marked(plugin_cls: type, marker: str) -> tuple[str, object] | None:
    for klass in plugin_cls.__mro__:
        for member, attr in vars(klass).items():
            if is_marked(attr, marker):
                return member, attr
    return None


def _unwrap_method(
    plugin_cls: type, method_name: str, raw: object
) -> Callable[..., object]:
    if not isinstance(raw, (classmethod, staticmethod)):
        raise PluginValidationError(
            f"{plugin_cls.__qualname__}.{method_name} must be a classmethod "
            "or staticmethod"
        )
    return raw.__func__


def _resolve_hints(plugin_cls: type, obj: object) -> dict[str, Any]:
    module = sys.modules.get(plugin_cls.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    localns: dict[str, Any] = dict(vars(plugin_cls))
    localns[plugin_cls.__name__] = plugin_cls
    try:
        return get_type_hints(obj, globalns=globalns, localns=localns)
    except NameError as exc:
        raise PluginValidationError(
            f"cannot resolve annotations of {plugin_cls.__qualname__}: {exc}"
        ) from exc


def _make_target(
    member: str,
    marker: InjectionMarker,
    hint: Any,
    *,
    builder: bool = False,
) -> InjectionTarget:
    kind = marker.kind
    if hint is None:
        hint = Any if kind in _UNTYPED_KINDS else str
    declared, optional = _split_optional(hint)
    collection: CollectionKind | None = None
    if kind is InjectionKind.ELEMENT:
        declared, collection = _split_collection(declared)
    return InjectionTarget(
        member=member,
        name=marker.name or member,
        kind=kind,
        declared_type=declared,
        collection=collection,
        optional=optional,
        aliases=marker.aliases,
        default=marker.default,
        sensitive=marker.sensitive,
        validators=marker.validators,
        substitute=marker.substitute,
        type_default=not builder,
    )


def _split_optional(hint: Any) -> tuple[Any, bool]:
    if get_origin(hint) not in (Union, types.UnionType):
        return hint, False
    args = get_args(hint)
    remaining = tuple(arg for arg in args if arg is not type(None))
    optional = len(remaining) != len(args)
    if len(remaining) == 1:
        return remaining[0], optional
    return Union[remaining], optional  # type: ignore[return-value]


def _split_collection(hint: Any) -> tuple[Any, CollectionKind | None]:
    origin = get_origin(hint) or hint
    args = get_args(hint)
    if origin is tuple:
        return (args[0] if args else Any), "tuple"
    if origin in _SET_ORIGINS:
        return (args[0] if args else Any), "set"
    if origin in _LIST_ORIGINS:
        return (args[0] if args else Any), "list"
    return hint, None


def _check_unique_names(
    plugin_cls: type, targets: list[InjectionTarget]
) -> None:
    seen: dict[str, str] = {}
    for target in targets:
        if target.kind not in (InjectionKind.ATTRIBUTE, InjectionKind.VALUE):
            continue
        for candidate in target.names():
            lowered = candidate.lower()
            owner = seen.get(lowered)
            if owner is not None and owner != target.member:
                raise PluginValidationError(
                    f"{plugin_cls.__qualname__}: '{candidate}' is bound by "
                    f"both '{owner}' and '{target.member}'"
                )
            seen[lowered] = target.member


# Convenience instance for common imports
Plugin = DefaultPluginDecorator()
