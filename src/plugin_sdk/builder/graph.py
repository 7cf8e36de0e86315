"""Build a whole object graph from a configuration node tree."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..convert import TypeConverterRegistry
from ..core.issues import BuildIssue, IssueKind
from ..core.metadata import DEFAULT_CATEGORY, InjectionKind, PluginType
from ..core.node import Node, NodeState
from ..core.registry import PluginRegistry, get_registry
from ..injection.context import InjectionContext
from ..injection.engine import InjectionEngine
from ..injection.substitution import PropertiesSubstitutor, Substitutor
from ..logging import LoggingStatusSink, StatusSinkProtocol, get_event_logger
from ..settings import BuilderSettings, build_status_sink
from .plugin_builder import PluginBuilder

_LOGGER = logging.getLogger(__name__)
_EVENT_LOGGER = get_event_logger()


@dataclass(slots=True)
class Configuration:
    """The build environment, injectable into plugins via
    ``configuration()`` markers."""

    registry: PluginRegistry
    substitutor: Substitutor
    status: StatusSinkProtocol
    properties: Mapping[str, str] = field(default_factory=dict)
    root: Node | None = None
    name: str = ""

    def substitute(self, raw: str) -> str:
        return self.substitutor(raw)

    def __repr__(self) -> str:
        root = self.root.name if self.root is not None else None
        return f"Configuration(name={self.name!r}, root={root!r})"


@dataclass(frozen=True, slots=True)
class BuildResult:
    object: Any
    ok: bool
    errors: tuple[BuildIssue, ...] = ()

    @property
    def warnings(self) -> tuple[BuildIssue, ...]:
        return tuple(issue for issue in self.errors if not issue.is_error)


class ConfigurationBuilder:
    """Walk a node tree depth-first and construct every node's plugin.

    Each node is matched before its children are built so that the parent's
    element types can drive type-based matching of the children. Children are
    built before their parent is constructed unless the parent defers them.
    """

    def __init__(
        self,
        registry: PluginRegistry | None = None,
        substitutor: Substitutor | None = None,
        status: StatusSinkProtocol | None = None,
        *,
        converters: TypeConverterRegistry | None = None,
        properties: Mapping[str, str] | None = None,
        name: str = "",
        default_category: str = DEFAULT_CATEGORY,
    ) -> None:
        self._registry = registry or get_registry()
        self._properties = dict(properties or {})
        self._substitutor = substitutor or PropertiesSubstitutor(
            self._properties
        )
        self._status = status or LoggingStatusSink()
        self._engine = InjectionEngine(converters)
        self._name = name
        self._default_category = default_category

    @classmethod
    def from_settings(
        cls,
        settings: BuilderSettings,
        registry: PluginRegistry | None = None,
        substitutor: Substitutor | None = None,
        *,
        properties: Mapping[str, str] | None = None,
        name: str = "",
    ) -> "ConfigurationBuilder":
        """A builder whose status sink and default category come from
        ``settings``."""
        return cls(
            registry,
            substitutor,
            build_status_sink(settings),
            properties=properties,
            name=name,
            default_category=settings.default_category,
        )

    @property
    def registry(self) -> PluginRegistry:
        return self._registry

    @property
    def default_category(self) -> str:
        return self._default_category

    def build(
        self,
        node: Node,
        expected_category: str | None = None,
        *,
        expected_type: type | None = None,
    ) -> BuildResult:
        configuration = Configuration(
            registry=self._registry,
            substitutor=self._substitutor,
            status=self._status,
            properties=self._properties,
            root=node,
            name=self._name,
        )
        ctx = InjectionContext(
            substitutor=self._substitutor,
            status=self._status,
            configuration=configuration,
        )
        built = self._build_node(
            node,
            expected_category or self._default_category,
            ctx,
            expected_types=(expected_type,),
            is_root=True,
        )
        result = BuildResult(
            object=built,
            ok=built is not None and not ctx.has_errors,
            errors=tuple(ctx.issues),
        )
        _EVENT_LOGGER.debug(
            "Built %s: ok=%s, %d issue(s)",
            node.name,
            result.ok,
            len(result.errors),
            logger=_LOGGER,
        )
        return result

    def _build_node(
        self,
        node: Node,
        category: str,
        ctx: InjectionContext,
        *,
        expected_types: tuple[type | None, ...] = (None,),
        is_root: bool = False,
    ) -> Any:
        node.transition(NodeState.MATCHING)
        plugin_type = node.plugin_type or self._match(
            node, category, expected_types
        )
        if plugin_type is None:
            node.transition(NodeState.UNMATCHABLE)
            ctx.report(
                IssueKind.UNRESOLVED_PLUGIN,
                node,
                "Unable to locate plugin type for %s in category %s",
                node.name,
                category,
            )
            # the root's own parent lies outside this build
            if not is_root and node.parent is not None:
                node.parent.remove_child(node)
            return None

        node.plugin_type = plugin_type
        node.transition(NodeState.INJECTING)
        if not plugin_type.defer_children:
            element_types = _element_types(plugin_type)
            for child in list(node.children):
                self._build_node(
                    child, category, ctx, expected_types=element_types
                )
        return PluginBuilder(plugin_type, engine=self._engine).build(
            node, ctx
        )

    def _match(
        self,
        node: Node,
        category: str,
        expected_types: tuple[type | None, ...],
    ) -> PluginType | None:
        found = self._registry.find(category, node.name)
        if found is not None:
            return found
        for expected in expected_types:
            if expected is None:
                continue
            found = self._registry.find(category, node.name, expected)
            if found is not None:
                return found
        return None


def _element_types(plugin_type: PluginType) -> tuple[type | None, ...]:
    types = tuple(
        target.declared_type
        for target in plugin_type.targets
        if target.kind is InjectionKind.ELEMENT
        and isinstance(target.declared_type, type)
    )
    return types or (None,)


def build(
    node: Node,
    expected_category: str | None = None,
    *,
    expected_type: type | None = None,
    registry: PluginRegistry | None = None,
    substitutor: Substitutor | None = None,
    status: StatusSinkProtocol | None = None,
    properties: Mapping[str, str] | None = None,
    settings: BuilderSettings | None = None,
) -> BuildResult:
    """Build the object graph rooted at ``node``.

    Configuration mistakes never raise: they are returned on
    :attr:`BuildResult.errors` and the affected nodes are left out of the
    graph. Errors in plugin metadata propagate. Without ``expected_category``
    the category comes from ``settings``, then ``DEFAULT_CATEGORY``.
    """
    builder = ConfigurationBuilder(
        registry,
        substitutor,
        status or (build_status_sink(settings) if settings else None),
        properties=properties,
        default_category=(
            settings.default_category if settings else DEFAULT_CATEGORY
        ),
    )
    return builder.build(
        node, expected_category, expected_type=expected_type
    )


def register_plugin(
    plugin_type: PluginType, *, registry: PluginRegistry | None = None
) -> PluginType:
    return (registry or get_registry()).register(plugin_type)


def find_plugin_type(
    category: str,
    name: str,
    *,
    registry: PluginRegistry | None = None,
) -> PluginType | None:
    return (registry or get_registry()).find(category, name)
