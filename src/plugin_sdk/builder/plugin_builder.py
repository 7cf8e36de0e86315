"""Construct one plugin object from one matched node."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import Any

from ..core.errors import PluginValidationError
from ..core.issues import IssueKind
from ..core.metadata import ConstructionKind, PluginType
from ..core.node import Node, NodeState
from ..injection.context import InjectionContext
from ..injection.engine import InjectionEngine
from ..injection.markers import InjectionMarker


class PluginBuilder:
    """Inject a node into a plugin's factory or builder and construct it.

    Failures caused by the configuration (a required value missing, the
    plugin's own code raising) are recorded on the context and yield
    ``None``. Malformed plugin metadata raises
    :class:`~plugin_sdk.core.errors.PluginValidationError`.
    """

    def __init__(
        self,
        plugin_type: PluginType,
        *,
        engine: InjectionEngine | None = None,
    ) -> None:
        self._plugin_type = plugin_type
        self._engine = engine or InjectionEngine()

    @property
    def plugin_type(self) -> PluginType:
        return self._plugin_type

    def build(self, node: Node, ctx: InjectionContext) -> Any:
        plugin_type = self._plugin_type
        node.plugin_type = plugin_type
        _enter_injecting(node)
        ctx.trace(
            logging.DEBUG,
            "Building Plugin[name=%s, class=%s]",
            plugin_type.name,
            _qualified_name(plugin_type.plugin_class),
            node=node,
        )

        outcome = self._engine.inject_all(plugin_type, node, ctx)
        ctx.trace(
            logging.DEBUG,
            "%s(%s)",
            plugin_type.name,
            ", ".join(outcome.fragments),
            node=node,
        )
        self._report_unconsumed(node, ctx)

        try:
            create, checked = self._prepare(outcome.values)
            if not self._validate(node, checked, ctx):
                node.transition(NodeState.CONSTRUCTION_FAILED)
                return None
            built = create()
        except PluginValidationError:
            raise
        except Exception as exc:
            ctx.report(
                IssueKind.CONSTRUCTION_FAILED,
                node,
                "Could not create plugin of type %s for element %s: %s",
                _qualified_name(plugin_type.plugin_class),
                node.name,
                exc,
                exc_info=exc,
            )
            node.transition(NodeState.CONSTRUCTION_FAILED)
            return None

        if built is None:
            ctx.report(
                IssueKind.CONSTRUCTION_FAILED,
                node,
                "%s returned no object for element %s",
                plugin_type.name,
                node.name,
            )
            node.transition(NodeState.CONSTRUCTION_FAILED)
            return None

        node.object = built
        node.transition(NodeState.CONSTRUCTED)
        return built

    def _prepare(
        self, values: dict[str, Any]
    ) -> tuple[Callable[[], Any], dict[str, Any]]:
        """Return the call that constructs the plugin and the values its
        validators check: the injected values for a factory, the builder's
        attributes once injected for a builder."""
        plugin_type = self._plugin_type
        entrypoint = getattr(
            plugin_type.plugin_class, plugin_type.entrypoint, None
        )
        if entrypoint is None or not callable(entrypoint):
            raise PluginValidationError(
                f"{plugin_type.describe()} has no callable "
                f"{plugin_type.entrypoint!r}"
            )
        if plugin_type.construction is ConstructionKind.FACTORY:
            return partial(entrypoint, **values), values

        builder = entrypoint()
        for target in plugin_type.targets:
            resolved = values[target.member]
            if resolved is None:
                # keep what the builder set up itself
                current = getattr(builder, target.member, None)
                if not isinstance(current, InjectionMarker):
                    continue
                if not target.optional:
                    resolved = self._engine.converters.default_for(
                        target.declared_type
                    )
            setattr(builder, target.member, resolved)
        checked = {
            target.member: getattr(builder, target.member, None)
            for target in plugin_type.targets
        }
        return builder.build, checked

    def _validate(
        self, node: Node, values: dict[str, Any], ctx: InjectionContext
    ) -> bool:
        valid = True
        for target in self._plugin_type.targets:
            resolved = values[target.member]
            if resolved is None and not target.required:
                continue
            for validator in target.validators:
                if validator.is_valid(resolved):
                    continue
                ctx.report(
                    validator.issue_kind,
                    node,
                    "Invalid %s for element %s: %s",
                    target.name,
                    node.name,
                    validator.message,
                )
                valid = False
                break
        return valid

    def _report_unconsumed(self, node: Node, ctx: InjectionContext) -> None:
        for key in node.attributes:
            ctx.report(
                IssueKind.UNCONSUMED_INPUT,
                node,
                '%s contains an invalid element or attribute "%s"',
                node.name,
                key,
            )
        if self._plugin_type.defer_children:
            return
        for child in node.children:
            ctx.report(
                IssueKind.UNCONSUMED_INPUT,
                node,
                "%s has no parameter that matches element %s",
                node.name,
                child.name,
            )


def _enter_injecting(node: Node) -> None:
    if node.state is NodeState.UNMATCHED:
        node.transition(NodeState.MATCHING)
    if node.state is NodeState.MATCHING:
        node.transition(NodeState.INJECTING)
    elif node.state is not NodeState.INJECTING:
        # surfaces the invalid transition for nodes already built
        node.transition(NodeState.INJECTING)


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"
