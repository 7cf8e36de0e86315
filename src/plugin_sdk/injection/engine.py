"""Resolve injection targets against a matched node.

Each :class:`~plugin_sdk.core.metadata.InjectionTarget` is handled by exactly
one branch of :meth:`InjectionEngine.inject`, chosen by its
:class:`~plugin_sdk.core.metadata.InjectionKind`. Every branch consumes what
it binds: attributes are popped and children removed from the node, so
whatever remains afterwards is reported as unused input.

User mistakes never raise here. They are recorded on the
:class:`~plugin_sdk.injection.context.InjectionContext` and the target
resolves to ``None``.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass, field
from typing import Any

from ..convert import TypeConverterRegistry, get_converters
from ..core.errors import PluginValidationError
from ..core.issues import IssueKind
from ..core.metadata import InjectionKind, InjectionTarget, PluginType
from ..core.node import Node
from ..core.registry import is_assignable
from .context import InjectionContext

_COLLECTION_TYPES: dict[str, type] = {"list": list, "tuple": tuple, "set": set}


@dataclass(slots=True)
class InjectionOutcome:
    """Values keyed by member name, in target order, plus the trace."""

    values: dict[str, Any] = field(default_factory=dict)
    fragments: list[str] = field(default_factory=list)


class InjectionEngine:
    def __init__(
        self,
        converters: TypeConverterRegistry | None = None,
        *,
        digest_key: bytes | None = None,
    ) -> None:
        self._converters = converters or get_converters()
        self._digest_key = digest_key or secrets.token_bytes(32)

    @property
    def converters(self) -> TypeConverterRegistry:
        return self._converters

    def inject_all(
        self, plugin_type: PluginType, node: Node, ctx: InjectionContext
    ) -> InjectionOutcome:
        outcome = InjectionOutcome()
        for target in plugin_type.targets:
            resolved, fragment = self._resolve(target, node, ctx)
            outcome.values[target.member] = resolved
            outcome.fragments.append(fragment)
        return outcome

    def inject(
        self, target: InjectionTarget, node: Node, ctx: InjectionContext
    ) -> Any:
        return self._resolve(target, node, ctx)[0]

    def _resolve(
        self, target: InjectionTarget, node: Node, ctx: InjectionContext
    ) -> tuple[Any, str]:
        kind = target.kind
        if kind is InjectionKind.ATTRIBUTE:
            return self._inject_attribute(target, node, ctx)
        if kind is InjectionKind.ELEMENT:
            if target.is_collection:
                return self._inject_elements(target, node, ctx)
            return self._inject_element(target, node, ctx)
        if kind is InjectionKind.VALUE:
            return self._inject_value(target, node, ctx)
        if kind is InjectionKind.NODE:
            return self._inject_node(target, node, ctx)
        if kind is InjectionKind.CONFIGURATION:
            return self._inject_configuration(target, node, ctx)
        raise PluginValidationError(f"unsupported injection kind {kind!r}")

    # attributes and values --------------------------------------------

    def _inject_attribute(
        self, target: InjectionTarget, node: Node, ctx: InjectionContext
    ) -> tuple[Any, str]:
        _, raw = node.pop_attribute(target.name, target.aliases)
        if raw is not None:
            resolved = self._convert(target, raw, node, ctx)
            return resolved, self._fragment(target, raw, resolved)
        if target.has_default:
            default = target.default
            if isinstance(default, str):
                resolved = self._convert(target, default, node, ctx)
                return resolved, self._fragment(target, default, resolved)
            return default, self._fragment(target, None, default)
        resolved = self._type_default(target)
        return resolved, self._fragment(target, None, resolved)

    def _inject_value(
        self, target: InjectionTarget, node: Node, ctx: InjectionContext
    ) -> tuple[Any, str]:
        body = node.value
        key, raw_attribute = node.pop_attribute(target.name)
        if body is not None and raw_attribute is not None:
            ctx.report(
                IssueKind.AMBIGUOUS_BINDING,
                node,
                "Element %s has both a value and an attribute named %s; "
                "using the value",
                node.name,
                key,
            )
        raw = body if body is not None else raw_attribute
        if raw is None:
            resolved = self._type_default(target)
            return resolved, self._fragment(target, None, resolved)
        resolved = self._convert(target, raw, node, ctx)
        return resolved, self._fragment(target, raw, resolved)

    def _convert(
        self,
        target: InjectionTarget,
        raw: str,
        node: Node,
        ctx: InjectionContext,
    ) -> Any:
        text = ctx.substitute(raw) if target.substitute else raw
        result = self._converters.convert(text, target.declared_type)
        if result.ok:
            return result.value
        shown = self._digest(text) if target.sensitive else repr(text)
        ctx.report(
            IssueKind.CONVERSION_FAILURE,
            node,
            "Cannot convert %s for %s of %s to %s: %s",
            shown,
            target.name,
            node.name,
            _type_name(target.declared_type),
            result.error,
        )
        return None

    def _type_default(self, target: InjectionTarget) -> Any:
        if target.optional or not target.type_default:
            return None
        return self._converters.default_for(target.declared_type)

    # elements ---------------------------------------------------------

    def _inject_element(
        self, target: InjectionTarget, node: Node, ctx: InjectionContext
    ) -> tuple[Any, str]:
        for child in node.children:
            if not self._matches(target, child):
                continue
            node.remove_child(child)
            return child.object, f"{target.name}={_describe(child)}"
        return None, f"{target.name}=None"

    def _inject_elements(
        self, target: InjectionTarget, node: Node, ctx: InjectionContext
    ) -> tuple[Any, str]:
        container = _COLLECTION_TYPES[target.collection or "list"]
        used: list[Node] = []
        found: list[Any] = []
        for child in node.children:
            if not self._matches(target, child):
                continue
            used.append(child)
            built = child.object
            if isinstance(built, (list, tuple)):
                # a child that already produced a sequence is the whole answer
                node.remove_children(used)
                return (
                    self._collect(container, list(built), target, node, ctx),
                    f"{target.name}={_describe(child)}",
                )
            if built is None:
                ctx.trace(
                    logging.ERROR,
                    "No object built for %s in %s; skipping it",
                    child.name,
                    node.name,
                    node=child,
                )
                continue
            found.append(built)
        node.remove_children(used)
        shown = ", ".join(
            _describe(child) for child in used if child.object is not None
        )
        return (
            self._collect(container, found, target, node, ctx),
            f"{target.name}={{{shown}}}",
        )

    @staticmethod
    def _collect(
        container: type,
        found: list[Any],
        target: InjectionTarget,
        node: Node,
        ctx: InjectionContext,
    ) -> Any:
        try:
            return container(found)
        except TypeError as exc:
            # set members must be hashable
            ctx.report(
                IssueKind.CONVERSION_FAILURE,
                node,
                "Cannot collect %s of %s into a %s: %s",
                target.name,
                node.name,
                container.__name__,
                exc,
            )
            return None

    @staticmethod
    def _matches(target: InjectionTarget, child: Node) -> bool:
        plugin_type = child.plugin_type
        if plugin_type is None:
            return False
        return plugin_type.matches_element(target.name) or is_assignable(
            target.declared_type, plugin_type.plugin_class
        )

    # node and configuration -------------------------------------------

    def _inject_node(
        self, target: InjectionTarget, node: Node, ctx: InjectionContext
    ) -> tuple[Any, str]:
        if _accepts(target.declared_type, node):
            return node, f"{target.name}={node.name}"
        ctx.report(
            IssueKind.CONVERSION_FAILURE,
            node,
            "%s of %s is declared as %s, which cannot hold a Node",
            target.member,
            node.name,
            _type_name(target.declared_type),
        )
        return None, f"{target.name}=None"

    def _inject_configuration(
        self, target: InjectionTarget, node: Node, ctx: InjectionContext
    ) -> tuple[Any, str]:
        configuration = ctx.configuration
        if configuration is None:
            return None, f"{target.name}=None"
        if _accepts(target.declared_type, configuration):
            return configuration, f"{target.name}={configuration!r}"
        ctx.report(
            IssueKind.CONVERSION_FAILURE,
            node,
            "%s of %s is declared as %s, which cannot hold %s",
            target.member,
            node.name,
            _type_name(target.declared_type),
            type(configuration).__name__,
        )
        return None, f"{target.name}=None"

    # trace ------------------------------------------------------------

    def _fragment(
        self, target: InjectionTarget, raw: str | None, resolved: Any
    ) -> str:
        if resolved is None:
            return f"{target.name}=None"
        if target.sensitive:
            return f'{target.name}="{self._digest(raw or str(resolved))}"'
        shown = raw if raw is not None else str(resolved)
        return f'{target.name}="{shown}"'

    def _digest(self, raw: str) -> str:
        mac = hmac.new(self._digest_key, raw.encode("utf-8"), hashlib.sha256)
        return f"sha256:{mac.hexdigest()[:12]}"


def _accepts(declared: Any, candidate: object) -> bool:
    if declared is Any or declared is object:
        return True
    return isinstance(declared, type) and isinstance(candidate, declared)


def _describe(child: Node) -> str:
    plugin_type = child.plugin_type
    if (
        plugin_type is not None
        and plugin_type.printable
        and child.object is not None
    ):
        return repr(child.object)
    name = plugin_type.name if plugin_type is not None else child.name
    return f"{name}(...)"


def _type_name(declared: Any) -> str:
    return getattr(declared, "__name__", None) or repr(declared)
