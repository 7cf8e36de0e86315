"""Configuration node tree.

A parser (outside this package) turns a configuration document into a tree of
:class:`Node` objects. The builder matches every node to a plugin type and
consumes the node's attributes and children while injecting them, so that
whatever is left over afterwards can be reported as a configuration mistake.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from enum import Enum
from typing import Any

from .errors import InvalidNodeTransitionError
from .metadata import PluginType


class NodeState(str, Enum):
    UNMATCHED = "Unmatched"
    MATCHING = "Matching"
    INJECTING = "Injecting"
    CONSTRUCTED = "Constructed"
    UNMATCHABLE = "Unmatchable"
    CONSTRUCTION_FAILED = "ConstructionFailed"


_TRANSITIONS: dict[NodeState, tuple[NodeState, ...]] = {
    NodeState.UNMATCHED: (NodeState.MATCHING,),
    NodeState.MATCHING: (NodeState.INJECTING, NodeState.UNMATCHABLE),
    NodeState.INJECTING: (
        NodeState.CONSTRUCTED,
        NodeState.CONSTRUCTION_FAILED,
    ),
    NodeState.CONSTRUCTED: (),
    NodeState.UNMATCHABLE: (),
    NodeState.CONSTRUCTION_FAILED: (),
}

TERMINAL_STATES = frozenset(
    state for state, allowed in _TRANSITIONS.items() if not allowed
)


class Node:
    """One parsed configuration element."""

    __slots__ = (
        "name",
        "value",
        "attributes",
        "children",
        "parent",
        "plugin_type",
        "object",
        "_state",
    )

    def __init__(
        self,
        name: str,
        *,
        value: str | None = None,
        attributes: Mapping[str, str] | None = None,
        children: Iterable["Node"] | None = None,
        parent: "Node | None" = None,
        plugin_type: PluginType | None = None,
    ) -> None:
        self.name = name
        self.value = value
        self.attributes: dict[str, str] = dict(attributes or {})
        self.children: list[Node] = []
        self.parent = parent
        self.plugin_type = plugin_type
        self.object: Any = None
        self._state = NodeState.UNMATCHED
        for child in children or ():
            self.add_child(child)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Node":
        """Build a tree from nested dicts.

        Expected shape::

            {"name": "Console", "value": None,
             "attributes": {"target": "SYSTEM_OUT"},
             "children": [{"name": "PatternLayout", ...}]}
        """
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("node mapping requires a non-empty 'name'")
        raw_value = data.get("value")
        attributes = {
            str(key): str(val)
            for key, val in (data.get("attributes") or {}).items()
        }
        node = cls(
            name,
            value=None if raw_value is None else str(raw_value),
            attributes=attributes,
        )
        for child in data.get("children") or ():
            node.add_child(cls.from_mapping(child))
        return node

    @property
    def state(self) -> NodeState:
        return self._state

    def transition(self, target: NodeState) -> None:
        allowed = _TRANSITIONS[self._state]
        if target not in allowed:
            raise InvalidNodeTransitionError(
                node_name=self.name,
                state=self._state.value,
                target=target.value,
            )
        self._state = target

    def add_child(self, child: "Node") -> "Node":
        child.parent = self
        self.children.append(child)
        return child

    def remove_child(self, child: "Node") -> None:
        # identity, not equality: two structurally equal children are distinct
        for index, candidate in enumerate(self.children):
            if candidate is child:
                del self.children[index]
                return
        raise ValueError(f"{child.name!r} is not a child of {self.name!r}")

    def remove_children(self, used: Sequence["Node"]) -> None:
        used_ids = {id(child) for child in used}
        self.children = [
            child for child in self.children if id(child) not in used_ids
        ]

    def pop_attribute(
        self, name: str, aliases: Iterable[str] = ()
    ) -> tuple[str | None, str | None]:
        """Remove and return the first attribute matching ``name`` or one of
        ``aliases`` (case-insensitive, name first).

        Returns ``(matched_key, raw_value)``; both are ``None`` when absent.
        """
        for candidate in (name, *aliases):
            lowered = candidate.lower()
            for key in self.attributes:
                if key.lower() == lowered:
                    return key, self.attributes.pop(key)
        return None, None

    def find_attribute(self, name: str) -> str | None:
        lowered = name.lower()
        for key, raw in self.attributes.items():
            if key.lower() == lowered:
                return raw
        return None

    def has_children(self) -> bool:
        return bool(self.children)

    def iter_tree(self) -> Iterator["Node"]:
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def path(self) -> str:
        parts: list[str] = []
        current: Node | None = self
        while current is not None:
            parts.append(current.name)
            current = current.parent
        return "/".join(reversed(parts))

    def __repr__(self) -> str:
        if self.plugin_type is None:
            return f"Node(name={self.name!r})"
        return f"Node(name={self.name!r}, type={self.plugin_type.name!r})"
