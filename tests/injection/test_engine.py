import logging
from typing import Any

import pytest

from plugin_sdk.core import (
    ConstructionKind,
    InjectionKind,
    InjectionTarget,
    IssueKind,
    Level,
    Node,
    PluginType,
)
from plugin_sdk.injection import (
    InjectionContext,
    InjectionEngine,
    PropertiesSubstitutor,
)
from plugin_sdk.logging import InMemoryStatusSink


class _Layout:
    pass


class _Pattern(_Layout):
    pass


class _Filter:
    pass


_PATTERN = PluginType(
    category="Core",
    name="PatternLayout",
    plugin_class=_Pattern,
    construction=ConstructionKind.FACTORY,
    element_name="layout",
)
_FILTER = PluginType(
    category="Core",
    name="ThresholdFilter",
    plugin_class=_Filter,
    construction=ConstructionKind.FACTORY,
    element_name="filter",
)


@pytest.fixture
def sink() -> InMemoryStatusSink:
    return InMemoryStatusSink()


@pytest.fixture
def ctx(sink: InMemoryStatusSink) -> InjectionContext:
    return InjectionContext(
        substitutor=PropertiesSubstitutor({"level": "WARN", "dir": "/var"}),
        status=sink,
    )


@pytest.fixture
def engine() -> InjectionEngine:
    return InjectionEngine(digest_key=b"test-key")


def _attr(member: str, declared: Any = str, **kwargs: Any) -> InjectionTarget:
    return InjectionTarget(
        member=member,
        name=kwargs.pop("name", member),
        kind=InjectionKind.ATTRIBUTE,
        declared_type=declared,
        **kwargs,
    )


def _child(plugin_type: PluginType, built: object, name: str = "") -> Node:
    child = Node(name or plugin_type.name, plugin_type=plugin_type)
    child.object = built
    return child


# attributes ------------------------------------------------------------


def test_attribute_is_converted_and_consumed(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    node = Node("Filter", attributes={"Level": "INFO", "other": "x"})

    resolved = engine.inject(_attr("level", Level), node, ctx)

    assert resolved is Level.INFO
    assert node.attributes == {"other": "x"}
    assert ctx.issues == []


def test_attribute_alias(engine: InjectionEngine, ctx: InjectionContext) -> None:
    node = Node("Filter", attributes={"levelMin": "INFO"})
    target = _attr("min_level", Level, name="minLevel", aliases=("levelMin",))

    assert engine.inject(target, node, ctx) is Level.INFO
    assert node.attributes == {}


def test_attribute_is_substituted_before_conversion(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    node = Node("File", attributes={"fileName": "${dir}/app.log"})

    assert engine.inject(_attr("fileName"), node, ctx) == "/var/app.log"


def test_substitution_can_be_disabled(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    node = Node("Pattern", attributes={"pattern": "${dir}"})
    target = _attr("pattern", substitute=False)

    assert engine.inject(target, node, ctx) == "${dir}"


def test_string_default_is_substituted_and_converted(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    target = _attr("level", Level, default="${level}")

    assert engine.inject(target, Node("Filter"), ctx) is Level.WARN


def test_typed_default_is_used_as_is(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    target = _attr("level", Level, default=Level.ALL)

    assert engine.inject(target, Node("Filter"), ctx) is Level.ALL


@pytest.mark.parametrize(
    ("declared", "optional", "expected"),
    [
        (int, False, 0),
        (bool, False, False),
        (float, False, 0.0),
        (int, True, None),
        (str, False, None),
        (Level, False, None),
    ],
)
def test_absent_attribute_without_default(
    engine: InjectionEngine,
    ctx: InjectionContext,
    declared: type,
    optional: bool,
    expected: object,
) -> None:
    target = _attr("size", declared, optional=optional)

    assert engine.inject(target, Node("Buffer"), ctx) == expected
    assert ctx.issues == []


def test_builder_targets_skip_type_defaults(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    target = _attr("size", int, type_default=False)

    assert engine.inject(target, Node("Buffer"), ctx) is None


def test_invalid_attribute_is_recorded_not_raised(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    node = Node("Buffer", attributes={"size": "123123123123L"})

    resolved = engine.inject(_attr("size", int), node, ctx)

    assert resolved is None
    assert [issue.kind for issue in ctx.issues] == [
        IssueKind.CONVERSION_FAILURE
    ]
    assert ctx.issues[0].node_path == "Buffer"
    assert ctx.issues[0].severity == logging.ERROR
    assert node.attributes == {}


def test_sensitive_values_never_reach_the_trace(
    engine: InjectionEngine, sink: InMemoryStatusSink
) -> None:
    ctx = InjectionContext(status=sink)
    plugin_type = PluginType(
        category="Core",
        name="Http",
        plugin_class=object,
        construction=ConstructionKind.FACTORY,
        targets=(
            _attr("password", sensitive=True),
            _attr("port", int, sensitive=True),
        ),
    )
    node = Node("Http", attributes={"password": "hunter2", "port": "pw-999"})

    outcome = engine.inject_all(plugin_type, node, ctx)

    assert outcome.values["password"] == "hunter2"
    joined = " ".join(outcome.fragments) + " ".join(sink.messages())
    assert "hunter2" not in joined
    assert "pw-999" not in joined
    assert 'password="sha256:' in outcome.fragments[0]
    assert ctx.issues[0].kind is IssueKind.CONVERSION_FAILURE


def test_digest_is_keyed(ctx: InjectionContext) -> None:
    target = _attr("password", sensitive=True)
    plugin_type = PluginType(
        category="Core",
        name="Http",
        plugin_class=object,
        construction=ConstructionKind.FACTORY,
        targets=(target,),
    )

    first = InjectionEngine(digest_key=b"a").inject_all(
        plugin_type, Node("Http", attributes={"password": "s"}), ctx
    )
    second = InjectionEngine(digest_key=b"b").inject_all(
        plugin_type, Node("Http", attributes={"password": "s"}), ctx
    )

    assert first.fragments != second.fragments


# elements --------------------------------------------------------------


def _element(
    member: str,
    declared: Any,
    *,
    name: str | None = None,
    collection: str | None = None,
) -> InjectionTarget:
    return InjectionTarget(
        member=member,
        name=name or member,
        kind=InjectionKind.ELEMENT,
        declared_type=declared,
        collection=collection,  # type: ignore[arg-type]
    )


def test_scalar_element_takes_first_match_by_element_name(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    first, second = _Pattern(), _Pattern()
    node = Node("Console")
    node.add_child(_child(_FILTER, _Filter()))
    node.add_child(_child(_PATTERN, first))
    node.add_child(_child(_PATTERN, second))

    resolved = engine.inject(_element("layout", Any), node, ctx)

    assert resolved is first
    assert [child.object for child in node.children][1] is second
    assert len(node.children) == 2


def test_scalar_element_matches_by_type(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    built = _Pattern()
    node = Node("Console")
    node.add_child(_child(_PATTERN, built))

    target = _element("formatter", _Layout)

    assert engine.inject(target, node, ctx) is built
    assert node.children == []


def test_missing_scalar_element_is_none(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    node = Node("Console")
    node.add_child(_child(_FILTER, _Filter()))

    assert engine.inject(_element("layout", _Layout), node, ctx) is None
    assert len(node.children) == 1


def test_collection_keeps_document_order_and_consumes(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    a, b, c = _Filter(), _Filter(), _Filter()
    node = Node("Filters")
    node.add_child(_child(_FILTER, a, "A"))
    stray = node.add_child(_child(_PATTERN, _Pattern()))
    node.add_child(_child(_FILTER, b, "B"))
    node.add_child(_child(_FILTER, c, "C"))

    resolved = engine.inject(
        _element("filters", _Filter, name="filter", collection="list"),
        node,
        ctx,
    )

    assert resolved == [a, b, c]
    assert node.children == [stray]


@pytest.mark.parametrize(("collection", "kind"), [("tuple", tuple), ("set", set)])
def test_collection_container_follows_declaration(
    engine: InjectionEngine,
    ctx: InjectionContext,
    collection: str,
    kind: type,
) -> None:
    node = Node("Filters")
    node.add_child(_child(_FILTER, _Filter()))

    resolved = engine.inject(
        _element("filters", _Filter, collection=collection), node, ctx
    )

    assert isinstance(resolved, kind)
    assert len(resolved) == 1


def test_collection_short_circuits_on_sequence_child(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    produced = [_Filter(), _Filter()]
    node = Node("Root")
    node.add_child(_child(_FILTER, _Filter(), "Early"))
    node.add_child(_child(_FILTER, produced, "Filters"))
    node.add_child(_child(_FILTER, _Filter(), "Late"))

    resolved = engine.inject(
        _element("filters", _Filter, name="filter", collection="list"),
        node,
        ctx,
    )

    assert resolved == produced
    # children matched before the sequence are consumed with it
    assert [child.name for child in node.children] == ["Late"]
    assert ctx.issues == []


def test_unhashable_set_members_are_reported(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    node = Node("Filters")
    node.add_child(_child(_FILTER, [[1], [2]], "Nested"))

    resolved = engine.inject(
        _element("filter", _Filter, collection="set"), node, ctx
    )

    assert resolved is None
    assert node.children == []
    assert [issue.kind for issue in ctx.issues] == [
        IssueKind.CONVERSION_FAILURE
    ]
    assert "into a set" in ctx.issues[0].message


def test_collection_skips_children_without_object(
    engine: InjectionEngine, ctx: InjectionContext, sink: InMemoryStatusSink
) -> None:
    good = _Filter()
    node = Node("Filters")
    node.add_child(_child(_FILTER, None, "Broken"))
    node.add_child(_child(_FILTER, good, "Good"))

    resolved = engine.inject(
        _element("filter", _Filter, collection="list"), node, ctx
    )

    assert resolved == [good]
    assert node.children == []
    assert any("No object built for Broken" in m for m in sink.messages())


def test_empty_collection_when_nothing_matches(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    resolved = engine.inject(
        _element("filter", _Filter, collection="list"), Node("Filters"), ctx
    )
    assert resolved == []


# values, nodes, configuration -----------------------------------------


def _value_target(declared: Any = str) -> InjectionTarget:
    return InjectionTarget(
        member="text",
        name="value",
        kind=InjectionKind.VALUE,
        declared_type=declared,
        optional=True,
    )


def test_value_uses_body(engine: InjectionEngine, ctx: InjectionContext) -> None:
    node = Node("Property", value="${dir}/x")

    assert engine.inject(_value_target(), node, ctx) == "/var/x"


def test_value_falls_back_to_attribute(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    node = Node("Property", attributes={"value": "42"})

    assert engine.inject(_value_target(int), node, ctx) == 42
    assert node.attributes == {}


def test_value_body_wins_over_attribute(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    node = Node("Property", value="body", attributes={"value": "attr"})

    resolved = engine.inject(_value_target(), node, ctx)

    assert resolved == "body"
    assert node.attributes == {}
    assert [issue.kind for issue in ctx.issues] == [
        IssueKind.AMBIGUOUS_BINDING
    ]
    assert ctx.issues[0].severity == logging.WARNING


def test_value_absent(engine: InjectionEngine, ctx: InjectionContext) -> None:
    assert engine.inject(_value_target(), Node("Property"), ctx) is None


def test_node_injection(engine: InjectionEngine, ctx: InjectionContext) -> None:
    target = InjectionTarget(
        member="definition", name="definition", kind=InjectionKind.NODE,
        declared_type=Node,
    )
    node = Node("Routing")

    assert engine.inject(target, node, ctx) is node


def test_node_injection_type_mismatch(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    target = InjectionTarget(
        member="definition", name="definition", kind=InjectionKind.NODE,
        declared_type=str,
    )

    assert engine.inject(target, Node("Routing"), ctx) is None
    assert ctx.issues[0].kind is IssueKind.CONVERSION_FAILURE


def test_configuration_injection(engine: InjectionEngine) -> None:
    class Config:
        pass

    config = Config()
    ctx = InjectionContext(status=InMemoryStatusSink(), configuration=config)
    accepted = InjectionTarget(
        member="config", name="config", kind=InjectionKind.CONFIGURATION,
        declared_type=Config,
    )
    rejected = InjectionTarget(
        member="config", name="config", kind=InjectionKind.CONFIGURATION,
        declared_type=int,
    )

    assert engine.inject(accepted, Node("Routing"), ctx) is config
    assert engine.inject(rejected, Node("Routing"), ctx) is None
    assert len(ctx.issues) == 1


def test_configuration_absent_outside_a_graph(
    engine: InjectionEngine, ctx: InjectionContext
) -> None:
    target = InjectionTarget(
        member="config", name="config", kind=InjectionKind.CONFIGURATION,
        declared_type=Any,
    )

    assert engine.inject(target, Node("Routing"), ctx) is None
    assert ctx.issues == []


def test_trace_fragments(engine: InjectionEngine, ctx: InjectionContext) -> None:
    plugin_type = PluginType(
        category="Core",
        name="Console",
        plugin_class=object,
        construction=ConstructionKind.FACTORY,
        targets=(
            _attr("name"),
            _attr("follow", bool),
            _element("layout", _Layout),
        ),
    )
    node = Node("Console", attributes={"name": "out"})
    node.add_child(_child(_PATTERN, _Pattern()))

    outcome = engine.inject_all(plugin_type, node, ctx)

    assert outcome.fragments == [
        'name="out"',
        'follow="False"',
        "layout=PatternLayout(...)",
    ]
    assert list(outcome.values) == ["name", "follow", "layout"]
