"""Tests for externgen.walker."""

from __future__ import annotations

from typing import List

from externgen.models import Accessibility, SymbolFlags
from externgen.walker import DeclarationWalker
from tests._fixtures.model_builder import InMemoryModel, ModelBuilder, array_of, ref


def _walk(model: InMemoryModel) -> List[str]:
    names: List[str] = []
    DeclarationWalker(model).walk(names.append)
    return names


def test_leaf_roots_are_emitted_in_reverse_declaration_order(model_builder: ModelBuilder) -> None:
    model_builder.root("first", SymbolFlags.VARIABLE)
    model_builder.root("second", SymbolFlags.FUNCTION)
    model_builder.root("third", SymbolFlags.VARIABLE)

    assert _walk(model_builder.build()) == ["third", "second", "first"]


def test_nested_exports_build_dotted_names(model_builder: ModelBuilder) -> None:
    app = model_builder.root("app")
    models = model_builder.export(app, "models", SymbolFlags.MODULE)
    model_builder.export(models, "User", SymbolFlags.FUNCTION)
    model_builder.export(models, "Group", SymbolFlags.FUNCTION)

    assert _walk(model_builder.build()) == ["app.models.Group", "app.models.User"]


def test_shared_interface_is_emitted_at_every_address(model_builder: ModelBuilder) -> None:
    root = model_builder.root("A")
    model_builder.export(root, "b", SymbolFlags.VARIABLE, type_ref=ref("I"))
    iface = model_builder.export(root, "I", SymbolFlags.INTERFACE)
    model_builder.member(iface, "x")

    names = _walk(model_builder.build())

    assert names == ["A.I.x", "A.b.x"]


def test_property_channel_drops_private_and_protected_members(model_builder: ModelBuilder) -> None:
    root = model_builder.root("A")
    model_builder.export(root, "b", SymbolFlags.VARIABLE, type_ref=ref("I"))
    cls = model_builder.export(root, "I", SymbolFlags.CLASS)
    model_builder.member(cls, "x")
    model_builder.member(cls, "y", accessibility=Accessibility.PRIVATE)
    model_builder.member(cls, "z", accessibility=Accessibility.PROTECTED)

    names = _walk(model_builder.build())

    assert "A.b.x" in names
    assert "A.b.y" not in names
    assert "A.b.z" not in names
    # Structural members are reached unfiltered.
    assert {"A.I.x", "A.I.y", "A.I.z"}.issubset(names)
    assert len(names) == 4


def test_variable_typed_by_private_only_class_is_a_leaf(model_builder: ModelBuilder) -> None:
    hidden = model_builder.type("Hidden", SymbolFlags.CLASS)
    model_builder.member(hidden, "secret", accessibility=Accessibility.PRIVATE)
    model_builder.root("handle", SymbolFlags.VARIABLE, type_ref=ref("Hidden"))

    assert _walk(model_builder.build()) == ["handle"]


def test_array_variable_uses_element_type_members(model_builder: ModelBuilder) -> None:
    point = model_builder.type("Point")
    model_builder.member(point, "x")
    model_builder.member(point, "y")
    model_builder.root("points", SymbolFlags.VARIABLE, type_ref=array_of("Point"))

    assert _walk(model_builder.build()) == ["points.y", "points.x"]


def test_only_values_contribute_typed_properties(model_builder: ModelBuilder) -> None:
    iface = model_builder.type("Options")
    model_builder.member(iface, "debug")
    model_builder.root("configure", SymbolFlags.FUNCTION, type_ref=ref("Options"))

    assert _walk(model_builder.build()) == ["configure"]


def test_prototype_artifacts_are_never_emitted(model_builder: ModelBuilder) -> None:
    cls = model_builder.root("Widget", SymbolFlags.CLASS)
    model_builder.export(cls, "prototype", SymbolFlags.PROTOTYPE)
    model_builder.export(cls, "create", SymbolFlags.METHOD, is_static=True)
    model_builder.member(cls, "render", SymbolFlags.METHOD)

    walker = DeclarationWalker(model_builder.build())
    names: List[str] = []
    stats = walker.walk(names.append)

    assert names == ["Widget.render", "Widget.create"]
    assert stats.suppressed == 1
    assert stats.emitted == 2


def test_export_equals_alias_uses_target_name(model_builder: ModelBuilder) -> None:
    model_builder.root("angular-module", SymbolFlags.MODULE | SymbolFlags.ALIAS, alias_target="angular")
    aliased = model_builder.root("lib", SymbolFlags.MODULE | SymbolFlags.ALIAS, alias_target="lodash")
    model_builder.export(aliased, "chunk", SymbolFlags.FUNCTION)

    assert _walk(model_builder.build()) == ["lodash.chunk", "angular"]


def test_self_referencing_property_terminates(model_builder: ModelBuilder) -> None:
    node_type = model_builder.type("TreeNode")
    parent = model_builder.member(node_type, "parent", type_ref=ref("TreeNode"))
    model_builder.root("root", SymbolFlags.VARIABLE, type_ref=ref("TreeNode"))
    model = model_builder.build()

    names = _walk(model)

    assert names == ["root.parent.parent"]
    assert model.expansions[id(parent)] == 1


def test_mutually_recursive_types_terminate(model_builder: ModelBuilder) -> None:
    left = model_builder.type("Left")
    right = model_builder.type("Right")
    model_builder.member(left, "right", type_ref=ref("Right"))
    model_builder.member(right, "left", type_ref=ref("Left"))
    model_builder.root("start", SymbolFlags.VARIABLE, type_ref=ref("Left"))

    assert _walk(model_builder.build()) == ["start.right.left.right"]


def test_node_pushed_from_two_edges_keeps_both_names(model_builder: ModelBuilder) -> None:
    root = model_builder.root("n")
    shared = model_builder.export(root, "x", SymbolFlags.FUNCTION)
    inner = model_builder.export(root, "q", SymbolFlags.MODULE)
    inner.exports["x"] = shared
    model = model_builder.build()

    walker = DeclarationWalker(model)
    names: List[str] = []
    stats = walker.walk(names.append)

    assert names == ["n.q.x", "n.x"]
    assert model.expansions[id(shared)] == 1
    assert stats.reentries == 1


def test_children_are_enumerated_once_per_node(model_builder: ModelBuilder) -> None:
    shared = model_builder.type("Settings")
    model_builder.member(shared, "verbose")
    model_builder.member(shared, "level")
    root = model_builder.root("app")
    for name in ("primary", "secondary", "tertiary"):
        model_builder.export(root, name, SymbolFlags.VARIABLE, type_ref=ref("Settings"))
    model = model_builder.build()

    names = _walk(model)

    assert sorted(names) == sorted(
        f"app.{owner}.{prop}"
        for owner in ("primary", "secondary", "tertiary")
        for prop in ("verbose", "level")
    )
    assert all(count == 1 for count in model.expansions.values())


def test_duplicate_child_across_channels_is_discovered_once(model_builder: ModelBuilder) -> None:
    root = model_builder.root("ns", SymbolFlags.MODULE | SymbolFlags.INTERFACE)
    child = model_builder.export(root, "value", SymbolFlags.VARIABLE)
    root.members["value"] = child

    walker = DeclarationWalker(model_builder.build())

    assert walker.discover_children(root) == [child]
    assert _walk(model_builder.build()) == ["ns.value"]


def test_walks_leave_declarations_untouched_and_repeat(model_builder: ModelBuilder) -> None:
    root = model_builder.root("A")
    model_builder.export(root, "b", SymbolFlags.VARIABLE, type_ref=ref("I"))
    iface = model_builder.export(root, "I", SymbolFlags.INTERFACE)
    member = model_builder.member(iface, "x")
    model = model_builder.build()
    before = dict(vars(member))

    walker = DeclarationWalker(model)
    first: List[str] = []
    second: List[str] = []
    walker.walk(first.append)
    walker.walk(second.append)

    assert first == second
    assert vars(member) == before
    assert walker.qualified_name(member) == "A.b.x"
