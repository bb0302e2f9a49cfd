"""Tests for lazy materialization of the element tree."""

import pytest

from conftest import FakeGraphSource, RecordingTreeView, make_node
from dumpviz.core.aggregator import SizeAggregator
from dumpviz.core.errors import DanglingReferenceError, InvalidProgramSizeError, UnknownKindError
from dumpviz.core.materialize import MaterializationEngine
from dumpviz.core.models import ElementRow


def element_rows(rows):
    return [row for row in rows if isinstance(row.data, ElementRow) and row.sortable]


def test_libraries_become_shown_roots(source, tree_view):
    engine = MaterializationEngine(source, tree_view)

    roots = engine.materialize_roots()

    assert [row.data.node.id for row in roots] == ["library/0", "library/1"]
    assert tree_view.roots == roots
    assert tree_view.shown == roots
    assert all(row.visible and row.level == 0 for row in roots)
    assert engine.failed_roots == {}


def test_children_are_deferred(source, tree_view):
    engine = MaterializationEngine(source, tree_view)
    roots = engine.materialize_roots()

    assert engine.materialized_count == 2
    main = roots[0]
    assert len(main.pending) == 2

    children = element_rows(main.expand())

    assert engine.materialized_count == 4
    assert [row.data.node.id for row in children] == ["class/1", "function/3"]
    assert all(row.level == 1 for row in children)
    # Grandchildren are still pending.
    assert len(children[0].pending) == 2
    assert tree_view.roots == roots


def test_sizes_and_percentages(source, tree_view):
    engine = MaterializationEngine(source, tree_view)
    main, core = engine.materialize_roots()

    assert main.data.cumulative_size == 2240
    assert main.data.size_percent == "22.40%"
    assert core.data.cumulative_size == 600
    assert core.data.size_percent == "6.00%"

    foo = element_rows(main.expand())[0]
    assert foo.data.cumulative_size == 890
    assert foo.data.size_percent == "8.90%"


def test_metadata_rows_are_attached_eagerly(source, tree_view):
    engine = MaterializationEngine(source, tree_view)
    main = engine.materialize_roots()[0]

    assert len(main.children) == 1
    scaffolding = main.children[0]
    assert not scaffolding.sortable
    assert scaffolding.level == 1
    assert [c.text for c in scaffolding.render()] == ["scaffolding", "(unaccounted for)", "160"]


def test_method_row_has_metadata_before_closure(source, tree_view):
    engine = MaterializationEngine(source, tree_view)
    main = engine.materialize_roots()[0]
    foo = element_rows(main.expand())[0]
    bar = element_rows(foo.expand())[0]

    rows = bar.expand()

    assert [row.render()[0].text for row in rows] == [
        "side effects", "modifier", "return type", "parameter", "parameter", "code", "closure",
    ]
    assert rows[-1].level == 3


def test_primary_row_renders_through_row_renderer(source, tree_view):
    engine = MaterializationEngine(source, tree_view)
    main = engine.materialize_roots()[0]

    assert [c.text for c in main.render()] == ["library", "main", "1200", "", "22.40%", ""]


def test_shared_element_materialized_per_parent_but_sized_once(tree_view):
    source = FakeGraphSource([
        make_node("library/0", "library", 10, ["function/1", "function/2"]),
        make_node("function/1", "function", 20, ["closure/1"]),
        make_node("function/2", "function", 30, ["closure/1"]),
        make_node("closure/1", "closure", 40),
    ])
    engine = MaterializationEngine(source, tree_view)
    root = engine.materialize_roots()[0]
    first, second = element_rows(root.expand())

    a = element_rows(first.expand())[0]
    fetches = source.fetch_count
    b = element_rows(second.expand())[0]

    assert a is not b
    assert a.data.node is b.data.node
    assert a.data.cumulative_size == b.data.cumulative_size == 40
    # Second occurrence: one lookup for the row itself, the size is a memo hit.
    assert source.fetch_count == fetches + 1


def test_dangling_child_fails_only_that_child(tree_view):
    source = FakeGraphSource([
        make_node("library/0", "library", 10, ["function/1"]),
        make_node("function/1", "function", 20, ["closure/1", "closure/missing", "closure/2"]),
        make_node("closure/1", "closure", 5),
        make_node("closure/2", "closure", 6),
    ])
    # Size already known, so building the parent does not walk the broken edge.
    aggregator = SizeAggregator(cache={"function/1": 31})
    engine = MaterializationEngine(source, tree_view, aggregator=aggregator)
    parent = engine.materialize("function/1", level=1)
    metadata_count = len(parent.children)

    first = parent.expand_next()
    with pytest.raises(DanglingReferenceError) as exc_info:
        parent.expand_next()

    assert exc_info.value.element_id == "closure/missing"
    assert exc_info.value.referrer_id == "function/1"
    assert parent.children[metadata_count:] == [first]
    assert len(parent.pending) == 1
    assert parent.expand_next().data.node.id == "closure/2"


def test_unknown_kind_child_becomes_error_row(tree_view):
    source = FakeGraphSource([
        make_node("library/0", "library", 10, ["widget/1", "function/1"]),
        make_node("widget/1", "widget", 1),
        make_node("function/1", "function", 2),
    ])
    engine = MaterializationEngine(source, tree_view)
    root = engine.materialize_roots()[0]

    rows = root.expand()

    errors = [row for row in rows if isinstance(row.data, UnknownKindError)]
    assert len(errors) == 1
    assert element_rows(rows)[0].data.node.id == "function/1"


def test_broken_library_does_not_affect_siblings(tree_view):
    source = FakeGraphSource([
        make_node("library/0", "library", 10, ["function/missing"]),
        make_node("library/1", "library", 20, ["function/1"]),
        make_node("function/1", "function", 5),
    ])
    engine = MaterializationEngine(source, tree_view)

    roots = engine.materialize_roots()

    assert [row.data.node.id for row in roots] == ["library/1"]
    assert tree_view.roots == roots
    assert isinstance(engine.failed_roots["library/0"], DanglingReferenceError)


def test_materialize_unknown_id_raises(source, tree_view):
    engine = MaterializationEngine(source, tree_view)

    with pytest.raises(DanglingReferenceError):
        engine.materialize("function/404")


def test_non_positive_program_size_is_fatal(tree_view):
    source = FakeGraphSource([make_node("library/0", "library", 10)], total_size=0)

    with pytest.raises(InvalidProgramSizeError):
        MaterializationEngine(source, tree_view)


def test_render_target_receives_roots(source, tree_view):
    other = RecordingTreeView()
    engine = MaterializationEngine(source, tree_view)

    row = engine.materialize("library/1", is_root=True, render_target=other)

    assert other.roots == [row]
    assert tree_view.roots == []
