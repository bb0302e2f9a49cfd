"""Tests for primary-row rendering."""

import pytest

from conftest import FakeGraphSource, make_node
from dumpviz.core.errors import InvalidProgramSizeError, UnknownKindError
from dumpviz.core.models import CellAlign, ElementRow, HistoryState, NameWithLink
from dumpviz.core.render import RowRenderer, format_percent, parse_kind


def render(node, source=None, router=None, cumulative=None, percent="1.50%"):
    source = source or FakeGraphSource([node], exclusive={node.id: 77})
    renderer = RowRenderer(source, router)
    return renderer(ElementRow(node=node, cumulative_size=cumulative or node.size, size_percent=percent))


@pytest.mark.parametrize("kind", ["function", "closure", "constructor", "method", "field"])
def test_function_like_and_field_cells(kind):
    node = make_node(f"{kind}/1", kind, 150, name="doWork", declared_type="(int) => String")

    cells = render(node)

    assert len(cells) == 6
    assert cells[0].text == kind
    assert isinstance(cells[1].content, NameWithLink)
    assert cells[1].content.name == "doWork"
    assert cells[1].content.target == HistoryState(view="dep", dep_target=f"{kind}/1")
    assert cells[2].content == 150
    assert cells[3].content == 77
    assert cells[4].text == "1.50%"
    assert [c.align for c in cells[2:5]] == [CellAlign.RIGHT] * 3
    assert cells[5].text == "(int) => String"
    assert cells[5].pre


def test_library_cells():
    cells = render(make_node("library/0", "library", 1200, name="main"), percent="22.40%")

    assert [c.text for c in cells] == ["library", "main", "1200", "", "22.40%", ""]
    assert cells[2].align == CellAlign.RIGHT
    assert cells[4].align == CellAlign.RIGHT


def test_class_cells_use_name_as_type_label():
    cells = render(make_node("class/1", "class", 600, name="Foo"), percent="8.90%")

    assert [c.text for c in cells] == ["class", "Foo", "600", "", "8.90%", "Foo"]
    assert cells[5].pre


def test_typedef_cells_carry_no_size():
    cells = render(make_node("typedef/7", "typedef", 0, name="Callback"))

    assert [c.text for c in cells] == ["typedef", "Callback", "0", "0", "0.00%"]
    assert all(c.align == CellAlign.RIGHT for c in cells[2:])


def test_unknown_kind_raises():
    with pytest.raises(UnknownKindError) as exc_info:
        render(make_node("mystery/1", "mystery", 10))

    assert exc_info.value.kind == "mystery"
    assert exc_info.value.element_id == "mystery/1"


def test_parse_kind_rejects_unknown():
    assert parse_kind("closure").value == "closure"
    with pytest.raises(UnknownKindError):
        parse_kind("Function")


def test_name_link_switches_to_dependency_view(router):
    node = make_node("function/3", "function", 150, name="main")

    cells = render(node, router=router)
    cells[1].content.activate()

    assert router.states == [HistoryState(view="dep", dep_target="function/3")]


def test_name_link_without_router_is_harmless():
    cells = render(make_node("function/3", "function", 150))

    cells[1].content.activate()


def test_format_percent():
    assert format_percent(150, 10000) == "1.50%"
    assert format_percent(10000, 10000) == "100.00%"
    assert format_percent(0, 10000) == "0.00%"


def test_format_percent_rejects_non_positive_total():
    with pytest.raises(InvalidProgramSizeError):
        format_percent(10, 0)
