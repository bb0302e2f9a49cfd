"""Shared fixtures: a small info dump and an in-memory graph source."""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from dumpviz.core.info_source import InfoGraphSource
from dumpviz.core.interfaces import IGraphSource, IRouter, ITreeView
from dumpviz.core.models import ElementNode, HistoryState, ProgramInfo


def make_node(element_id: str, kind: str, size: int, children: Iterable[str] = (), **fields) -> ElementNode:
    fields.setdefault("name", element_id.split("/")[-1])
    return ElementNode(id=element_id, kind=kind, size=size, children=list(children), **fields)


class FakeGraphSource(IGraphSource):
    """Dict-backed graph source that counts lookups."""

    def __init__(self, nodes: Iterable[ElementNode], total_size: int = 10000,
                 exclusive: Optional[Dict[str, int]] = None):
        self.nodes = {node.id: node for node in nodes}
        self._total_size = total_size
        self.exclusive = exclusive or {}
        self.fetch_count = 0

    def node_by_id(self, element_id: str) -> Optional[ElementNode]:
        self.fetch_count += 1
        return self.nodes.get(element_id)

    def nodes_of_kind(self, kind: str) -> List[ElementNode]:
        return [node for node in self.nodes.values() if node.kind == kind]

    @property
    def total_size(self) -> int:
        return self._total_size

    def exclusive_size(self, element_id: str) -> int:
        return self.exclusive.get(element_id, 0)

    @property
    def program(self) -> ProgramInfo:
        return ProgramInfo(size=self._total_size)


class RecordingTreeView(ITreeView):
    def __init__(self):
        self.columns = None
        self.roots = []
        self.shown = []

    def set_columns(self, names, help_text, width_hints) -> None:
        self.columns = (list(names), list(help_text), list(width_hints))

    def add_root(self, row) -> None:
        self.roots.append(row)

    def show(self, row) -> None:
        row.show()
        self.shown.append(row)


class RecordingRouter(IRouter):
    def __init__(self):
        self.states: List[HistoryState] = []

    def switch_to(self, state: HistoryState) -> None:
        self.states.append(state)


SAMPLE_DUMP = {
    "program": {
        "size": 10000,
        "dart2jsVersion": "1.5.0",
        "compilationMoment": "2014-06-01 12:00:00.000",
        "compilationDuration": "0:00:12.500000",
        "noSuchMethodEnabled": False,
    },
    "elements": {
        "library": {
            "library/0": {
                "id": "library/0", "kind": "library", "name": "main",
                "size": 1200, "children": ["class/1", "function/3"],
            },
            "library/1": {
                "id": "library/1", "kind": "library", "name": "dart:core",
                "size": 500, "children": ["function/5"],
            },
        },
        "class": {
            "class/1": {
                "id": "class/1", "kind": "class", "name": "Foo",
                "size": 600, "children": ["function/2", "field/4"],
            },
        },
        "function": {
            "function/2": {
                "id": "function/2", "kind": "method", "name": "bar",
                "size": 200, "children": ["closure/6"], "parent": "class/1",
                "sideEffects": "SideEffects(reads anything; writes anything)",
                "modifiers": {"static": False, "const": False, "factory": False, "external": True},
                "returnType": "int",
                "inferredReturnType": "[exact=JSUInt31]",
                "type": "(dynamic, String) => int",
                "parameters": [
                    {"name": "x", "type": "[null|subclass=Object]"},
                    {"name": "y", "type": "[exact=JSString]", "declaredType": "String"},
                ],
                "code": "bar: function(x, y) {\n  return 1;\n}",
            },
            "function/3": {
                "id": "function/3", "kind": "function", "name": "main",
                "size": 150, "children": [], "parent": "library/0",
                "sideEffects": "SideEffects(reads nothing; writes nothing)",
                "modifiers": {"static": True},
                "returnType": "void",
                "inferredReturnType": "[null]",
                "type": "() => void",
                "parameters": [],
                "code": "",
            },
            "function/5": {
                "id": "function/5", "kind": "function", "name": "print",
                "size": 100, "children": [], "parent": "library/1",
            },
        },
        "field": {
            "field/4": {
                "id": "field/4", "kind": "field", "name": "count",
                "size": 50, "children": [], "parent": "class/1",
                "type": "int", "inferredType": "[exact=JSUInt31]",
                "code": "count = 0",
            },
        },
        "closure": {
            "closure/6": {
                "id": "closure/6", "kind": "closure", "name": "bar_closure",
                "size": 40, "children": [], "parent": "function/2",
            },
        },
        "typedef": {
            "typedef/7": {"id": "typedef/7", "kind": "typedef", "name": "Callback", "size": 0},
        },
    },
    "holding": {
        "function/3": [{"id": "function/2", "mask": None}, {"id": "function/5"}],
        "function/2": [{"id": "field/4"}],
    },
    "dump_version": 3,
}


@pytest.fixture
def sample_dump() -> dict:
    return json.loads(json.dumps(SAMPLE_DUMP))


@pytest.fixture
def info_file(tmp_path: Path, sample_dump: dict) -> Path:
    path = tmp_path / "out.js.info.json"
    path.write_text(json.dumps(sample_dump), encoding="utf-8")
    return path


@pytest.fixture
def source(sample_dump: dict) -> InfoGraphSource:
    return InfoGraphSource.from_dict(sample_dump)


@pytest.fixture
def tree_view() -> RecordingTreeView:
    return RecordingTreeView()


@pytest.fixture
def router() -> RecordingRouter:
    return RecordingRouter()
