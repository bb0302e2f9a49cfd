"""Graph source backed by a compiler info dump (JSON).

An info dump lists every element of the compiled program grouped by kind,
the containment edges between them (``children``), and optionally which
elements hold on to which others (``holding``).
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from pydantic import ValidationError

from dumpviz.core.errors import DanglingReferenceError, InfoFileError
from dumpviz.core.interfaces import IGraphSource
from dumpviz.core.models import ElementKind, ElementNode, InfoDump, ProgramInfo

logger = logging.getLogger(__name__)


class InfoGraphSource(IGraphSource):
    """Read-only element index over a parsed ``InfoDump``."""

    def __init__(self, dump: InfoDump):
        self.dump = dump
        self._nodes: Dict[str, ElementNode] = {}
        self._by_kind: Dict[str, List[ElementNode]] = defaultdict(list)
        self._parents: Dict[str, Set[str]] = defaultdict(set)
        self._dependents: Dict[str, List[str]] = defaultdict(list)
        self._exclusive: Dict[str, int] = {}

        for kind, elements in dump.elements.items():
            for element_id, node in elements.items():
                if not node.kind:
                    node = node.model_copy(update={"kind": kind})
                if node.id != element_id:
                    logger.warning(f"Element keyed as {element_id} has id {node.id}, using {node.id}")
                self._nodes[node.id] = node
                self._by_kind[node.kind].append(node)

        for node in self._nodes.values():
            for child_id in node.children:
                self._parents[child_id].add(node.id)

        for holder_id, edges in dump.holding.items():
            for edge in edges:
                self._dependents[edge.id].append(holder_id)

        logger.debug(f"Indexed {len(self._nodes)} elements across {len(self._by_kind)} kinds")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "InfoGraphSource":
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise InfoFileError(f"Cannot read info file {path}: {e}", path=str(path)) from e
        return cls.from_json(text, path=str(path))

    @classmethod
    def from_json(cls, text: str, path: Optional[str] = None) -> "InfoGraphSource":
        try:
            dump = InfoDump.model_validate_json(text)
        except ValidationError as e:
            raise InfoFileError(f"Invalid info dump {path or '<string>'}: {e}", path=path) from e
        return cls(dump)

    @classmethod
    def from_dict(cls, data: dict) -> "InfoGraphSource":
        try:
            dump = InfoDump.model_validate(data)
        except ValidationError as e:
            raise InfoFileError(f"Invalid info dump: {e}") from e
        return cls(dump)

    # ------------------------------------------------------------------
    # IGraphSource
    # ------------------------------------------------------------------

    def node_by_id(self, element_id: str) -> Optional[ElementNode]:
        return self._nodes.get(element_id)

    def nodes_of_kind(self, kind: str) -> List[ElementNode]:
        return list(self._by_kind.get(kind, []))

    @property
    def total_size(self) -> int:
        return self.dump.program.size

    @property
    def program(self) -> ProgramInfo:
        return self.dump.program

    def exclusive_size(self, element_id: str) -> int:
        """Size of the element plus every element that only it reaches.

        An element counts as owned once all of its containment parents are
        owned. Ownership spreads from ``element_id`` until nothing changes.
        """
        cached = self._exclusive.get(element_id)
        if cached is not None:
            return cached

        root = self._require(element_id)
        owned: Set[str] = {root.id}
        total = root.size
        queue = [root]
        while queue:
            holder = queue.pop()
            for child_id in holder.children:
                if child_id in owned:
                    continue
                child = self._require(child_id, referrer_id=holder.id)
                if self._parents[child_id] <= owned:
                    owned.add(child_id)
                    total += child.size
                    queue.append(child)

        self._exclusive[element_id] = total
        return total

    # ------------------------------------------------------------------
    # Dependency view and program info
    # ------------------------------------------------------------------

    def dependencies_of(self, element_id: str) -> List[ElementNode]:
        """Elements that ``element_id`` holds on to."""
        self._require(element_id)
        return self._resolve_all(
            [edge.id for edge in self.dump.holding.get(element_id, [])],
            referrer_id=element_id,
        )

    def dependents_of(self, element_id: str) -> List[ElementNode]:
        """Elements that hold on to ``element_id``."""
        self._require(element_id)
        return self._resolve_all(self._dependents.get(element_id, []), referrer_id=element_id)

    def parents_of(self, element_id: str) -> List[str]:
        """Ids of the elements that list ``element_id`` as a child."""
        return sorted(self._parents.get(element_id, set()))

    def function_names(self) -> List[str]:
        return [node.name for node in self.nodes_of_kind(ElementKind.FUNCTION.value)]

    @property
    def element_count(self) -> int:
        return len(self._nodes)

    def _require(self, element_id: str, referrer_id: Optional[str] = None) -> ElementNode:
        node = self._nodes.get(element_id)
        if node is None:
            raise DanglingReferenceError(element_id, referrer_id=referrer_id)
        return node

    def _resolve_all(self, element_ids: List[str], referrer_id: str) -> List[ElementNode]:
        nodes = []
        for element_id in element_ids:
            node = self._nodes.get(element_id)
            if node is None:
                logger.warning(f"Holding edge {referrer_id} -> {element_id} points at an unknown element")
                continue
            nodes.append(node)
        return nodes
