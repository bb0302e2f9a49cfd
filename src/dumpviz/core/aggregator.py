"""Cumulative size rollup over the element graph.

The containment structure of an info dump is a directed graph, not a tree:
an element can be listed as a child of several parents and malformed dumps can
contain cycles. A rollup walks everything reachable from an element, counting
each reachable element once, and the result is memoized per element id in a
cache owned by the aggregator rather than written onto the element itself.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

from dumpviz.core.errors import DanglingReferenceError
from dumpviz.core.models import ElementNode

logger = logging.getLogger(__name__)

Fetch = Callable[[str], Optional[ElementNode]]
SizeCache = Dict[str, int]


@dataclass(frozen=True)
class CycleGuardTriggered:
    """A rollup met an element that was already on its active path.

    The repeated element contributes nothing the second time and the walk does
    not descend into it again.
    """
    root_id: str
    referrer_id: str
    repeated_id: str


class SizeAggregator:
    """Computes and memoizes cumulative element sizes.

    Attributes:
        cache: Element id -> cumulative size. Written once per element.
        cycle_events: Every cycle-guard hit seen so far, in order.
    """

    def __init__(self, cache: Optional[SizeCache] = None):
        self.cache: SizeCache = cache if cache is not None else {}
        self.cycle_events: List[CycleGuardTriggered] = []

    def compute_size(self, node: ElementNode, fetch: Fetch, force: bool = False) -> int:
        """Return the cumulative size of ``node``.

        Args:
            node: Element to roll up
            fetch: Lookup from element id to element (None when unknown)
            force: Skip the memo for this element and return the summed
                cumulative size of its children only. The memo is neither
                read nor written for ``node`` itself; children still go
                through the memo.

        Returns:
            Size in bytes

        Raises:
            DanglingReferenceError: A child id reachable from ``node`` does not
                resolve through ``fetch``.
        """
        if force:
            return self._children_rollup(node, fetch)

        cached = self.cache.get(node.id)
        if cached is not None:
            return cached

        total = self._rollup(node, fetch)
        self.cache[node.id] = total
        return total

    def is_cached(self, element_id: str) -> bool:
        return element_id in self.cache

    @property
    def cycle_guard_hits(self) -> int:
        return len(self.cycle_events)

    def _children_rollup(self, node: ElementNode, fetch: Fetch) -> int:
        total = 0
        for child_id in node.children:
            if child_id == node.id:
                self._note_cycle(node.id, node.id, child_id)
                continue
            child = self._resolve(fetch, child_id, node.id)
            total += self.compute_size(child, fetch)
        return total

    def _rollup(self, start: ElementNode, fetch: Fetch) -> int:
        # Iterative walk: dumps of large programs nest deeper than the
        # interpreter's recursion limit allows.
        visited: Set[str] = {start.id}
        path: Set[str] = {start.id}
        total = start.size
        stack: List[Tuple[ElementNode, Iterator[str]]] = [(start, iter(start.children))]

        while stack:
            parent, pending = stack[-1]
            child_id = next(pending, None)
            if child_id is None:
                stack.pop()
                path.discard(parent.id)
                continue

            if child_id in visited:
                if child_id in path:
                    self._note_cycle(start.id, parent.id, child_id)
                continue

            child = self._resolve(fetch, child_id, parent.id)
            visited.add(child_id)
            path.add(child_id)
            total += child.size
            stack.append((child, iter(child.children)))

        return total

    @staticmethod
    def _resolve(fetch: Fetch, element_id: str, referrer_id: str) -> ElementNode:
        node = fetch(element_id)
        if node is None:
            raise DanglingReferenceError(element_id, referrer_id=referrer_id)
        return node

    def _note_cycle(self, root_id: str, referrer_id: str, repeated_id: str) -> None:
        event = CycleGuardTriggered(root_id=root_id, referrer_id=referrer_id, repeated_id=repeated_id)
        self.cycle_events.append(event)
        logger.debug(
            f"Cycle guard: {referrer_id} -> {repeated_id} while sizing {root_id}, "
            f"branch counted as 0"
        )
