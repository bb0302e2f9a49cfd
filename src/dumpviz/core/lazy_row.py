"""Logical tree rows whose children are built on demand.

A ``LazyNode`` holds the rows it has already materialized plus an ordered
list of pending producers. Each producer is wrapped in a ``PendingChild``
that is consumed on its first call, so expanding a row twice never produces
duplicate children. Rows built by producers keep the order the producers
were registered in, whichever order they are invoked in.
"""

import logging
from typing import Any, Callable, List, Optional

from dumpviz.core.errors import DumpVizError, ExpansionError
from dumpviz.core.models import Cell, CellAlign

logger = logging.getLogger(__name__)

RenderFn = Callable[[Any], List[Cell]]
Producer = Callable[[], "LazyNode"]


class PendingChild:
    """A deferred child of a ``LazyNode``, invoked at most once."""

    def __init__(self, parent: "LazyNode", producer: Producer, index: int):
        self.parent = parent
        self.producer = producer
        self.index = index
        self.consumed = False
        self.result: Optional["LazyNode"] = None
        self.error: Optional[BaseException] = None

    def __call__(self) -> "LazyNode":
        if self.consumed:
            if self.result is not None:
                return self.result
            raise ExpansionError("Child producer already failed; it is not retried") from self.error

        self.consumed = True
        self.parent._pending.remove(self)
        try:
            row = self.producer()
        except Exception as e:
            self.error = e
            raise

        self.parent._attach(row, slot=self.index)
        self.result = row
        return row


class LazyNode:
    """One logical row of the tree table.

    Attributes:
        data: Payload handed to ``render_fn`` (an ``ElementRow`` for element rows)
        render_fn: Turns ``data`` into the row's cells
        level: Display depth, 0 for roots
        children: Rows materialized so far, in materialization order
        sortable: False for metadata rows, which keep a fixed order
        non_sortable_priority: Order among non-sortable siblings, lower first
    """

    def __init__(
        self,
        data: Any,
        render_fn: RenderFn,
        level: int = 0,
        sortable: bool = True,
        non_sortable_priority: int = 0,
    ):
        self.data = data
        self.render_fn = render_fn
        self.level = level
        self.sortable = sortable
        self.non_sortable_priority = non_sortable_priority

        self.parent: Optional["LazyNode"] = None
        self.position = 0
        self.slot: Optional[int] = None
        self.children: List["LazyNode"] = []
        self._pending: List[PendingChild] = []
        self._registered = 0
        self.visible = False
        self.expanded = False

    def __repr__(self):
        return f"LazyNode(level={self.level}, children={len(self.children)}, pending={len(self._pending)})"

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_child(self, producer: Producer) -> PendingChild:
        """Register a producer; it runs when the row is expanded."""
        pending = PendingChild(self, producer, self._registered)
        self._registered += 1
        self._pending.append(pending)
        return pending

    def add_materialized_child(self, row: "LazyNode") -> None:
        self._attach(row)

    def _attach(self, row: "LazyNode", slot: Optional[int] = None) -> None:
        # Producer rows go before any producer row registered after them.
        row.parent = self
        row.slot = slot
        index = len(self.children)
        if slot is not None:
            while index > 0:
                before = self.children[index - 1].slot
                if before is None or before < slot:
                    break
                index -= 1
        self.children.insert(index, row)
        for position in range(index, len(self.children)):
            self.children[position].position = position

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    @property
    def pending(self) -> List[PendingChild]:
        return list(self._pending)

    @property
    def has_children(self) -> bool:
        return bool(self.children or self._pending)

    def expand_next(self) -> "LazyNode":
        """Materialize the next pending child and return it.

        Errors from the producer propagate; the producer counts as consumed
        either way and the remaining producers are untouched.
        """
        if not self._pending:
            raise IndexError("No pending children to expand")
        return self._pending[0]()

    def expand(self) -> List["LazyNode"]:
        """Materialize every pending child in registration order.

        A child that fails to build is replaced by an error row so the
        failure stays visible next to its siblings.
        """
        while self._pending:
            pending = self._pending[0]
            try:
                pending()
            except DumpVizError as e:
                logger.warning(f"Failed to expand child row: {e}")
                self._attach(error_row(e, self.level + 1), slot=pending.index)
        self.expanded = True
        return list(self.children)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def render(self) -> List[Cell]:
        return self.render_fn(self.data)

    def show(self) -> None:
        self.visible = True


def _render_error(error: DumpVizError) -> List[Cell]:
    return [
        Cell("error", align=CellAlign.LEFT),
        Cell(str(error), colspan=5),
    ]


def error_row(error: DumpVizError, level: int) -> LazyNode:
    """Build the row shown in place of a subtree that failed to materialize."""
    return LazyNode(error, _render_error, level=level, sortable=False)
