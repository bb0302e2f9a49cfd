"""Terminal tree table built on rich.

Rows are ``LazyNode``s; only rows that are materialized and whose ancestors
are expanded end up in the printed table. Sorting happens here and only
reorders rows that already exist.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from rich.table import Table
from rich.text import Text

from dumpviz.core.errors import DumpVizError
from dumpviz.core.interfaces import ITreeView
from dumpviz.core.lazy_row import LazyNode
from dumpviz.core.models import Cell, CellAlign, NameWithLink, TypeComparison

logger = logging.getLogger(__name__)

COLUMN_NAMES = ["Kind", "Name", "Bytes", "Bytes R", "%", "Type"]

COLUMN_HELP = [
    "",
    "The given name of the element",
    "The direct size attributed to the element",
    "The sum of the sizes of all the elements that can only be reached from this element",
    "The percentage of the direct size compared to the program size",
    "The given type of the element",
]

# Sort key name -> column index
SORT_KEYS = {"kind": 0, "name": 1, "size": 2, "retained": 3, "percent": 4, "type": 5}

# Columns holding byte counts or percentages
NUMERIC_COLUMNS = frozenset({SORT_KEYS["size"], SORT_KEYS["retained"], SORT_KEYS["percent"]})


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    help_text: str
    width: Optional[int] = None


def _sort_value(text: str, numeric: bool) -> Tuple[int, object]:
    if not numeric:
        return (0, text.lower())
    # Numbers sort numerically and ahead of blanks and other text.
    try:
        return (0, float(text.strip().rstrip("%")))
    except ValueError:
        return (1, text.lower())


class RichTreeTable(ITreeView):
    """A ``TreeView`` that prints as a ``rich.table.Table``."""

    def __init__(
        self,
        title: Optional[str] = None,
        code_style: str = "dim",
        show_help_footer: bool = False,
        child_limit: Optional[int] = None,
    ):
        self.title = title
        self.code_style = code_style
        self.show_help_footer = show_help_footer
        if child_limit is not None and child_limit < 0:
            raise ValueError(f"child_limit must be >= 0, got {child_limit}")
        self.child_limit = child_limit
        self.columns: List[ColumnSpec] = []
        self.roots: List[LazyNode] = []
        self._sort: Optional[Tuple[int, bool]] = None

    # ------------------------------------------------------------------
    # ITreeView
    # ------------------------------------------------------------------

    def set_columns(
        self,
        names: Sequence[str],
        help_text: Sequence[str],
        width_hints: Sequence[Optional[int]],
    ) -> None:
        if not (len(names) == len(help_text) == len(width_hints)):
            raise ValueError("Column names, help text and width hints must have the same length")
        self.columns = [
            ColumnSpec(name=name, help_text=help_, width=width)
            for name, help_, width in zip(names, help_text, width_hints)
        ]

    def add_root(self, row: LazyNode) -> None:
        self.roots.append(row)

    def show(self, row: LazyNode) -> None:
        row.show()

    # ------------------------------------------------------------------
    # Expansion and ordering
    # ------------------------------------------------------------------

    def expand_to_depth(self, depth: int) -> None:
        """Expand every visible row whose level is below ``depth``."""
        for root in self.roots:
            if root.visible:
                self._expand(root, depth)

    def _expand(self, row: LazyNode, depth: int) -> None:
        if row.level >= depth:
            return
        row.expand()
        for child in row.children:
            self._expand(child, depth)

    def sort_by(self, column: str, descending: bool = True) -> None:
        if column not in SORT_KEYS:
            raise ValueError(f"Unknown sort column: {column}")
        self._sort = (SORT_KEYS[column], descending)

    def ordered(self, rows: Sequence[LazyNode], limit: bool = True) -> List[LazyNode]:
        """Siblings in display order.

        Non-sortable rows come first, by priority and then by the order they
        were added. Sortable rows follow, by the sort column when one is set,
        cut to ``child_limit`` unless ``limit`` is False (roots are never cut).
        """
        fixed = sorted(
            (row for row in rows if not row.sortable),
            key=lambda row: (row.non_sortable_priority, row.position),
        )
        movable = [row for row in rows if row.sortable]
        if self._sort is not None:
            index, descending = self._sort
            movable.sort(key=lambda row: self._row_sort_value(row, index), reverse=descending)
        if limit and self.child_limit is not None:
            movable = movable[:self.child_limit]
        return fixed + movable

    @staticmethod
    def _row_sort_value(row: LazyNode, index: int) -> Tuple[int, object]:
        cells = row.render()
        text = cells[index].text if index < len(cells) else ""
        return _sort_value(text, index in NUMERIC_COLUMNS)

    def visible_rows(self) -> Iterator[LazyNode]:
        """Depth-first walk over rows that would be printed."""
        stack = list(reversed(self.ordered([root for root in self.roots if root.visible], limit=False)))
        while stack:
            row = stack.pop()
            yield row
            if row.expanded:
                stack.extend(reversed(self.ordered(row.children)))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_renderable(self) -> Table:
        table = Table(title=self.title, show_footer=self.show_help_footer)
        for column in self.columns:
            table.add_column(
                column.name,
                footer=column.help_text if self.show_help_footer else "",
                width=column.width,
                overflow="fold",
            )
        for row in self.visible_rows():
            style = "red" if isinstance(row.data, DumpVizError) else None
            table.add_row(*self._row_cells(row), style=style)
        return table

    def _row_cells(self, row: LazyNode) -> List[Text]:
        width = len(self.columns)
        out = [Text("") for _ in range(width)]
        column = 0
        for cell in row.render():
            if column >= width:
                logger.debug(f"Dropping cells past column {width} for {row!r}")
                break
            out[column] = self._render_cell(cell)
            # Spanned columns stay blank.
            column += max(cell.colspan, 1)

        out[0] = Text.assemble(self._tree_prefix(row), out[0])
        return out

    @staticmethod
    def _tree_prefix(row: LazyNode) -> str:
        indent = "  " * row.level
        if row.expanded and row.children:
            return f"{indent}▾ "
        if row.has_children and row.sortable:
            return f"{indent}▸ "
        return f"{indent}  "

    def _render_cell(self, cell: Cell) -> Text:
        content = cell.content
        justify = "right" if cell.align == CellAlign.RIGHT else "left"

        if isinstance(content, NameWithLink):
            return Text.assemble(content.name, (f" ⇢ {content.target.dep_target}", "dim cyan"), justify=justify)
        if isinstance(content, TypeComparison):
            return Text.assemble(
                "inferred: ", (str(content.inferred), self.code_style),
                "\ndeclared: ", (str(content.declared), self.code_style),
                justify=justify,
            )
        style = self.code_style if cell.pre else ""
        return Text(str(content), style=style, justify=justify)
