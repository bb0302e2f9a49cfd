"""Primary-row rendering for elements, dispatched on element kind."""

import logging
from typing import List, Optional

from dumpviz.core.errors import InvalidProgramSizeError, UnknownKindError
from dumpviz.core.interfaces import IGraphSource, IRouter
from dumpviz.core.models import (
    FUNCTION_LIKE_KINDS,
    Cell,
    CellAlign,
    CellContent,
    ElementKind,
    ElementNode,
    ElementRow,
    HistoryState,
    NameWithLink,
    TypeComparison,
)

logger = logging.getLogger(__name__)

DEPENDENCY_VIEW = "dep"


def cell(
    content: CellContent,
    align: CellAlign = CellAlign.LEFT,
    colspan: int = 1,
    pre: bool = False,
) -> Cell:
    return Cell(content=content, align=align, colspan=colspan, pre=pre)


def type_cell(declared: Optional[str], inferred: Optional[str], colspan: int = 1) -> Cell:
    """Cell showing the inferred type above the declared type."""
    return cell(TypeComparison(declared=declared, inferred=inferred), colspan=colspan)


def parse_kind(kind: str, element_id: Optional[str] = None) -> ElementKind:
    try:
        return ElementKind(kind)
    except ValueError:
        raise UnknownKindError(kind, element_id=element_id) from None


def format_percent(size: int, total_size: int) -> str:
    """Format ``size`` as a percentage of ``total_size`` with two decimals."""
    if total_size <= 0:
        raise InvalidProgramSizeError(f"Program size must be positive, got {total_size}")
    return f"{100 * size / total_size:.2f}%"


class RowRenderer:
    """Builds the cells of an element's own row.

    Function-like elements and fields get their name as a link to the
    dependency view for that element.
    """

    def __init__(self, source: IGraphSource, router: Optional[IRouter] = None):
        self.source = source
        self.router = router

    def __call__(self, row: ElementRow) -> List[Cell]:
        node = row.node
        kind = parse_kind(node.kind, node.id)
        cells = [cell(node.kind)]

        if kind in FUNCTION_LIKE_KINDS or kind is ElementKind.FIELD:
            cells.extend([
                cell(self._name_link(node)),
                cell(node.size, align=CellAlign.RIGHT),
                cell(self.source.exclusive_size(node.id), align=CellAlign.RIGHT),
                cell(row.size_percent, align=CellAlign.RIGHT),
                cell(node.declared_type or "", pre=True),
            ])
        elif kind is ElementKind.LIBRARY:
            cells.extend([
                cell(node.name),
                cell(node.size, align=CellAlign.RIGHT),
                cell(""),
                cell(row.size_percent, align=CellAlign.RIGHT),
                cell(""),
            ])
        elif kind is ElementKind.TYPEDEF:
            # Typedefs take no space in the output.
            cells.extend([
                cell(node.name),
                cell("0", align=CellAlign.RIGHT),
                cell("0", align=CellAlign.RIGHT),
                cell("0.00%", align=CellAlign.RIGHT),
            ])
        elif kind is ElementKind.CLASS:
            cells.extend([
                cell(node.name),
                cell(node.size, align=CellAlign.RIGHT),
                cell(""),
                cell(row.size_percent, align=CellAlign.RIGHT),
                cell(node.name, pre=True),
            ])
        else:
            raise UnknownKindError(node.kind, element_id=node.id)

        return cells

    def _name_link(self, node: ElementNode) -> NameWithLink:
        target = HistoryState(view=DEPENDENCY_VIEW, dep_target=node.id)
        return NameWithLink(name=node.name, target=target, on_activate=lambda: self._navigate(target))

    def _navigate(self, target: HistoryState) -> None:
        if self.router is None:
            logger.debug(f"No router configured, ignoring navigation to {target}")
            return
        self.router.switch_to(target)
