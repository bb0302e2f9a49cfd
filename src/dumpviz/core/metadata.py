"""Auxiliary rows that describe an element rather than contain it.

Metadata rows (side effects, modifiers, types, parameters, code, unaccounted
size) are built eagerly when their element is materialized. Their cells are
computed at build time, so a row shows the element as it was then.
"""

import logging
from typing import List, Optional, Sequence

from dumpviz.core.aggregator import Fetch, SizeAggregator
from dumpviz.core.lazy_row import LazyNode
from dumpviz.core.models import FUNCTION_LIKE_KINDS, Cell, CellAlign, ElementKind, ElementNode
from dumpviz.core.render import cell, parse_kind, type_cell

logger = logging.getLogger(__name__)

CODE_ROW_PRIORITY = -1
UNAVAILABLE_TYPE = "unavailable"


def _frozen_row(node: ElementNode, cells: Sequence[Cell], level: int, priority: int = 0) -> LazyNode:
    snapshot = tuple(cells)

    def render(_data) -> List[Cell]:
        return list(snapshot)

    return LazyNode(node, render, level=level, sortable=False, non_sortable_priority=priority)


class MetadataRowBuilder:
    """Produces the metadata rows for an element, dispatched on its kind."""

    def __init__(self, aggregator: SizeAggregator, fetch: Fetch):
        self.aggregator = aggregator
        self.fetch = fetch

    def build(self, node: ElementNode, level: int) -> List[LazyNode]:
        kind = parse_kind(node.kind, node.id)

        if kind in FUNCTION_LIKE_KINDS:
            return self._function_rows(node, level)
        if kind is ElementKind.FIELD:
            return self._field_rows(node, level)
        if kind in (ElementKind.CLASS, ElementKind.LIBRARY):
            return [self._scaffolding_row(node, level)]
        return []

    def _function_rows(self, node: ElementNode, level: int) -> List[LazyNode]:
        rows = [
            _frozen_row(node, [cell("side effects"), cell(node.side_effects or "", colspan=5)], level),
        ]

        for modifier, enabled in node.modifiers.items():
            if enabled:
                rows.append(_frozen_row(node, [cell("modifier"), cell(modifier, colspan=5)], level))

        rows.append(_frozen_row(node, [
            cell("return type"),
            type_cell(node.return_type, node.inferred_return_type, colspan=5),
        ], level))

        for param in node.parameters:
            declared = param.declared_type if param.declared_type is not None else UNAVAILABLE_TYPE
            rows.append(_frozen_row(node, [
                cell("parameter"),
                cell(param.name),
                type_cell(declared, param.inferred_type, colspan=4),
            ], level))

        code_row = self._code_row(node, level)
        if code_row is not None:
            rows.append(code_row)
        return rows

    def _field_rows(self, node: ElementNode, level: int) -> List[LazyNode]:
        rows = []
        code_row = self._code_row(node, level)
        if code_row is not None:
            rows.append(code_row)

        if node.inferred_type is not None and node.declared_type is not None:
            rows.append(_frozen_row(node, [
                cell("type"),
                type_cell(node.declared_type, node.inferred_type, colspan=5),
            ], level))
        return rows

    def _code_row(self, node: ElementNode, level: int) -> Optional[LazyNode]:
        if not node.code:
            return None
        return _frozen_row(
            node,
            [cell("code"), cell(node.code, colspan=5, pre=True)],
            level,
            priority=CODE_ROW_PRIORITY,
        )

    def _scaffolding_row(self, node: ElementNode, level: int) -> LazyNode:
        # Size of the element itself that none of its listed children account for.
        accounted = self.aggregator.compute_size(node, self.fetch, force=True)
        unaccounted = node.size - accounted
        if unaccounted < 0:
            logger.debug(f"{node.id}: children account for {accounted} bytes, more than its own {node.size}")
        return _frozen_row(node, [
            cell("scaffolding"),
            cell("(unaccounted for)"),
            cell(unaccounted, align=CellAlign.RIGHT),
        ], level)
