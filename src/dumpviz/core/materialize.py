"""Lazy construction of the element tree.

Starting from the libraries, every element becomes a ``LazyNode`` the first
time it is reached. Metadata rows are attached right away; structural
children are only registered as producers and built when their parent row is
expanded. An element listed under several parents is materialized once per
occurrence, while its cumulative size is computed once and shared through the
aggregator cache.
"""

import logging
from functools import partial
from typing import Dict, List, Optional

from dumpviz.core.aggregator import SizeAggregator
from dumpviz.core.errors import DanglingReferenceError, DumpVizError, InvalidProgramSizeError
from dumpviz.core.interfaces import IGraphSource, IRouter, ITreeView
from dumpviz.core.lazy_row import LazyNode
from dumpviz.core.metadata import MetadataRowBuilder
from dumpviz.core.models import ElementKind, ElementRow
from dumpviz.core.render import RowRenderer, format_percent, parse_kind

logger = logging.getLogger(__name__)

ROOT_KIND = ElementKind.LIBRARY


class MaterializationEngine:
    """Builds ``LazyNode`` rows for elements of a graph source on demand.

    Attributes:
        source: Graph source the elements are read from
        tree_view: Table the root rows are registered with
        aggregator: Shared cumulative size memo
        failed_roots: Root element id -> error that kept it from displaying
    """

    def __init__(
        self,
        source: IGraphSource,
        tree_view: ITreeView,
        router: Optional[IRouter] = None,
        aggregator: Optional[SizeAggregator] = None,
    ):
        self.total_size = source.total_size
        if self.total_size <= 0:
            raise InvalidProgramSizeError(f"Program size must be positive, got {self.total_size}")

        self.source = source
        self.tree_view = tree_view
        self.aggregator = aggregator or SizeAggregator()
        self.renderer = RowRenderer(source, router)
        self.metadata = MetadataRowBuilder(self.aggregator, source.node_by_id)
        self.failed_roots: Dict[str, DumpVizError] = {}
        self.materialized_count = 0

    def materialize(
        self,
        element_id: str,
        is_root: bool = False,
        render_target: Optional[ITreeView] = None,
        level: int = 0,
        referrer_id: Optional[str] = None,
    ) -> LazyNode:
        """Build the row for one element.

        Args:
            element_id: Element to build
            is_root: Register the row as a top-level entry of ``render_target``
            render_target: Table to register roots with (defaults to ``tree_view``)
            level: Display depth of the row
            referrer_id: Parent element, used in error messages

        Returns:
            The row, with metadata children attached and structural children pending

        Raises:
            DanglingReferenceError: The element, or something it reaches, is unknown
            UnknownKindError: The element's kind is not one this tool renders
        """
        target = render_target or self.tree_view
        node = self.source.node_by_id(element_id)
        if node is None:
            raise DanglingReferenceError(element_id, referrer_id=referrer_id)
        parse_kind(node.kind, node.id)

        size = self.aggregator.compute_size(node, self.source.node_by_id)
        data = ElementRow(node=node, cumulative_size=size, size_percent=format_percent(size, self.total_size))
        row = LazyNode(data, self.renderer, level=level)

        for meta_row in self.metadata.build(node, level + 1):
            row.add_materialized_child(meta_row)

        if is_root:
            target.add_root(row)

        for child_id in node.children:
            row.add_child(partial(
                self.materialize,
                child_id,
                False,
                target,
                level + 1,
                node.id,
            ))

        self.materialized_count += 1
        return row

    def materialize_roots(self) -> List[LazyNode]:
        """Build and show one row per library.

        A library that fails to build is recorded in ``failed_roots`` and
        skipped; the other libraries are unaffected.
        """
        roots = []
        for library in self.source.nodes_of_kind(ROOT_KIND.value):
            try:
                row = self.materialize(library.id, is_root=True, level=0)
            except DumpVizError as e:
                logger.warning(f"Skipping library {library.id}: {e}")
                self.failed_roots[library.id] = e
                continue
            self.tree_view.show(row)
            roots.append(row)

        logger.info(f"Materialized {len(roots)} libraries ({len(self.failed_roots)} failed)")
        return roots
