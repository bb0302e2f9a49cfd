"""
dumpviz core - lazy element tree and size rollup.

Components:
- aggregator.py: Cumulative size rollup with a per-element memo
- lazy_row.py: Tree rows whose children are built on demand
- materialize.py: Builds rows for elements, libraries first
- metadata.py: Side effects, parameters, code and unaccounted-size rows
- render.py: Cells for an element's own row, by kind
- info_source.py: Graph source over a JSON info dump
"""

from .aggregator import CycleGuardTriggered, SizeAggregator
from .errors import (
    DanglingReferenceError,
    DumpVizError,
    ExpansionError,
    InfoFileError,
    InvalidProgramSizeError,
    UnknownKindError,
)
from .info_source import InfoGraphSource
from .lazy_row import LazyNode, PendingChild
from .materialize import MaterializationEngine
from .metadata import MetadataRowBuilder
from .render import RowRenderer

__all__ = [
    "CycleGuardTriggered",
    "SizeAggregator",
    "DanglingReferenceError",
    "DumpVizError",
    "ExpansionError",
    "InfoFileError",
    "InvalidProgramSizeError",
    "UnknownKindError",
    "InfoGraphSource",
    "LazyNode",
    "PendingChild",
    "MaterializationEngine",
    "MetadataRowBuilder",
    "RowRenderer",
]
