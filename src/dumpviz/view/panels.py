"""Rich panels for the program summary and the dependency view."""

from typing import Dict, List, Union

from rich.console import RenderableType
from rich.table import Table
from rich.text import Text

from dumpviz.core.models import ElementNode
from dumpviz.core.summary import ProgramSummary


def summary_fields(summary: ProgramSummary) -> Dict[str, Union[str, Text]]:
    nsm = str(summary.no_such_method_enabled).lower()
    return {
        "Program Size": f"{summary.program_size} bytes",
        "Compile Time": summary.compile_time or "",
        "Compile Duration": summary.compile_duration or "",
        "noSuchMethod Enabled": Text(nsm, style="bold white on red" if summary.no_such_method_enabled else ""),
        "Libraries": str(summary.library_count),
        "Functions": str(summary.function_count),
        "Elements": str(summary.element_count),
    }


def map_to_table(fields: Dict[str, Union[str, Text]], title: str = "") -> Table:
    """Two-column key/value table."""
    table = Table(title=title or None, show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in fields.items():
        if not isinstance(value, (str, Text)):
            raise TypeError(f"Unexpected value in map: {value!r}")
        table.add_row(key, value)
    return table


def summary_table(summary: ProgramSummary) -> Table:
    return map_to_table(summary_fields(summary), title="Program Info")


def element_list_table(title: str, nodes: List[ElementNode]) -> RenderableType:
    if not nodes:
        return Text(f"{title}: none", style="dim")
    table = Table(title=title)
    table.add_column("Kind", style="magenta")
    table.add_column("Name")
    table.add_column("Id", style="dim")
    table.add_column("Bytes", justify="right")
    for node in nodes:
        table.add_row(node.kind, node.name, node.id, str(node.size))
    return table
