import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.panel import Panel

from dumpviz.config import SORT_COLUMNS, settings
from dumpviz.core.errors import DumpVizError
from dumpviz.core.info_source import InfoGraphSource
from dumpviz.core.interfaces import IRouter
from dumpviz.core.materialize import MaterializationEngine
from dumpviz.core.models import HistoryState, NameWithLink
from dumpviz.core.render import DEPENDENCY_VIEW
from dumpviz.core.summary import DEFAULT_EXPORT_NAME, build_summary, export_function_names
from dumpviz.view.panels import element_list_table, summary_table
from dumpviz.view.tree_table import COLUMN_HELP, COLUMN_NAMES, RichTreeTable

logger = logging.getLogger(__name__)

APP_HELP = """
dumpviz: Where did the bytes go?

Inspect the size breakdown of a compiled program from its info dump. Every
library, class, function, field and closure is shown with its own size, the
size retained only through it, and its share of the whole program.

CORE WORKFLOW:
1. ORIENT:  Run `dumpviz summary <info.json>` for program-wide numbers.
2. DRILL:   Run `dumpviz show <info.json> --depth 2 --sort percent` to see
            the biggest libraries and what they contain.
3. TRACE:   Run `dumpviz deps <info.json> <element-id>` to see what holds on
            to an element and what it holds on to.
"""

app = typer.Typer(name="dumpviz", help=APP_HELP, no_args_is_help=True)
console = Console()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output (cycle guards, skipped rows)."),
):
    """
    dumpviz: compiled program size inspector.
    """
    configure_logging("DEBUG" if verbose else settings.log_level)


# ============================================================================
# Helpers
# ============================================================================

def _load_source(info: Path) -> InfoGraphSource:
    try:
        return InfoGraphSource.from_file(info)
    except DumpVizError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def render_dependency_view(source: InfoGraphSource, element_id: str) -> None:
    node = source.node_by_id(element_id)
    if node is None:
        console.print(f"[red]Error: Unknown element {element_id}[/red]")
        raise typer.Exit(code=1)

    containers = ", ".join(source.parents_of(element_id)) or "none"
    console.print(Panel(
        f"[bold]{node.name}[/bold] ({node.kind}, {node.size} bytes)\n[dim]{node.id}[/dim]\n"
        f"Contained in: {containers}",
        title="Dependencies", border_style="blue",
    ))
    console.print(element_list_table("Held by", source.dependents_of(element_id)))
    console.print(element_list_table("Holds", source.dependencies_of(element_id)))


class DependencyViewRouter(IRouter):
    """Routes name-link activations to the dependency view."""

    def __init__(self, source: InfoGraphSource):
        self.source = source
        self.history: List[HistoryState] = []

    def switch_to(self, state: HistoryState) -> None:
        self.history.append(state)
        if state.view != DEPENDENCY_VIEW or state.dep_target is None:
            logger.warning(f"No view registered for {state}")
            return
        render_dependency_view(self.source, state.dep_target)


def build_tree(
    source: InfoGraphSource,
    router: Optional[IRouter] = None,
    depth: int = 1,
    sort: Optional[str] = None,
    descending: bool = True,
    limit: Optional[int] = None,
) -> Tuple[RichTreeTable, MaterializationEngine]:
    """Materialize the libraries of ``source`` into a tree table expanded to ``depth``."""
    table = RichTreeTable(
        title="Program Elements",
        code_style=settings.code_style,
        show_help_footer=settings.show_help_footer,
        child_limit=limit,
    )
    table.set_columns(COLUMN_NAMES, COLUMN_HELP, settings.column_widths)
    if sort:
        table.sort_by(sort, descending=descending)

    engine = MaterializationEngine(source, table, router=router)
    engine.materialize_roots()
    table.expand_to_depth(depth)
    return table, engine


# ============================================================================
# Commands
# ============================================================================

@app.command("show")
def show(
    info: Path = typer.Argument(..., help="Path to the info dump (JSON)."),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", help="How many levels to expand. Defaults to DUMPVIZ_DEFAULT_DEPTH."),
    sort: Optional[str] = typer.Option(None, "--sort", "-s", help=f"Sort rows by one of: {', '.join(SORT_COLUMNS)}."),
    ascending: bool = typer.Option(False, "--asc", help="Sort ascending instead of descending."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Show at most N element rows under each parent."),
    open_id: Optional[str] = typer.Option(None, "--open", help="Follow the dependency link of this element."),
):
    """
    Show the element tree, libraries first.

    Rows are built lazily: only the levels you ask for are materialized.
    Metadata rows (side effects, parameters, code, unaccounted size) always
    appear first under their element.
    """
    source = _load_source(info)
    sort = sort or settings.sort_column
    if sort and sort not in SORT_COLUMNS:
        console.print(f"[red]Error: --sort must be one of {', '.join(SORT_COLUMNS)}[/red]")
        raise typer.Exit(code=1)
    if limit is not None and limit < 0:
        console.print("[red]Error: --limit must be >= 0[/red]")
        raise typer.Exit(code=1)

    router = DependencyViewRouter(source)
    try:
        table, engine = build_tree(
            source,
            router=router,
            depth=settings.default_depth if depth is None else depth,
            sort=sort,
            descending=False if ascending else settings.sort_descending,
            limit=limit if limit is not None else settings.child_limit,
        )
    except DumpVizError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(table.to_renderable())

    for library_id, error in engine.failed_roots.items():
        console.print(f"[yellow]Skipped {library_id}: {error}[/yellow]")

    if open_id:
        _follow_link(engine, open_id)


def _follow_link(engine: MaterializationEngine, element_id: str) -> None:
    try:
        row = engine.materialize(element_id)
        cells = row.render()
    except DumpVizError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    links = [c.content for c in cells if isinstance(c.content, NameWithLink)]
    if not links:
        console.print(f"[yellow]{element_id} has no dependency link.[/yellow]")
        return
    links[0].activate()


@app.command("summary")
def summary(
    info: Path = typer.Argument(..., help="Path to the info dump (JSON)."),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Program-wide numbers: size, compile time and duration, noSuchMethod.
    """
    source = _load_source(info)
    view = build_summary(source)

    if json_output:
        console.print_json(json.dumps(view.model_dump(), default=str))
        return

    console.print(summary_table(view))


@app.command("extract-functions")
def extract_functions(
    info: Path = typer.Argument(..., help="Path to the info dump (JSON)."),
    output: Path = typer.Option(Path(DEFAULT_EXPORT_NAME), "--output", "-o", help="File to write the names to."),
):
    """
    Write the names of all functions as one comma-separated list.
    """
    source = _load_source(info)
    try:
        path = export_function_names(source, output)
    except OSError as e:
        console.print(f"[red]Error: Cannot write {output}: {e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Wrote {len(source.function_names())} function names to {path}[/green]")


@app.command("deps")
def deps(
    info: Path = typer.Argument(..., help="Path to the info dump (JSON)."),
    element_id: str = typer.Argument(..., help="Element id, e.g. 'function/12'."),
):
    """
    The dependency view: what holds on to an element, and what it holds.
    """
    source = _load_source(info)
    render_dependency_view(source, element_id)


if __name__ == "__main__":
    app()
