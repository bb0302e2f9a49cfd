"""Program-wide facts and the function-name export."""

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from dumpviz.core.info_source import InfoGraphSource
from dumpviz.core.models import ElementKind

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_NAME = "functions.txt"


class ProgramSummary(BaseModel):
    """What the summary panel shows, passed through from the info dump."""
    program_size: int = Field(..., description="Total output size in bytes")
    compile_time: Optional[str] = Field(default=None, description="When the program was compiled")
    compile_duration: Optional[str] = Field(default=None, description="How long compilation took")
    no_such_method_enabled: bool = Field(default=False, description="Whether noSuchMethod dispatch is on")
    compiler_version: Optional[str] = None
    element_count: int = 0
    library_count: int = 0
    function_count: int = 0


def build_summary(source: InfoGraphSource) -> ProgramSummary:
    program = source.program
    return ProgramSummary(
        program_size=program.size,
        compile_time=program.compilation_moment,
        compile_duration=program.compilation_duration,
        no_such_method_enabled=program.no_such_method_enabled,
        compiler_version=program.dart2js_version,
        element_count=source.element_count,
        library_count=len(source.nodes_of_kind(ElementKind.LIBRARY.value)),
        function_count=len(source.nodes_of_kind(ElementKind.FUNCTION.value)),
    )


def function_names_text(source: InfoGraphSource) -> str:
    """All function names as one bracketed, comma-joined list."""
    return "[" + ", ".join(source.function_names()) + "]"


def export_function_names(source: InfoGraphSource, path: Union[str, Path] = DEFAULT_EXPORT_NAME) -> Path:
    path = Path(path)
    path.write_text(function_names_text(source), encoding="utf-8")
    logger.info(f"Wrote {len(source.function_names())} function names to {path}")
    return path
