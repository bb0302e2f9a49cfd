"""Data model for compiler info dumps and the rows built from them."""

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Enums
# ============================================================================

class ElementKind(str, enum.Enum):
    """Kind of program element in an info dump."""
    LIBRARY = "library"
    CLASS = "class"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    CLOSURE = "closure"
    FUNCTION = "function"
    FIELD = "field"
    TYPEDEF = "typedef"


FUNCTION_LIKE_KINDS = frozenset({
    ElementKind.FUNCTION,
    ElementKind.CLOSURE,
    ElementKind.CONSTRUCTOR,
    ElementKind.METHOD,
})


class CellAlign(str, enum.Enum):
    """Horizontal alignment of a table cell."""
    LEFT = "left"
    RIGHT = "right"


# ============================================================================
# Info Dump Models
# ============================================================================

class Parameter(BaseModel):
    """A function parameter as recorded by the compiler."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str
    declared_type: Optional[str] = Field(default=None, alias="declaredType")
    inferred_type: Optional[str] = Field(default=None, alias="type")


class ElementNode(BaseModel):
    """One program element (library, class, function, field, ...).

    ``kind`` stays a plain string so that an element of a kind this tool does
    not know about still loads, and is rejected where it is rendered.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str
    kind: str = ""
    name: str = ""
    size: int = Field(default=0, ge=0, description="Direct size in bytes")
    children: List[str] = Field(default_factory=list)
    parent: Optional[str] = None

    side_effects: Optional[str] = Field(default=None, alias="sideEffects")
    modifiers: Dict[str, bool] = Field(default_factory=dict)
    return_type: Optional[str] = Field(default=None, alias="returnType")
    inferred_return_type: Optional[str] = Field(default=None, alias="inferredReturnType")
    declared_type: Optional[str] = Field(default=None, alias="type")
    inferred_type: Optional[str] = Field(default=None, alias="inferredType")
    parameters: List[Parameter] = Field(default_factory=list)
    code: Optional[str] = None

    @field_validator("size", mode="before")
    @classmethod
    def _missing_size_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class HoldingEdge(BaseModel):
    """A dependency edge from the ``holding`` section of a dump."""
    id: str
    mask: Optional[str] = None


class ProgramInfo(BaseModel):
    """Program-wide facts shown in the summary panel."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    size: int
    compilation_moment: Optional[str] = Field(default=None, alias="compilationMoment")
    compilation_duration: Optional[str] = Field(default=None, alias="compilationDuration")
    no_such_method_enabled: bool = Field(default=False, alias="noSuchMethodEnabled")
    dart2js_version: Optional[str] = Field(default=None, alias="dart2jsVersion")

    @field_validator("compilation_moment", "compilation_duration", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class InfoDump(BaseModel):
    """Top-level layout of an info dump file."""
    model_config = ConfigDict(extra="ignore")

    program: ProgramInfo
    elements: Dict[str, Dict[str, ElementNode]] = Field(default_factory=dict)
    holding: Dict[str, List[HoldingEdge]] = Field(default_factory=dict)
    dump_version: Optional[int] = None


class HistoryState(BaseModel):
    """A navigation target: which view to show and for which element."""
    model_config = ConfigDict(frozen=True)

    view: str
    dep_target: Optional[str] = None


# ============================================================================
# Row Data
# ============================================================================

@dataclass(frozen=True)
class TypeComparison:
    """Declared and inferred type shown one above the other."""
    declared: Optional[str]
    inferred: Optional[str]


@dataclass(frozen=True)
class NameWithLink:
    """An element name with an affordance that navigates to another view."""
    name: str
    target: HistoryState
    on_activate: Callable[[], None] = field(compare=False, repr=False)

    def activate(self) -> None:
        self.on_activate()


CellContent = Union[str, int, TypeComparison, NameWithLink]


@dataclass(frozen=True)
class Cell:
    """One display cell of a row."""
    content: CellContent
    align: CellAlign = CellAlign.LEFT
    colspan: int = 1
    pre: bool = False

    @property
    def text(self) -> str:
        """Plain-text form of the content, used for sorting and tests."""
        if isinstance(self.content, NameWithLink):
            return self.content.name
        if isinstance(self.content, TypeComparison):
            return f"inferred: {self.content.inferred}\ndeclared: {self.content.declared}"
        return str(self.content)


@dataclass(frozen=True)
class ElementRow:
    """Snapshot of an element plus the sizes computed for it at materialization."""
    node: ElementNode
    cumulative_size: int
    size_percent: str
