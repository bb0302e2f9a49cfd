from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, TYPE_CHECKING

from dumpviz.core.models import ElementNode, HistoryState, ProgramInfo

if TYPE_CHECKING:
    from dumpviz.core.lazy_row import LazyNode


# Abstract Interfaces
class IGraphSource(ABC):
    """Owner of the element graph. The engine only reads through this."""

    @abstractmethod
    def node_by_id(self, element_id: str) -> Optional[ElementNode]: ...

    @abstractmethod
    def nodes_of_kind(self, kind: str) -> List[ElementNode]: ...

    @property
    @abstractmethod
    def total_size(self) -> int: ...

    @abstractmethod
    def exclusive_size(self, element_id: str) -> int:
        """Size of everything reachable only through this element."""
        ...

    @property
    @abstractmethod
    def program(self) -> ProgramInfo: ...


class ITreeView(ABC):
    @abstractmethod
    def set_columns(
        self,
        names: Sequence[str],
        help_text: Sequence[str],
        width_hints: Sequence[Optional[int]],
    ) -> None: ...

    @abstractmethod
    def add_root(self, row: "LazyNode") -> None: ...

    @abstractmethod
    def show(self, row: "LazyNode") -> None:
        """Make a row visible, materializing whatever it needs to display."""
        ...


class IRouter(ABC):
    @abstractmethod
    def switch_to(self, state: HistoryState) -> None: ...
