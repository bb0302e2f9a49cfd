"""Exception taxonomy for the size inspector.

Structural problems with the info dump (dangling ids, unknown kinds, a
non-positive program size) are data-integrity faults and are never retried.
"""

from typing import Optional


# ============================================================================
# Exceptions
# ============================================================================

class DumpVizError(Exception):
    """Base exception for dumpviz errors."""

    def __init__(self, message: str, element_id: Optional[str] = None):
        """Initialize dumpviz error.

        Args:
            message: Error message
            element_id: ID of the element the error is about (optional)
        """
        self.element_id = element_id
        super().__init__(message)


class DanglingReferenceError(DumpVizError):
    """Raised when an element id does not resolve in the graph source."""

    def __init__(self, element_id: str, referrer_id: Optional[str] = None):
        self.referrer_id = referrer_id
        if referrer_id:
            message = f"Element {referrer_id} references unknown element {element_id}"
        else:
            message = f"Unknown element {element_id}"
        super().__init__(message, element_id=element_id)


class UnknownKindError(DumpVizError):
    """Raised when an element kind is outside the set the renderer understands."""

    def __init__(self, kind: str, element_id: Optional[str] = None):
        self.kind = kind
        super().__init__(f"Unknown element type: {kind}", element_id=element_id)


class InvalidProgramSizeError(DumpVizError):
    """Raised when the program size cannot be used as a percentage denominator."""
    pass


class InfoFileError(DumpVizError):
    """Raised when an info dump cannot be read or parsed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ExpansionError(DumpVizError):
    """Raised when a consumed child producer is invoked again after failing."""
    pass
