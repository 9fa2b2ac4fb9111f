"""Exception types raised by the A-CAT calculator.

Every error the core raises derives from ``ACATError`` so callers (the CLI,
a request handler) can map them to a user-visible message in one place.
Precondition and structure errors also derive from ``ValueError`` because
they describe bad input data.
"""


class ACATError(Exception):
    """Base class for all calculator errors."""


class PreconditionError(ACATError, ValueError):
    """Raised when an input required before computing is missing or invalid.

    The typical case is a crop ACAT whose ``first_expense_month`` is unset
    (``"None"``) or not one of the twelve canonical month names.
    """


class StructureError(ACATError, ValueError):
    """Raised when a document does not have the expected form-tree shape."""


class WorkflowError(ACATError):
    """Raised on an illegal status change or a write to a locked document."""
