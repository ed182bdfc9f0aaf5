"""
Core exception types for ledger_router.core.

These are dependency-free and may be imported by all modules. Boundary errors
subclass ValueError so callers can treat them as invalid arguments.
"""

__all__ = [
    "AmountDomainError",
    "CurveDomainError",
    "RouteDomainError",
    "InvariantViolation",
]


class AmountDomainError(ValueError):
    """Raised when an amount is unparseable, non-finite or negative."""
    pass


class CurveDomainError(ValueError):
    """Raised when curve points violate ordering or monotonicity preconditions."""
    pass


class RouteDomainError(ValueError):
    """Raised when a route advertisement is malformed.

    Attributes
    ----------
    field : str | None
        Name of the offending advertisement field, when known.
    """

    def __init__(self, message, *, field=None):
        super().__init__(message)
        self.field = field


class InvariantViolation(Exception):
    """Raised when table state would break an internal invariant."""
    pass
