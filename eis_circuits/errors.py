"""
Exception hierarchy for circuit construction and evaluation.

All errors derive from CircuitError so callers can catch the whole family
with one clause. Each concrete error also derives from the builtin that
matches its meaning (ValueError for bad values, KeyError for registry
lookups), which keeps ``except ValueError`` style code working.
"""

from typing import Optional


class CircuitError(Exception):
    """Base exception for EIS circuit errors."""
    pass


class InvalidParameterCount(CircuitError, ValueError):
    """Parameter vector length does not match the element arity."""

    def __init__(self, kind, expected: int, got: int, name: Optional[str] = None):
        self.kind = kind
        self.expected = expected
        self.got = got
        self.name = name
        where = f"'{name}' ({kind})" if name else f"{kind}"
        super().__init__(f"{where} takes {expected} parameter(s), got {got}")


class DomainError(CircuitError, ValueError):
    """
    Formula evaluated outside its valid angular frequency domain.

    Attributes
    ----------
    omega : float
        Offending angular frequency [rad/s]
    index : int or None
        Position of the point in the sweep (None for scalar calls)
    source : str or None
        Element or group that could not be evaluated
    """

    def __init__(self, message: str, omega: float = float('nan'),
                 index: Optional[int] = None, source: Optional[str] = None):
        self.omega = omega
        self.index = index
        self.source = source
        super().__init__(message)

    def at(self, index: int) -> 'DomainError':
        """Return a copy of this error bound to a sweep index."""
        return DomainError(str(self), omega=self.omega, index=index,
                           source=self.source)


class DuplicateName(CircuitError, KeyError):
    """Element name already registered in the circuit."""

    def __str__(self):
        return str(self.args[0]) if self.args else ''


class NotFound(CircuitError, KeyError):
    """Element name not registered in the circuit."""

    def __str__(self):
        return str(self.args[0]) if self.args else ''


class InvalidRepresentation(CircuitError, ValueError):
    """Malformed or unsatisfiable circuit representation string."""

    def __init__(self, message: str, representation: Optional[str] = None,
                 position: Optional[int] = None):
        self.representation = representation
        self.position = position
        if representation is not None and position is not None:
            message = f"{message}\n  {representation}\n  {' ' * position}^"
        super().__init__(message)


class OwnershipError(CircuitError):
    """Element is already owned by another circuit."""
    pass


class FitError(CircuitError, RuntimeError):
    """Least-squares fit could not be completed."""
    pass


__all__ = [
    'CircuitError',
    'InvalidParameterCount',
    'DomainError',
    'DuplicateName',
    'NotFound',
    'InvalidRepresentation',
    'OwnershipError',
    'FitError',
]
