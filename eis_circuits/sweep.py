"""
Per-point results of a frequency sweep.

A sweep keeps going past points it cannot evaluate: the failed points hold
NaN in ``Z`` and their DomainError in ``errors``, the rest stay usable.
"""

from dataclasses import dataclass, field
from typing import Dict

import numpy as np
from numpy.typing import NDArray, ArrayLike

from .errors import DomainError


def as_sweep(omega: ArrayLike) -> NDArray[np.float64]:
    """
    Convert an angular frequency sequence to a 1-D float array.

    Scalars become one-point sweeps. The array is always a copy, so later
    changes to the caller's buffer do not leak into results.

    Raises
    ------
    ValueError
        If omega has more than one dimension
    """
    omega = np.array(omega, dtype=float, ndmin=1)
    if omega.ndim != 1:
        raise ValueError(f"Frequency sweep must be one-dimensional, got shape {omega.shape}")
    return omega


@dataclass
class SweepResult:
    """
    Complex impedance over a sweep with per-point error reporting.

    Attributes
    ----------
    omega : ndarray of float
        Angular frequencies [rad/s], in input order
    Z : ndarray of complex
        Impedance [Ohm]; NaN+NaNj where the point failed
    errors : dict of int -> DomainError
        Failed points keyed by sweep index, in ascending order
    """
    omega: NDArray[np.float64]
    Z: NDArray[np.complex128]
    errors: Dict[int, DomainError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when every point was evaluated."""
        return not self.errors

    @property
    def valid(self) -> NDArray[np.bool_]:
        """Boolean mask of evaluated points."""
        mask = np.ones(len(self.omega), dtype=bool)
        if self.errors:
            mask[list(self.errors)] = False
        return mask

    @property
    def frequencies(self) -> NDArray[np.float64]:
        """Sweep frequencies [Hz]."""
        return self.omega / (2 * np.pi)

    def point(self, index: int) -> complex:
        """
        Impedance at one sweep index.

        Raises
        ------
        DomainError
            The error recorded for that point, if it failed
        """
        index = range(len(self.omega))[index]
        if index in self.errors:
            raise self.errors[index]
        return complex(self.Z[index])

    def unwrap(self) -> NDArray[np.complex128]:
        """Return Z, raising the first point error if any point failed."""
        if self.errors:
            first = next(iter(self.errors.values()))
            raise DomainError(
                f"{len(self.errors)} of {len(self.omega)} sweep point(s) failed; first: {first}",
                omega=first.omega, index=first.index, source=first.source
            ) from first
        return self.Z

    def __len__(self) -> int:
        return len(self.omega)

    def __iter__(self):
        """Yield, per point, the complex impedance or the DomainError."""
        for i, z in enumerate(self.Z):
            yield self.errors.get(i, complex(z))

    def __repr__(self) -> str:
        return f"SweepResult(points={len(self.omega)}, failed={len(self.errors)})"


__all__ = ['SweepResult', 'as_sweep']
