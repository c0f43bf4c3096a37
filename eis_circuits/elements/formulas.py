"""
Closed-form impedance of the elementary EIS circuit elements.

Every function takes the element parameters followed by the angular
frequency ``w`` [rad/s] and returns the complex impedance [Ohm]. ``w`` may
be a scalar or an array; arrays give an array of the same shape with
``Z[i]`` belonging to ``w[i]``, scalars give a numpy complex scalar.

    resistance(r, w)                 Z = r
    capacitance(c, w)                Z = 1 / (j c w)
    inductance(l, w)                 Z = j l w
    warburg(sigma, w)                Z = sigma / sqrt(w) * (1 - j)
    finite_length_warburg(r, tau, w) Z = r tanh(sqrt(j tau w)) / sqrt(j tau w)
    finite_space_warburg(r, tau, w)  Z = r / (tanh(sqrt(j tau w)) sqrt(j tau w))

Complex square roots and hyperbolic functions are numpy's, which use the
principal branch (argument in (-pi, pi]).

Domain
------
``w`` must be finite and non-negative. Capacitor and all Warburg variants
are singular at ``w = 0`` and require ``w > 0``. The capacitance and the
diffusion time tau must be positive. Violations raise DomainError; they
are never turned into inf/nan here.
"""

import numpy as np
from typing import Union
from numpy.typing import NDArray, ArrayLike

from ..errors import DomainError

Impedance = Union[np.complex128, NDArray[np.complex128]]


def angular_domain_mask(w: ArrayLike, allow_zero: bool) -> NDArray[np.bool_]:
    """
    Return a boolean mask of angular frequencies inside the valid domain.

    Parameters
    ----------
    w : array_like of float
        Angular frequencies [rad/s]
    allow_zero : bool
        Whether w = 0 is inside the domain

    Returns
    -------
    mask : ndarray of bool
        True where the formula may be evaluated
    """
    w = np.asarray(w, dtype=float)
    with np.errstate(invalid='ignore'):
        if allow_zero:
            return np.isfinite(w) & (w >= 0)
        return np.isfinite(w) & (w > 0)


def _omega(w: ArrayLike, name: str, allow_zero: bool = False) -> NDArray[np.float64]:
    """Convert w to a float array and enforce the domain of ``name``."""
    w = np.asarray(w, dtype=float)
    valid = angular_domain_mask(w, allow_zero)
    if not np.all(valid):
        bad = np.flatnonzero(~valid.ravel())[0]
        w_bad = float(w.ravel()[bad])
        index = int(bad) if w.ndim else None
        bound = "w >= 0" if allow_zero else "w > 0"
        raise DomainError(f"{name} is undefined at w = {w_bad} (requires finite {bound})",
                          omega=w_bad, index=index, source=name)
    return w


def _positive(value: float, label: str, name: str) -> None:
    """Reject non-positive parameters that put a pole on the whole sweep."""
    if not value > 0:
        raise DomainError(f"{name} requires {label} > 0, got {value}", source=name)


def resistance(r: float, w: ArrayLike) -> Impedance:
    """
    Impedance of a resistor.

    Z = R, independent of frequency.

    Parameters
    ----------
    r : float
        Resistance [Ohm]
    w : float or array_like
        Angular frequency [rad/s]
    """
    w = _omega(w, 'resistance', allow_zero=True)
    return np.full(w.shape, complex(r), dtype=np.complex128)[()]


def capacitance(c: float, w: ArrayLike) -> Impedance:
    """
    Impedance of a capacitor.

    Z = 1 / (j C w)

    Parameters
    ----------
    c : float
        Capacitance [F]
    w : float or array_like
        Angular frequency [rad/s], w > 0
    """
    _positive(c, 'c', 'capacitance')
    w = _omega(w, 'capacitance')
    return 1 / (1j * c * w)


def inductance(l: float, w: ArrayLike) -> Impedance:
    """
    Impedance of an inductor.

    Z = j L w

    Parameters
    ----------
    l : float
        Inductance [H]
    w : float or array_like
        Angular frequency [rad/s]
    """
    w = _omega(w, 'inductance', allow_zero=True)
    return 1j * l * w


def warburg(sigma: float, w: ArrayLike) -> Impedance:
    """
    Semi-infinite Warburg impedance.

    Z = sigma / sqrt(w) * (1 - j)

    Parameters
    ----------
    sigma : float
        Warburg coefficient [Ohm s^(-1/2)]
    w : float or array_like
        Angular frequency [rad/s], w > 0
    """
    w = _omega(w, 'warburg')
    return sigma / np.sqrt(w) * (1 - 1j)


def finite_length_warburg(r: float, tau: float, w: ArrayLike) -> Impedance:
    """
    Finite-length (transmissive boundary) Warburg impedance.

    Z = R tanh(sqrt(j tau w)) / sqrt(j tau w)

    Tends to R for w -> 0 and to the semi-infinite Warburg with
    sigma = R / sqrt(2 tau) for tau w >> 1.

    Parameters
    ----------
    r : float
        Diffusion resistance [Ohm]
    tau : float
        Characteristic diffusion time [s], tau > 0
    w : float or array_like
        Angular frequency [rad/s], w > 0
    """
    _positive(tau, 'tau', 'finite_length_warburg')
    w = _omega(w, 'finite_length_warburg')
    s = np.sqrt(1j * tau * w)
    return r * np.tanh(s) / s


def finite_space_warburg(r: float, tau: float, w: ArrayLike) -> Impedance:
    """
    Finite-space (reflective boundary) Warburg impedance.

    Z = R coth(sqrt(j tau w)) / sqrt(j tau w)

    Behaves like a capacitor C = tau / R at low frequency.

    Parameters
    ----------
    r : float
        Diffusion resistance [Ohm]
    tau : float
        Characteristic diffusion time [s], tau > 0
    w : float or array_like
        Angular frequency [rad/s], w > 0
    """
    _positive(tau, 'tau', 'finite_space_warburg')
    w = _omega(w, 'finite_space_warburg')
    s = np.sqrt(1j * tau * w)
    return r / (np.tanh(s) * s)


__all__ = [
    'angular_domain_mask',
    'resistance',
    'capacitance',
    'inductance',
    'warburg',
    'finite_length_warburg',
    'finite_space_warburg',
]
