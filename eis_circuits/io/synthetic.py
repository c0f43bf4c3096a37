"""
Frequency sweeps and synthetic spectra for testing and demonstration.
"""

import numpy as np
import logging
from typing import Optional
from numpy.typing import NDArray

from ..config import DEFAULT_F_MIN, DEFAULT_F_MAX, DEFAULT_POINTS_PER_DECADE

logger = logging.getLogger(__name__)


def angular_sweep(
    f_min: float = DEFAULT_F_MIN,
    f_max: float = DEFAULT_F_MAX,
    n_points: Optional[int] = None,
    descending: bool = False
) -> NDArray[np.float64]:
    """
    Log-spaced angular frequency sweep.

    Parameters
    ----------
    f_min, f_max : float
        Frequency range [Hz], 0 < f_min < f_max
    n_points : int, optional
        Number of points (default: DEFAULT_POINTS_PER_DECADE per decade,
        endpoints included)
    descending : bool
        Order from high to low frequency, as most instruments measure

    Returns
    -------
    omega : ndarray of float
        Angular frequencies [rad/s]
    """
    if not 0 < f_min < f_max:
        raise ValueError(f"Need 0 < f_min < f_max, got f_min={f_min}, f_max={f_max}")
    if n_points is None:
        decades = np.log10(f_max / f_min)
        n_points = int(round(decades * DEFAULT_POINTS_PER_DECADE)) + 1
    if n_points < 2:
        raise ValueError(f"n_points must be at least 2, got {n_points}")

    frequencies = np.logspace(np.log10(f_min), np.log10(f_max), n_points)
    if descending:
        frequencies = frequencies[::-1]
    return 2 * np.pi * frequencies


def generate_synthetic_spectrum(
    circuit,
    omega: NDArray[np.float64],
    noise: float = 0.01,
    seed: Optional[int] = None
) -> NDArray[np.complex128]:
    """
    Impedance of a circuit with proportional Gaussian noise.

    Z_noisy = Z + noise * |Z| * (n1 + j n2),  n1, n2 ~ N(0, 1)

    Parameters
    ----------
    circuit : Circuit or Element
        Anything with ``impedance(omega)``
    omega : ndarray of float
        Angular frequencies [rad/s]
    noise : float
        Noise level (0.01 = 1%)
    seed : int, optional
        Seed for reproducible noise

    Returns
    -------
    Z : ndarray of complex
        Noisy impedance [Ohm]
    """
    Z = circuit.impedance(omega)
    rng = np.random.default_rng(seed)
    logger.debug(f"Synthetic spectrum: {len(Z)} points, noise {noise * 100:.2g}%")
    return Z + noise * np.abs(Z) * (rng.standard_normal(len(Z)) +
                                    1j * rng.standard_normal(len(Z)))


__all__ = ['angular_sweep', 'generate_synthetic_spectrum']
