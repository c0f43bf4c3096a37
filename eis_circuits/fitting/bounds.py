"""
Parameter bounds for circuit fitting.

Bounds are looked up by the bare parameter label ('r', 'c', 'tau', ...),
so 'R1.r' and 'Wd.r' share the resistance range.

Author: EIS Circuit Toolkit
"""

import numpy as np
from typing import List, Tuple
from numpy.typing import NDArray

from ..config import PARAMETER_BOUNDS, DEFAULT_BOUNDS


def bare_label(label: str) -> str:
    """'Wd.tau' -> 'tau'."""
    return label.rsplit('.', 1)[-1]


def generate_bounds(param_labels: List[str]) -> Tuple[List[float], List[float]]:
    """
    Physically reasonable bounds for a list of circuit parameter labels.

    Parameters
    ----------
    param_labels : list of str
        Labels as returned by ``Circuit.get_param_labels()``

    Returns
    -------
    lower_bounds : list of float
    upper_bounds : list of float
    """
    lower_bounds, upper_bounds = [], []
    for label in param_labels:
        lb, ub = PARAMETER_BOUNDS.get(bare_label(label), DEFAULT_BOUNDS)
        lower_bounds.append(lb)
        upper_bounds.append(ub)
    return lower_bounds, upper_bounds


def clip_to_bounds(values: List[float], lower: List[float],
                   upper: List[float]) -> Tuple[List[float], List[int]]:
    """
    Clip an initial guess into the bounds.

    Returns the clipped values and the indices that had to move.
    """
    clipped, moved = [], []
    for i, (v, lb, ub) in enumerate(zip(values, lower, upper)):
        if v < lb or v > ub:
            moved.append(i)
        clipped.append(min(max(v, lb), ub))
    return clipped, moved


def params_near_bounds(
    params: NDArray[np.float64],
    lower: List[float],
    upper: List[float],
    decades: float = 1.0
) -> List[Tuple[int, str]]:
    """
    Find parameters within ``decades`` of a (logarithmic) bound.

    All bounds in PARAMETER_BOUNDS are positive and span many decades, so
    proximity is judged on a log scale.

    Returns
    -------
    hits : list of (index, 'lower' | 'upper')
    """
    hits = []
    for i, (p, lb, ub) in enumerate(zip(params, lower, upper)):
        if p <= 0 or lb <= 0:
            continue
        if np.log10(p) - np.log10(lb) < decades:
            hits.append((i, 'lower'))
        elif np.log10(ub) - np.log10(p) < decades:
            hits.append((i, 'upper'))
    return hits


__all__ = ['bare_label', 'generate_bounds', 'clip_to_bounds', 'params_near_bounds']
