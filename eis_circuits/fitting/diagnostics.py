"""
Residual weighting and fit quality metrics.

Author: EIS Circuit Toolkit
"""

import numpy as np
import logging
from typing import Tuple
from numpy.typing import NDArray

from ..config import FIT_QUALITY_EXCELLENT_ERROR, FIT_QUALITY_GOOD_ERROR

logger = logging.getLogger(__name__)

VALID_WEIGHTINGS = ['uniform', 'sqrt', 'modulus', 'proportional']


def compute_weights(Z: NDArray[np.complex128], weighting: str) -> NDArray[np.float64]:
    """
    Residual weights for a measured spectrum.

    Parameters
    ----------
    Z : ndarray of complex
        Impedance data
    weighting : str
        'uniform' (w = 1), 'sqrt' (w = 1/sqrt|Z|), 'modulus' (w = 1/|Z|)
        or 'proportional' (w = 1/|Z|^2)

    Returns
    -------
    weights : ndarray of float
        Normalized weights (mean = 1)

    Raises
    ------
    ValueError
        For an unknown weighting
    """
    Z_mag_safe = np.maximum(np.abs(Z), 1e-15)

    if weighting == 'uniform':
        weights = np.ones_like(Z_mag_safe)
    elif weighting == 'sqrt':
        weights = 1.0 / np.sqrt(Z_mag_safe)
    elif weighting == 'modulus':
        weights = 1.0 / Z_mag_safe
    elif weighting == 'proportional':
        weights = 1.0 / Z_mag_safe**2
    else:
        raise ValueError(f"weighting must be one of {VALID_WEIGHTINGS}, got '{weighting}'")

    return weights / np.mean(weights)


def classify_quality(fit_error_rel: float) -> str:
    """Map a relative error [%] to 'excellent', 'good', 'acceptable' or 'poor'."""
    if fit_error_rel < FIT_QUALITY_EXCELLENT_ERROR:
        return 'excellent'
    if fit_error_rel < FIT_QUALITY_GOOD_ERROR:
        return 'good'
    if fit_error_rel < FIT_QUALITY_GOOD_ERROR * 2:
        return 'acceptable'
    return 'poor'


def compute_fit_metrics(
    Z: NDArray[np.complex128],
    Z_fit: NDArray[np.complex128],
    weighting: str
) -> Tuple[float, float, str]:
    """
    Compute fit error metrics and quality assessment.

    Returns
    -------
    fit_error_rel : float
        Weighted mean relative error [%]
    fit_error_abs : float
        Mean absolute error [Ohm]
    quality : str
        See classify_quality
    """
    weights = compute_weights(Z, weighting)
    relative_errors = np.abs(Z - Z_fit) / np.maximum(np.abs(Z), 1e-15)

    fit_error_rel = float(np.sum(weights * relative_errors) / np.sum(weights) * 100)
    fit_error_abs = float(np.mean(np.abs(Z - Z_fit)))
    return fit_error_rel, fit_error_abs, classify_quality(fit_error_rel)


def log_fit_results(result) -> None:
    """
    Log a FitResult to console.

    Parameters
    ----------
    result : FitResult
        Result of fit_circuit
    """
    ci_low, ci_high = result.params_ci_95

    logger.info("")
    logger.info("Fit results:")
    logger.info("  Parameters:")
    width = max((len(label) for label in result.param_labels), default=5)
    for i, label in enumerate(result.param_labels):
        value, stderr = result.params_opt[i], result.params_stderr[i]
        if result.fixed[i]:
            logger.info(f"    {label:{width}s} = {value:.6e} (fixed)")
        elif np.isinf(ci_low[i]) or np.isinf(ci_high[i]):
            logger.info(f"    {label:{width}s} = {value:.6e} +/- {stderr:.6e}")
        else:
            logger.info(f"    {label:{width}s} = {value:.3e} +/- {stderr:.2e}  "
                        f"[95% CI: {ci_low[i]:.3e}, {ci_high[i]:.3e}]")

    logger.info(f"  Fit error: {result.fit_error_rel:.2f}% (rel), "
                f"{result.fit_error_abs:.3g} Ohm (abs)")

    if result.quality == 'excellent':
        logger.info(f"  Quality: Excellent (<{FIT_QUALITY_EXCELLENT_ERROR}%)")
    elif result.quality == 'good':
        logger.info(f"  Quality: Good (<{FIT_QUALITY_GOOD_ERROR}%)")
    elif result.quality == 'acceptable':
        logger.warning("  Quality: Acceptable (consider checking the model)")
    else:
        logger.warning("  Quality: POOR! Model does not fit the data")

    for message in result.all_warnings:
        logger.warning(f"  {message}")


__all__ = [
    'VALID_WEIGHTINGS',
    'compute_weights',
    'classify_quality',
    'compute_fit_metrics',
    'log_fit_results',
]
