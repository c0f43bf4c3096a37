"""
Covariance matrix computation for circuit fitting.

SVD-based covariance estimate and t-distribution confidence intervals for
fitted parameters.

Author: EIS Circuit Toolkit
"""

import numpy as np
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple
from numpy.typing import NDArray
from scipy.stats import t

from ..config import CONDITION_NUMBER_LIMIT

logger = logging.getLogger(__name__)


@dataclass
class CovarianceResult:
    """
    Result of covariance matrix computation.

    Attributes
    ----------
    cov : ndarray or None
        Covariance matrix over all parameters (fixed ones have zero rows)
    stderr : ndarray
        Standard errors (inf if computation failed, 0 for fixed parameters)
    condition_number : float
        Ratio of largest to smallest singular value of the Jacobian
    rank : int
        Numerical rank of the Jacobian
    warning_message : str or None
        Description of any detected problem
    """
    cov: Optional[NDArray[np.float64]]
    stderr: NDArray[np.float64]
    condition_number: float
    rank: int
    warning_message: Optional[str] = None

    @property
    def is_well_conditioned(self) -> bool:
        return self.condition_number < CONDITION_NUMBER_LIMIT


def degrees_of_freedom(n_residuals: int, n_free: int) -> int:
    """Residual degrees of freedom, at least 1."""
    return max(n_residuals - n_free, 1)


def compute_covariance_matrix(
    jacobian: NDArray[np.float64],
    residuals: NDArray[np.float64],
    fixed_params: List[bool],
    rcond: float = 1e-10
) -> CovarianceResult:
    """
    Covariance of the free parameters, expanded to the full parameter vector.

    For weighted residuals r = w (Z - Z_model) with weighted Jacobian J:

        s^2 = r^T r / (n - p)
        cov = s^2 (J^T J)^{-1} = s^2 V S^{-2} V^T     (J = U S V^T)

    Singular values below ``rcond * max(S)`` are clamped to that threshold.

    Parameters
    ----------
    jacobian : ndarray, shape (n_residuals, n_free)
        Jacobian of the weighted residuals
    residuals : ndarray, shape (n_residuals,)
        Weighted residuals at the optimum
    fixed_params : list of bool
        Fixed flag for every parameter (True = not optimized)
    rcond : float, optional
        Relative cutoff for small singular values

    Returns
    -------
    result : CovarianceResult
    """
    n_total = len(fixed_params)
    free_idx = [i for i, is_fixed in enumerate(fixed_params) if not is_fixed]
    dof = degrees_of_freedom(len(residuals), len(free_idx))
    residual_variance = residuals @ residuals / dof

    try:
        _, S, Vt = np.linalg.svd(jacobian, full_matrices=False)
    except np.linalg.LinAlgError as e:
        logger.debug(f"SVD failed: {e}")
        return CovarianceResult(None, np.full(n_total, np.inf), np.inf, 0,
                                f"SVD failed: {e}")

    condition_number = S[0] / S[-1] if S[-1] > 0 else np.inf
    threshold = rcond * S[0]
    rank = int(np.sum(S > threshold))

    warning_message = None
    if rank < len(free_idx):
        warning_message = (f"Rank-deficient Jacobian (rank={rank}/{len(free_idx)}). "
                           "Some parameters are not identifiable from data.")
    elif condition_number >= CONDITION_NUMBER_LIMIT:
        warning_message = (f"Ill-conditioned Jacobian (cond={condition_number:.2e}). "
                           "Covariance estimates may be unreliable.")

    S_clamped = np.maximum(S, threshold)
    cov_free = residual_variance * (Vt.T / S_clamped**2) @ Vt

    cov = np.zeros((n_total, n_total))
    cov[np.ix_(free_idx, free_idx)] = cov_free
    stderr = np.sqrt(np.abs(np.diag(cov)))

    return CovarianceResult(cov, stderr, condition_number, rank, warning_message)


def compute_confidence_interval(
    params_opt: NDArray[np.float64],
    params_stderr: NDArray[np.float64],
    n_residuals: int,
    n_free: int,
    confidence_level: float = 0.95
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Confidence intervals from the t-distribution.

    Uses the same degrees of freedom as compute_covariance_matrix:
    residual count (real and imaginary parts) minus free parameters.

    Returns
    -------
    ci_low, ci_high : ndarray
    """
    dof = degrees_of_freedom(n_residuals, n_free)
    t_critical = t.ppf(1 - (1 - confidence_level) / 2, dof)
    margin = t_critical * params_stderr
    return params_opt - margin, params_opt + margin


__all__ = [
    'CovarianceResult',
    'degrees_of_freedom',
    'compute_covariance_matrix',
    'compute_confidence_interval',
]
