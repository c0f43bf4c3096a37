"""
Least-squares fit of a Circuit to a measured impedance spectrum.

Clean design: no logging of results in the core function, all diagnostics
are returned as data. The CLI layer is responsible for user output.

Usage:
    from eis_circuits import Circuit
    from eis_circuits.fitting import fit_circuit

    circuit = Circuit('rc', 'Rs=R(90) - (Rp=R(900) | Cp=C(2e-6))')
    result, Z_fit = fit_circuit(circuit, omega, Z_measured)
    print(result.as_dict())     # {'Rs.r': (100.2, 0.4), ...}
"""

import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray, ArrayLike
from scipy.optimize import least_squares, OptimizeWarning

from ..circuit import Circuit
from ..config import DEFAULT_WEIGHTING, MAX_FUNCTION_EVALS
from ..errors import DomainError, FitError, InvalidParameterCount, NotFound
from ..sweep import as_sweep
from .bounds import clip_to_bounds, generate_bounds, params_near_bounds
from .covariance import compute_confidence_interval, compute_covariance_matrix
from .diagnostics import VALID_WEIGHTINGS, compute_fit_metrics, compute_weights

logger = logging.getLogger(__name__)


@dataclass
class FitDiagnostics:
    """Diagnostics from circuit fitting."""
    optimizer_status: int
    optimizer_message: str
    optimizer_success: bool
    n_function_evals: int
    condition_number: float
    covariance_rank: int
    covariance_warning: Optional[str] = None
    clipped_params: List[str] = field(default_factory=list)
    params_at_bounds: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class FitResult:
    """
    Result from circuit fitting.

    Attributes
    ----------
    circuit : Circuit
        The fitted circuit (its elements hold the fitted parameters
        unless fit_circuit was called with update=False)
    param_labels : list of str
        Labels such as 'R1.r', in parameter order
    params_opt : ndarray of float
        Optimized parameters (fixed ones unchanged)
    params_stderr : ndarray of float
        Standard errors (0 for fixed parameters)
    fixed : list of bool
        Which parameters were held fixed
    fit_error_rel : float
        Weighted relative fit error [%]
    fit_error_abs : float
        Mean absolute fit error [Ohm]
    quality : str
        'excellent', 'good', 'acceptable' or 'poor'
    cov : ndarray or None
        Parameter covariance matrix
    diagnostics : FitDiagnostics
    """
    circuit: Circuit
    param_labels: List[str]
    params_opt: NDArray[np.float64]
    params_stderr: NDArray[np.float64]
    fixed: List[bool]
    fit_error_rel: float
    fit_error_abs: float
    quality: str
    cov: Optional[NDArray[np.float64]]
    diagnostics: FitDiagnostics
    _n_residuals: int = 0

    @property
    def params_ci_95(self) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """95% confidence intervals for parameters."""
        if not np.all(np.isfinite(self.params_stderr)):
            return (np.full_like(self.params_opt, -np.inf),
                    np.full_like(self.params_opt, np.inf))
        n_free = self.fixed.count(False)
        return compute_confidence_interval(self.params_opt, self.params_stderr,
                                           self._n_residuals, n_free, 0.95)

    @property
    def is_well_conditioned(self) -> bool:
        return self.diagnostics.covariance_warning is None

    @property
    def all_warnings(self) -> List[str]:
        """Collect all warnings from diagnostics."""
        collected = list(self.diagnostics.warnings)
        if self.diagnostics.clipped_params:
            collected.append("Initial guess clipped into bounds for: "
                             + ', '.join(self.diagnostics.clipped_params))
        if self.diagnostics.params_at_bounds:
            collected.append("Parameters near bounds: "
                             + ', '.join(self.diagnostics.params_at_bounds))
        if self.diagnostics.covariance_warning:
            collected.append(self.diagnostics.covariance_warning)
        return collected

    def as_dict(self) -> Dict[str, Tuple[float, float]]:
        """{label: (value, stderr)}."""
        return {label: (float(p), float(s)) for label, p, s
                in zip(self.param_labels, self.params_opt, self.params_stderr)}

    def __repr__(self) -> str:
        lines = ["Fit Result:", f"  Circuit: {self.circuit.to_representation(inline=False)}"]
        for label, (value, stderr) in self.as_dict().items():
            lines.append(f"  {label} = {value:.4g} +/- {stderr:.2g}")
        lines.append(f"  Fit error: {self.fit_error_rel:.2f}% (rel), "
                     f"{self.fit_error_abs:.3g} Ohm (abs)")
        lines.append(f"  Quality: {self.quality}")
        return '\n'.join(lines)


def _fixed_mask(labels: List[str], fixed: Optional[Iterable[str]]) -> List[bool]:
    fixed = set(fixed or ())
    unknown = fixed - set(labels)
    if unknown:
        raise NotFound(f"Unknown parameter label(s) {sorted(unknown)}; "
                       f"available: {labels}")
    return [label in fixed for label in labels]


def fit_circuit(
    circuit: Circuit,
    omega: ArrayLike,
    Z: ArrayLike,
    weighting: str = DEFAULT_WEIGHTING,
    fixed: Optional[Iterable[str]] = None,
    initial_guess: Optional[Sequence[float]] = None,
    update: bool = True
) -> Tuple[FitResult, NDArray[np.complex128]]:
    """
    Fit circuit parameters to an impedance spectrum.

    Parameters
    ----------
    circuit : Circuit
        Circuit whose current parameters are the initial guess
    omega : array_like of float
        Angular frequencies of the measurement [rad/s], all > 0
    Z : array_like of complex
        Measured impedance [Ohm], same length as omega
    weighting : str, optional
        'uniform', 'sqrt', 'modulus' (default) or 'proportional'
    fixed : iterable of str, optional
        Parameter labels (e.g. 'Rs.r') held at their initial value
    initial_guess : sequence of float, optional
        Override the circuit's parameters as starting point
    update : bool, optional
        Write fitted parameters back into the circuit (default: True)

    Returns
    -------
    result : FitResult
        Fitting results with all diagnostics
    Z_fit : ndarray of complex
        Model impedance at the fitted parameters

    Raises
    ------
    ValueError
        Unknown weighting, or Z and omega lengths differ
    DomainError
        The sweep contains points the circuit cannot be evaluated at
    FitError
        The optimizer failed
    """
    if weighting not in VALID_WEIGHTINGS:
        raise ValueError(f"weighting must be one of {VALID_WEIGHTINGS}, got '{weighting}'")

    omega = as_sweep(omega)
    Z = np.asarray(Z, dtype=complex)
    if Z.shape != omega.shape:
        raise ValueError(f"Z has {Z.size} points but omega has {omega.size}")

    labels = circuit.get_param_labels()
    fixed_mask = _fixed_mask(labels, fixed)

    start = list(circuit.get_all_params()) if initial_guess is None else [float(v) for v in initial_guess]
    if len(start) != len(labels):
        raise InvalidParameterCount('circuit', len(labels), len(start), circuit.name)

    lower, upper = generate_bounds(labels)
    start_clipped, moved = clip_to_bounds(start, lower, upper)
    # Fixed parameters keep their value even outside the bounds
    start_full = [s if is_fixed else c for s, c, is_fixed in zip(start, start_clipped, fixed_mask)]
    clipped = [labels[i] for i in moved if not fixed_mask[i]]

    free_idx = [i for i, is_fixed in enumerate(fixed_mask) if not is_fixed]
    if not free_idx:
        raise ValueError("All parameters are fixed; nothing to fit")

    # Fails early with DomainError if the sweep itself is invalid
    circuit.impedance(omega, start_full)

    weights = compute_weights(Z, weighting)

    def reconstruct_params(free_params):
        full = np.array(start_full, dtype=float)
        full[free_idx] = free_params
        return full

    def residual(free_params):
        Z_pred = circuit.impedance(omega, reconstruct_params(free_params))
        return np.concatenate([
            (Z.real - Z_pred.real) * weights,
            (Z.imag - Z_pred.imag) * weights
        ])

    x0 = np.array([start_full[i] for i in free_idx])
    lb = [lower[i] for i in free_idx]
    ub = [upper[i] for i in free_idx]
    diag_warnings = []

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", OptimizeWarning)
            opt_result = least_squares(
                residual,
                x0=x0,
                jac='2-point',
                bounds=(lb, ub),
                max_nfev=MAX_FUNCTION_EVALS,
                x_scale=np.maximum(np.abs(x0), 1e-10)
            )
        for warning in caught:
            if issubclass(warning.category, OptimizeWarning):
                diag_warnings.append(f"Optimizer warning: {warning.message}")
    except (DomainError, ValueError, np.linalg.LinAlgError) as e:
        logger.debug(f"Fit failed: {type(e).__name__}: {e}")
        raise FitError(f"Circuit fitting failed: {e}") from e

    if not opt_result.success:
        diag_warnings.append(f"Optimizer did not converge: {opt_result.message}")

    params_opt = reconstruct_params(opt_result.x)
    cov_result = compute_covariance_matrix(opt_result.jac, opt_result.fun, fixed_mask)

    near = params_near_bounds(opt_result.x, lb, ub)
    at_bounds = [f"{labels[free_idx[i]]} ({side})" for i, side in near]

    Z_fit = circuit.impedance(omega, params_opt)
    fit_error_rel, fit_error_abs, quality = compute_fit_metrics(Z, Z_fit, weighting)

    if update:
        circuit.update_params(params_opt)

    diagnostics = FitDiagnostics(
        optimizer_status=opt_result.status,
        optimizer_message=opt_result.message,
        optimizer_success=opt_result.success,
        n_function_evals=opt_result.nfev,
        condition_number=cov_result.condition_number,
        covariance_rank=cov_result.rank,
        covariance_warning=cov_result.warning_message,
        clipped_params=clipped,
        params_at_bounds=at_bounds,
        warnings=diag_warnings
    )

    result = FitResult(
        circuit=circuit,
        param_labels=labels,
        params_opt=params_opt,
        params_stderr=cov_result.stderr,
        fixed=fixed_mask,
        fit_error_rel=fit_error_rel,
        fit_error_abs=fit_error_abs,
        quality=quality,
        cov=cov_result.cov,
        diagnostics=diagnostics,
        _n_residuals=len(opt_result.fun)
    )
    return result, Z_fit


__all__ = ['fit_circuit', 'FitResult', 'FitDiagnostics']
