"""
Workflow handlers for the EIS circuit CLI.

Each handler corresponds to a step in the pipeline:
- build_circuit: parse the representation
- build_sweep: angular frequency sweep from the CLI range
- run_simulation: evaluate and report the spectrum
- write_spectrum: CSV export
- run_fit: fit the circuit to a noisy synthetic copy of itself
"""

import argparse
import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from .logging import log_separator
from ..circuit import Circuit
from ..fitting import FitResult, fit_circuit, log_fit_results
from ..io import angular_sweep, generate_synthetic_spectrum
from ..sweep import SweepResult

logger = logging.getLogger(__name__)

CSV_HEADER = 'omega_rad_s,f_Hz,Z_real_Ohm,Z_imag_Ohm,valid'


def build_circuit(args: argparse.Namespace) -> Circuit:
    """Build the circuit from ``args.representation``."""
    circuit = Circuit(args.name, args.representation)
    log_separator()
    logger.info(f"Circuit '{circuit.name}': {circuit.to_representation(inline=False)}")
    log_separator()
    for element in circuit.elements:
        values = ', '.join(f"{label}={value:.4g}" for label, value
                           in zip(element.param_labels, element.parameters))
        logger.info(f"  {element.name:8s} {element.kind.name:22s} {values}")
    return circuit


def build_sweep(args: argparse.Namespace) -> NDArray[np.float64]:
    """Angular frequency sweep from the CLI options."""
    omega = angular_sweep(args.f_min, args.f_max, args.n_points, descending=args.descending)
    logger.debug(f"Sweep: {len(omega)} points, {args.f_min:g} - {args.f_max:g} Hz")
    return omega


def run_simulation(
    circuit: Circuit,
    omega: NDArray[np.float64],
    args: argparse.Namespace
) -> SweepResult:
    """
    Evaluate the circuit and report the spectrum.

    Failed points are logged as warnings; the remaining points are still
    reported and written.
    """
    result = circuit.evaluate(omega, workers=args.workers)

    logger.info("")
    logger.info(f"{'f [Hz]':>12s} {'Re Z [Ohm]':>14s} {'Im Z [Ohm]':>14s}")
    for f, value in zip(result.frequencies, result):
        if isinstance(value, Exception):
            logger.info(f"{f:12.4e} {'-':>14s} {'-':>14s}")
        else:
            logger.info(f"{f:12.4e} {value.real:14.6e} {value.imag:14.6e}")

    if not result.ok:
        logger.warning(f"{len(result.errors)} of {len(result)} point(s) could not be evaluated")
        for err in result.errors.values():
            logger.warning(f"  [{err.index}] {err}")

    if args.output:
        write_spectrum(args.output, result)
    return result


def write_spectrum(path: str, result: SweepResult) -> None:
    """Write a sweep result as CSV (failed points as NaN with valid = 0)."""
    table = np.column_stack([
        result.omega,
        result.frequencies,
        result.Z.real,
        result.Z.imag,
        result.valid.astype(float),
    ])
    np.savetxt(path, table, delimiter=',', header=CSV_HEADER, comments='',
               fmt=['%.10e', '%.10e', '%.10e', '%.10e', '%d'])
    logger.info(f"Saved: {path}")


def run_fit(
    circuit: Circuit,
    omega: NDArray[np.float64],
    args: argparse.Namespace
) -> Optional[FitResult]:
    """
    Fit the circuit to a noisy synthetic copy of its own spectrum.

    The circuit's parameters are the ground truth; the fit starts from
    them scaled by (1 + perturb), except for parameters held fixed.
    """
    if not args.fit:
        return None

    log_separator()
    logger.info(f"Fitting to synthetic data ({args.noise * 100:.3g}% noise, "
                f"{args.weighting} weighting)")
    log_separator()

    truth = circuit.get_all_params()
    Z_data = generate_synthetic_spectrum(circuit, omega, noise=args.noise, seed=args.seed)

    fixed = set(args.fix)
    start = [value if label in fixed else value * (1 + args.perturb)
             for label, value in zip(circuit.get_param_labels(), truth)]

    result, _ = fit_circuit(circuit, omega, Z_data, weighting=args.weighting,
                            fixed=fixed, initial_guess=start)
    log_fit_results(result)

    logger.info("")
    logger.info("  Recovered vs true:")
    for label, true_value, fitted in zip(result.param_labels, truth, result.params_opt):
        deviation = (fitted - true_value) / true_value * 100 if true_value else np.nan
        logger.info(f"    {label:12s} {fitted:.4e} (true {true_value:.4e}, {deviation:+.2f}%)")
    return result
