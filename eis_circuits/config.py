"""
Configuration constants for circuit simulation and fitting.

All values are physically justified or empirically determined based on
typical EIS experiments.

References
----------
.. [1] B. Boukamp, Solid State Ionics 20 (1986) 31-44
       "A package for impedance/admittance data analysis"
.. [2] M. Orazem, B. Tribollet, "Electrochemical Impedance Spectroscopy" (2008)
       Wiley, ISBN: 978-0-470-04140-6
"""

# =============================================================================
# Frequency Sweep
# =============================================================================

DEFAULT_F_MIN = 1e-2
"""
Lowest sweep frequency [Hz] (10 mHz).

Below 10 mHz a single spectrum takes tens of minutes and the cell is
rarely stationary, so most instruments stop here.
"""

DEFAULT_F_MAX = 1e5
"""
Highest sweep frequency [Hz] (100 kHz).

Above 100 kHz cable inductance dominates most laboratory setups [2].
"""

DEFAULT_POINTS_PER_DECADE = 10
"""
Log-spaced points per frequency decade.

10 points/decade resolves a single RC arc (about 2 decades wide) with
~20 points, which is the usual instrument default.
"""

# =============================================================================
# Parallel Evaluation
# =============================================================================

MIN_CHUNK_SIZE = 256
"""
Smallest sweep chunk handed to a worker thread.

numpy releases the GIL for complex ufuncs, but per-chunk overhead dominates
for short arrays. Sweeps shorter than workers * MIN_CHUNK_SIZE are split
into fewer chunks.
"""

# =============================================================================
# Fitting
# =============================================================================

MAX_FUNCTION_EVALS = 10000
"""Maximum residual evaluations for least_squares."""

DEFAULT_WEIGHTING = 'modulus'
"""
Default residual weighting (w = 1/|Z|).

Modulus weighting gives every decade comparable influence, which is the
common choice for spectra spanning several orders of magnitude [1].
"""

FIT_QUALITY_EXCELLENT_ERROR = 1.0
"""
Threshold for excellent fit [%].

Relative error <1% indicates excellent model-data agreement.
"""

FIT_QUALITY_GOOD_ERROR = 10.0
"""
Threshold for good fit [%].

Relative error 1-10% is typical for good fits in real systems.
"""

CONDITION_NUMBER_LIMIT = 1e10
"""Condition number above which the covariance estimate is unreliable."""

# =============================================================================
# Parameter Bounds
# =============================================================================

PARAMETER_BOUNDS = {
    # Resistance: 0.1 mOhm - 10 GOhm
    'r': (1e-4, 1e10),

    # Capacitance: 1 fF - 100 mF
    'c': (1e-15, 1e-1),

    # Inductance: 1 pH - 1 H
    'l': (1e-12, 1.0),

    # Warburg coefficient: 0.01 - 100000 Ohm*s^(-1/2)
    'sigma': (1e-2, 1e5),

    # Diffusion time constant: 1 us - 10000 s
    'tau': (1e-6, 1e4),
}
"""Physically reasonable ranges keyed by parameter label."""

DEFAULT_BOUNDS = (1e-15, 1e15)
"""Fallback bounds for labels missing from PARAMETER_BOUNDS."""


__all__ = [
    'DEFAULT_F_MIN',
    'DEFAULT_F_MAX',
    'DEFAULT_POINTS_PER_DECADE',
    'MIN_CHUNK_SIZE',
    'MAX_FUNCTION_EVALS',
    'DEFAULT_WEIGHTING',
    'FIT_QUALITY_EXCELLENT_ERROR',
    'FIT_QUALITY_GOOD_ERROR',
    'CONDITION_NUMBER_LIMIT',
    'PARAMETER_BOUNDS',
    'DEFAULT_BOUNDS',
]
