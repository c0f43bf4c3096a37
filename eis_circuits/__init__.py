"""
EIS Circuit Toolkit
===================

Impedance of equivalent-circuit elements for electrochemical impedance
spectroscopy (EIS) and of networks built from them.

Modules:
- elements: impedance formulas, element kinds, Element
- circuit: representation parser, topology tree, Circuit
- fitting: least-squares fit of a Circuit to a measured spectrum
- io: sweep generation and synthetic spectra

Version is imported from eis_circuits.version (single source of truth).
"""

# Import version from single source of truth
from .version import __version__, __version_info__, get_version_string

# Errors
from .errors import (
    CircuitError,
    InvalidParameterCount,
    DomainError,
    DuplicateName,
    NotFound,
    InvalidRepresentation,
    OwnershipError,
    FitError,
)

# Elements
from .elements import (
    Element,
    ElementKind,
    resistance,
    capacitance,
    inductance,
    warburg,
    finite_length_warburg,
    finite_space_warburg,
)

# Circuits
from .sweep import SweepResult
from .circuit import Circuit, parse_representation

# Fitting
from .fitting import fit_circuit, FitResult

# I/O
from .io import angular_sweep, generate_synthetic_spectrum

__all__ = [
    # Version info
    '__version__',
    '__version_info__',
    'get_version_string',
    # Errors
    'CircuitError',
    'InvalidParameterCount',
    'DomainError',
    'DuplicateName',
    'NotFound',
    'InvalidRepresentation',
    'OwnershipError',
    'FitError',
    # Elements
    'Element',
    'ElementKind',
    'resistance',
    'capacitance',
    'inductance',
    'warburg',
    'finite_length_warburg',
    'finite_space_warburg',
    # Circuits
    'SweepResult',
    'Circuit',
    'parse_representation',
    # Fitting
    'fit_circuit',
    'FitResult',
    # I/O
    'angular_sweep',
    'generate_synthetic_spectrum',
]
