"""
Circuit elements for EIS simulation.

Modules
-------
- formulas.py: closed-form impedance functions (scalar and vectorized)
- kinds.py: ElementKind enum and the kind -> formula dispatch table
- element.py: Element, a named parameter vector bound to its formula
"""

from .formulas import (
    resistance,
    capacitance,
    inductance,
    warburg,
    finite_length_warburg,
    finite_space_warburg,
)
from .kinds import ElementKind, ElementSpec, ELEMENT_SPECS
from .element import Element

__all__ = [
    'resistance',
    'capacitance',
    'inductance',
    'warburg',
    'finite_length_warburg',
    'finite_space_warburg',
    'ElementKind',
    'ElementSpec',
    'ELEMENT_SPECS',
    'Element',
]
