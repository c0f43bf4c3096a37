"""
Element kinds and the formula dispatch table.

Each ElementKind maps to exactly one ElementSpec holding the bound formula,
the parameter labels (their count is the arity) and whether the formula is
defined at w = 0. The table is checked against the enum at import time, so
adding a kind without a formula fails loudly instead of leaving a hole.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple

from . import formulas


class ElementKind(Enum):
    """
    Enumerated element kinds, valued by their representation code.

    Codes are what the representation grammar accepts after ``=``:
    R, C, L, W, Wfl, Wfs.
    """
    RESISTOR = 'R'
    CAPACITOR = 'C'
    INDUCTOR = 'L'
    SEMI_INFINITE_WARBURG = 'W'
    FINITE_LENGTH_WARBURG = 'Wfl'
    FINITE_SPACE_WARBURG = 'Wfs'

    @classmethod
    def parse(cls, text: str) -> 'ElementKind':
        """
        Look up a kind by code (``Wfl``), enum name (``FINITE_LENGTH_WARBURG``)
        or CamelCase name (``FiniteLengthWarburg``).

        Raises
        ------
        ValueError
            If the text names no kind
        """
        if isinstance(text, cls):
            return text
        if not isinstance(text, str):
            raise ValueError(f"Element kind must be an ElementKind or str, "
                             f"got {type(text).__name__}")
        kind = _ALIASES.get(text)
        if kind is None:
            kind = _ALIASES.get(text.replace('_', '').lower())
        if kind is None:
            codes = ', '.join(k.value for k in cls)
            raise ValueError(f"Unknown element kind '{text}' (expected one of {codes})")
        return kind

    @property
    def spec(self) -> 'ElementSpec':
        return ELEMENT_SPECS[self]

    @property
    def arity(self) -> int:
        return len(ELEMENT_SPECS[self].labels)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ElementSpec:
    """
    Static description of one element kind.

    Attributes
    ----------
    formula : callable
        ``formula(*params, w)`` returning complex impedance
    labels : tuple of str
        Parameter labels in formula order
    units : tuple of str
        Parameter units, for reports
    defined_at_zero : bool
        Whether the formula is defined at w = 0
    """
    formula: Callable
    labels: Tuple[str, ...]
    units: Tuple[str, ...]
    defined_at_zero: bool

    def impedance(self, params, w):
        return self.formula(*params, w)


ELEMENT_SPECS: Dict[ElementKind, ElementSpec] = {
    ElementKind.RESISTOR: ElementSpec(
        formulas.resistance, ('r',), ('Ohm',), defined_at_zero=True),
    ElementKind.CAPACITOR: ElementSpec(
        formulas.capacitance, ('c',), ('F',), defined_at_zero=False),
    ElementKind.INDUCTOR: ElementSpec(
        formulas.inductance, ('l',), ('H',), defined_at_zero=True),
    ElementKind.SEMI_INFINITE_WARBURG: ElementSpec(
        formulas.warburg, ('sigma',), ('Ohm s^-1/2',), defined_at_zero=False),
    ElementKind.FINITE_LENGTH_WARBURG: ElementSpec(
        formulas.finite_length_warburg, ('r', 'tau'), ('Ohm', 's'), defined_at_zero=False),
    ElementKind.FINITE_SPACE_WARBURG: ElementSpec(
        formulas.finite_space_warburg, ('r', 'tau'), ('Ohm', 's'), defined_at_zero=False),
}


def _build_aliases() -> Dict[str, ElementKind]:
    aliases = {}
    for kind in ElementKind:
        aliases[kind.value] = kind
        aliases[kind.name] = kind
        aliases[kind.name.replace('_', '').lower()] = kind
    return aliases


def _verify_dispatch_table() -> None:
    missing = [k.name for k in ElementKind if k not in ELEMENT_SPECS]
    if missing:
        raise RuntimeError(f"No impedance formula bound for element kind(s): {', '.join(missing)}")


_ALIASES = _build_aliases()
_verify_dispatch_table()


__all__ = ['ElementKind', 'ElementSpec', 'ELEMENT_SPECS']
