"""
Named circuit element bound to its impedance formula.

An Element owns a kind (fixed at construction), a name and a parameter
vector whose length always equals the kind's arity. The formula is looked
up once in the dispatch table when the element is built, for every kind.

Usage:
    from eis_circuits.elements import Element, ElementKind

    r = Element('R1', ElementKind.RESISTOR, [100.0])
    wfl = Element('Wd', 'Wfl', [50.0, 0.5])

    result = wfl.evaluate(omega)      # SweepResult, per-point errors
    Z = wfl.impedance(omega)          # ndarray, raises on any bad point
"""

import logging
import re
import threading
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray, ArrayLike

from ..errors import DomainError, InvalidParameterCount
from ..sweep import SweepResult, as_sweep
from .formulas import angular_domain_mask
from .kinds import ElementKind, ElementSpec

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')


def validate_name(name: str) -> str:
    """
    Check that ``name`` can be referenced from a representation string.

    Raises
    ------
    ValueError
        If the name is empty or not an identifier
    """
    if not isinstance(name, str) or not NAME_PATTERN.fullmatch(name):
        raise ValueError(f"Invalid element name {name!r}: expected a letter or '_' "
                         "followed by letters, digits or '_'")
    return name


class Element:
    """
    Circuit element of a given kind.

    Parameters
    ----------
    name : str
        Identifier, unique within the owning circuit
    kind : ElementKind or str
        Element kind (enum member, code such as 'Wfl', or name)
    parameters : sequence of float, optional
        Initial parameters; defaults to zeros of the kind's arity

    Raises
    ------
    InvalidParameterCount
        If ``parameters`` does not match the kind's arity
    ValueError
        If the name or kind is invalid

    Notes
    -----
    Parameter updates and the snapshot taken at the start of an evaluation
    are serialized by a per-element lock, so an evaluation in flight always
    uses one consistent vector.
    """

    def __init__(self, name: str, kind: Union[ElementKind, str],
                 parameters: Optional[Sequence[float]] = None):
        self._name = validate_name(name)
        self._kind = ElementKind.parse(kind)
        self._spec: ElementSpec = self._kind.spec
        self._lock = threading.Lock()
        self._owner = None
        if parameters is None:
            self._params: Tuple[float, ...] = (0.0,) * self.arity
        else:
            self._params = self._checked(parameters)

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> ElementKind:
        return self._kind

    @property
    def arity(self) -> int:
        return len(self._spec.labels)

    @property
    def param_labels(self) -> List[str]:
        """Parameter labels, e.g. ['r', 'tau']."""
        return list(self._spec.labels)

    @property
    def parameters(self) -> Tuple[float, ...]:
        with self._lock:
            return self._params

    @parameters.setter
    def parameters(self, values: Sequence[float]) -> None:
        self.set_parameters(values)

    def _checked(self, values: Iterable[float]) -> Tuple[float, ...]:
        values = tuple(float(v) for v in values)
        if len(values) != self.arity:
            raise InvalidParameterCount(self._kind, self.arity, len(values), self._name)
        return values

    def set_parameters(self, values: Sequence[float]) -> None:
        """
        Replace the parameter vector.

        Raises
        ------
        InvalidParameterCount
            If ``len(values)`` differs from the arity; the old vector is kept
        """
        new = self._checked(values)
        with self._lock:
            self._params = new

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, omega: ArrayLike) -> SweepResult:
        """
        Impedance over a sweep, reporting failures per point.

        Parameters
        ----------
        omega : array_like of float
            Angular frequencies [rad/s]

        Returns
        -------
        result : SweepResult
            ``result.Z[i]`` belongs to ``omega[i]``; points outside the
            formula domain are listed in ``result.errors``
        """
        return self.evaluate_with(self.parameters, as_sweep(omega))

    def evaluate_with(self, params: Sequence[float],
                      omega: NDArray[np.float64]) -> SweepResult:
        """Evaluate a prepared 1-D sweep with an explicit parameter snapshot."""
        Z = np.full(omega.shape, complex(np.nan, np.nan))
        errors = {}

        valid = angular_domain_mask(omega, self._spec.defined_at_zero)
        for i in np.flatnonzero(~valid):
            errors[int(i)] = DomainError(
                f"element '{self._name}' ({self._kind}) is undefined at w = {omega[i]}",
                omega=float(omega[i]), index=int(i), source=self._name
            )

        if valid.any():
            try:
                Z[valid] = self._spec.impedance(params, omega[valid])
            except DomainError as e:
                for i in np.flatnonzero(valid):
                    errors[int(i)] = DomainError(
                        f"element '{self._name}': {e}",
                        omega=float(omega[i]), index=int(i), source=self._name
                    )

        return SweepResult(omega, Z, dict(sorted(errors.items())))

    def impedance(self, omega: ArrayLike,
                  params: Optional[Sequence[float]] = None) -> NDArray[np.complex128]:
        """
        Vectorized impedance for fitting loops.

        Parameters
        ----------
        omega : array_like of float
            Angular frequencies [rad/s]
        params : sequence of float, optional
            Parameters to use instead of the stored ones

        Raises
        ------
        DomainError
            If any point is outside the formula domain
        InvalidParameterCount
            If ``params`` has the wrong length
        """
        params = self.parameters if params is None else self._checked(params)
        try:
            return self._spec.impedance(params, as_sweep(omega))
        except DomainError as e:
            raise DomainError(f"element '{self._name}': {e}", omega=e.omega,
                              index=e.index, source=self._name) from e

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------

    def declaration(self) -> str:
        """Inline declaration accepted by the representation grammar."""
        values = ', '.join(repr(p) for p in self.parameters)
        return f"{self._name}={self._kind.value}({values})"

    def __repr__(self) -> str:
        return f"Element({self._name!r}, {self._kind.value!r}, {list(self.parameters)})"


__all__ = ['Element', 'validate_name', 'NAME_PATTERN']
