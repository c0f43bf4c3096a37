"""
Circuit: an element registry plus the topology that combines it.

Usage:
    from eis_circuits import Circuit, Element

    randles = Circuit('randles', 'Rs=R(10) - (Rct=R(100) - W1=W(50)) | Cdl=C(2e-5)')
    result = randles.evaluate(omega)          # SweepResult
    Z = randles.impedance(omega)              # ndarray, raises on bad points

    # Pre-declared elements, referenced by name
    c = Circuit('rc', '(E1 + E2)', elements=[Element('E1', 'R', [100]),
                                             Element('E2', 'C', [1e-6])])

Registry order (which is also the fitting parameter order) is: elements in
the order the representation references them, then elements that are
registered but not wired in, in the order they arrived.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray, ArrayLike

from ..config import MIN_CHUNK_SIZE
from ..elements import Element, ElementKind
from ..errors import (
    DomainError,
    DuplicateName,
    InvalidParameterCount,
    InvalidRepresentation,
    NotFound,
    OwnershipError,
)
from ..sweep import SweepResult, as_sweep
from .parser import ParsedRepresentation, parse_representation
from .topology import Node

logger = logging.getLogger(__name__)


class Circuit:
    """
    Equivalent circuit built from a representation string.

    Parameters
    ----------
    name : str
        Circuit identifier
    representation : str
        Topology in the grammar of ``eis_circuits.circuit.parser``
    elements : iterable of Element, optional
        Elements referenced by bare name in the representation. Elements
        listed here but absent from the representation stay registered
        and are ignored by evaluation.

    Raises
    ------
    InvalidRepresentation
        Malformed representation, undeclared or doubly declared element
    DuplicateName
        Two pre-declared elements share a name
    OwnershipError
        A pre-declared element already belongs to another circuit
    """

    def __init__(self, name: str, representation: str,
                 elements: Optional[Iterable[Element]] = None):
        self.name = str(name)
        self._lock = threading.RLock()

        declared: Dict[str, Element] = {}
        for element in elements or ():
            if not isinstance(element, Element):
                raise TypeError(f"Expected Element, got {type(element).__name__}")
            if element.name in declared:
                raise DuplicateName(f"Element '{element.name}' declared twice in circuit '{self.name}'")
            if element._owner is not None:
                raise OwnershipError(f"Element '{element.name}' already belongs to another circuit")
            declared[element.name] = element

        parsed, created = self._resolve(representation, declared)

        self._elements: Dict[str, Element] = {}
        for leaf in parsed.leaf_names:
            self._elements[leaf] = created.get(leaf) or declared[leaf]
        for element_name, element in declared.items():
            self._elements.setdefault(element_name, element)
        for element in self._elements.values():
            element._owner = self

        self._representation = representation
        self._tree: Node = parsed.tree
        self._leaf_names: List[str] = parsed.leaf_names

        logger.debug(f"Circuit '{self.name}': {self._tree} "
                     f"({len(self._leaf_names)} wired, {len(self._elements)} registered)")

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve(representation: str, available: Dict[str, Element]
                 ) -> Tuple[ParsedRepresentation, Dict[str, Element]]:
        """
        Parse a representation and check every leaf against the registry.

        Returns the parse result and the elements declared inline. Nothing
        is registered here, so a failure leaves the caller untouched.
        """
        parsed = parse_representation(representation)
        created: Dict[str, Element] = {}
        for leaf in parsed.leaf_names:
            declaration = parsed.declarations.get(leaf)
            if declaration is not None:
                if leaf in available:
                    raise InvalidRepresentation(
                        f"Element '{leaf}' is declared inline but already exists",
                        representation, declaration.pos)
                created[leaf] = Element(leaf, declaration.kind, declaration.parameters)
            elif leaf not in available:
                raise InvalidRepresentation(
                    f"Element '{leaf}' is referenced but not declared",
                    representation, parsed.positions[leaf])
        return parsed, created

    @property
    def representation(self) -> str:
        """Representation string the current topology was built from."""
        return self._representation

    @property
    def topology(self) -> Node:
        return self._tree

    def set_representation(self, representation: str) -> None:
        """
        Rewire the circuit with a new representation.

        Bare names resolve against the registered elements; inline
        declarations register new ones. On failure nothing changes.

        Raises
        ------
        InvalidRepresentation
            As for construction
        """
        with self._lock:
            parsed, created = self._resolve(representation, self._elements)
            reordered = {leaf: created.get(leaf) or self._elements[leaf]
                         for leaf in parsed.leaf_names}
            for element_name, element in self._elements.items():
                reordered.setdefault(element_name, element)
            for element in created.values():
                element._owner = self

            self._elements = reordered
            self._representation = representation
            self._tree = parsed.tree
            self._leaf_names = parsed.leaf_names
        logger.debug(f"Circuit '{self.name}' rewired: {self._tree}")

    def to_representation(self, inline: bool = True) -> str:
        """
        Canonical representation of the current topology.

        Parameters
        ----------
        inline : bool
            Write every leaf as an inline declaration with its current
            parameters, so the string rebuilds the circuit on its own
        """
        if not inline:
            return self._tree.render()
        return self._tree.render(lambda leaf: self._elements[leaf].declaration())

    # ------------------------------------------------------------------
    # Element registry
    # ------------------------------------------------------------------

    @property
    def elements(self) -> List[Element]:
        """Registered elements in registry order."""
        return list(self._elements.values())

    @property
    def wired_elements(self) -> List[Element]:
        """Elements referenced by the topology, in traversal order."""
        with self._lock:
            return [self._elements[leaf] for leaf in self._leaf_names]

    def add_element(self, name: str, kind: Union[ElementKind, str],
                    parameters: Optional[Sequence[float]] = None) -> Element:
        """
        Register a new element (not wired until referenced by a representation).

        Raises
        ------
        DuplicateName
            If ``name`` is already registered
        InvalidParameterCount
            If ``parameters`` does not match the kind's arity
        """
        with self._lock:
            if name in self._elements:
                raise DuplicateName(f"Element '{name}' already exists in circuit '{self.name}'")
            element = Element(name, kind, parameters)
            element._owner = self
            self._elements[name] = element
        logger.debug(f"Circuit '{self.name}': added {element!r}")
        return element

    def remove_element(self, name: str) -> Element:
        """
        Unregister an element and release it.

        Raises
        ------
        NotFound
            If ``name`` is not registered
        InvalidRepresentation
            If the topology still references the element
        """
        with self._lock:
            if name not in self._elements:
                raise NotFound(f"No element '{name}' in circuit '{self.name}'")
            if name in self._leaf_names:
                raise InvalidRepresentation(
                    f"Element '{name}' is still referenced by '{self._representation}'; "
                    "rewire the circuit before removing it")
            element = self._elements.pop(name)
            element._owner = None
        logger.debug(f"Circuit '{self.name}': removed '{name}'")
        return element

    def get_element(self, name: str) -> Element:
        """
        Raises
        ------
        NotFound
            If ``name`` is not registered
        """
        try:
            return self._elements[name]
        except KeyError:
            raise NotFound(f"No element '{name}' in circuit '{self.name}'") from None

    __getitem__ = get_element

    def __contains__(self, name: str) -> bool:
        return name in self._elements

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self._elements)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def _snapshot(self):
        """Freeze topology, elements and their parameters for one evaluation."""
        with self._lock:
            tree = self._tree
            wired = [self._elements[leaf] for leaf in self._leaf_names]
        return tree, [(element, element.parameters) for element in wired]

    @staticmethod
    def _evaluate_chunk(tree: Node, wired, omega: NDArray[np.float64]) -> SweepResult:
        leaf_results = {element.name: element.evaluate_with(params, omega)
                        for element, params in wired}
        return tree.combine(leaf_results)

    def evaluate(self, omega: ArrayLike, workers: Optional[int] = None) -> SweepResult:
        """
        Combined impedance over a sweep, reporting failures per point.

        Parameters
        ----------
        omega : array_like of float
            Angular frequencies [rad/s]
        workers : int, optional
            Evaluate contiguous chunks of the sweep on this many threads.
            Results equal sequential evaluation; chunks shorter than
            MIN_CHUNK_SIZE are not split further.

        Returns
        -------
        result : SweepResult
            ``result.Z[i]`` is the network impedance at ``omega[i]``
        """
        omega = as_sweep(omega)
        tree, wired = self._snapshot()

        n_chunks = 1
        if workers is not None and workers > 1:
            n_chunks = min(workers, max(1, len(omega) // MIN_CHUNK_SIZE))
        if n_chunks == 1:
            return self._evaluate_chunk(tree, wired, omega)

        bounds = np.linspace(0, len(omega), n_chunks + 1).astype(int)
        with ThreadPoolExecutor(max_workers=n_chunks) as pool:
            futures = [pool.submit(self._evaluate_chunk, tree, wired, omega[lo:hi])
                       for lo, hi in zip(bounds[:-1], bounds[1:])]
            parts = [future.result() for future in futures]

        Z = np.concatenate([part.Z for part in parts])
        errors: Dict[int, DomainError] = {}
        for offset, part in zip(bounds[:-1], parts):
            for i, err in part.errors.items():
                errors[int(offset) + i] = err.at(int(offset) + i)
        logger.debug(f"Circuit '{self.name}': {len(omega)} points on {n_chunks} threads")
        return SweepResult(omega, Z, errors)

    def impedance(self, omega: ArrayLike,
                  params: Optional[Sequence[float]] = None) -> NDArray[np.complex128]:
        """
        Vectorized network impedance for fitting loops.

        Parameters
        ----------
        omega : array_like of float
            Angular frequencies [rad/s]
        params : sequence of float, optional
            Flat parameter vector in ``get_all_params()`` order, used
            instead of the stored parameters

        Raises
        ------
        DomainError
            If any point cannot be evaluated
        InvalidParameterCount
            If ``params`` has the wrong total length
        """
        omega = as_sweep(omega)
        tree, wired = self._snapshot()
        if params is not None:
            wired = list(zip([element for element, _ in wired], self._split_params(params, wired)))

        leaf_results = {element.name: SweepResult(omega, element.impedance(omega, p))
                        for element, p in wired}
        return tree.combine(leaf_results).unwrap()

    # ------------------------------------------------------------------
    # Parameter vector (fitting interface)
    # ------------------------------------------------------------------

    def _split_params(self, params: Sequence[float], wired) -> List[Tuple[float, ...]]:
        params = [float(p) for p in params]
        expected = sum(element.arity for element, _ in wired)
        if len(params) != expected:
            raise InvalidParameterCount('circuit', expected, len(params), self.name)
        chunks, idx = [], 0
        for element, _ in wired:
            chunks.append(tuple(params[idx:idx + element.arity]))
            idx += element.arity
        return chunks

    def get_all_params(self) -> List[float]:
        """Flat parameter vector of the wired elements, in traversal order."""
        params = []
        for element in self.wired_elements:
            params.extend(element.parameters)
        return params

    def get_param_labels(self) -> List[str]:
        """Labels matching ``get_all_params()``, e.g. ['R1.r', 'Wd.tau']."""
        return [f"{element.name}.{label}"
                for element in self.wired_elements
                for label in element.param_labels]

    def update_params(self, params: Sequence[float]) -> int:
        """
        Write a flat parameter vector back into the wired elements.

        Returns
        -------
        n_consumed : int
            Number of parameters written

        Raises
        ------
        InvalidParameterCount
            If ``params`` has the wrong total length; nothing is written
        """
        wired = [(element, None) for element in self.wired_elements]
        chunks = self._split_params(params, wired)
        for (element, _), chunk in zip(wired, chunks):
            element.set_parameters(chunk)
        return sum(len(chunk) for chunk in chunks)

    def __repr__(self) -> str:
        return f"Circuit({self.name!r}, {self.to_representation()!r})"


__all__ = ['Circuit']
