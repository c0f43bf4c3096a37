"""
Expression tree for series/parallel circuit topology.

The tree is built once from a representation string and holds element
names only; impedances are looked up per evaluation, so each element is
evaluated once per sweep and its result reused wherever the tree needs it.

Children are combined in the order they were written. Floating-point
summation order is therefore fixed by the representation and identical
between sequential and chunked evaluation.
"""
from __future__ import annotations

import numpy as np
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterator, List

from ..errors import DomainError
from ..sweep import SweepResult


class Node(ABC):
    """Abstract base class for topology nodes."""

    @abstractmethod
    def leaves(self) -> Iterator[str]:
        """Yield element names in traversal order."""
        pass

    @abstractmethod
    def combine(self, leaf_results: Dict[str, SweepResult]) -> SweepResult:
        """
        Combine per-element results into the impedance of this node.

        Parameters
        ----------
        leaf_results : dict of str -> SweepResult
            Result of every element referenced below this node, all over
            the same sweep

        Returns
        -------
        result : SweepResult
            Combined impedance; a point fails if any contributing element
            failed there or the combination itself is undefined
        """
        pass

    @abstractmethod
    def render(self, leaf_text: Callable[[str], str] = str) -> str:
        """Representation string, with ``leaf_text`` formatting each leaf."""
        pass

    def __str__(self) -> str:
        return self.render()


class Leaf(Node):
    """Reference to one element by name."""

    def __init__(self, name: str):
        self.name = name

    def leaves(self) -> Iterator[str]:
        yield self.name

    def combine(self, leaf_results: Dict[str, SweepResult]) -> SweepResult:
        return leaf_results[self.name]

    def render(self, leaf_text: Callable[[str], str] = str) -> str:
        return leaf_text(self.name)

    def __repr__(self) -> str:
        return f"Leaf({self.name!r})"


class CompositeNode(Node):
    """
    Abstract base class for composite nodes (Series and Parallel).

    Attributes
    ----------
    children : list of Node
        Sub-trees in the order they appear in the representation
    """

    symbol = ''

    def __init__(self, children: List[Node]):
        self.children = list(children)

    def leaves(self) -> Iterator[str]:
        for child in self.children:
            yield from child.leaves()

    def _child_results(self, leaf_results: Dict[str, SweepResult]):
        """Combine children and merge their point errors (first one wins)."""
        results = [child.combine(leaf_results) for child in self.children]
        errors: Dict[int, DomainError] = {}
        for result in results:
            for i, err in result.errors.items():
                errors.setdefault(i, err)
        return results, errors

    @staticmethod
    def _finish(omega, Z, errors) -> SweepResult:
        errors = dict(sorted(errors.items()))
        if errors:
            Z[list(errors)] = complex(np.nan, np.nan)
        return SweepResult(omega, Z, errors)

    def render(self, leaf_text: Callable[[str], str] = str) -> str:
        parts = []
        for child in self.children:
            text = child.render(leaf_text)
            parts.append(f"({text})" if isinstance(child, CompositeNode) else text)
        return f' {self.symbol} '.join(parts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.children!r})"


class Series(CompositeNode):
    """
    Series connection.

    Z_total = Z1 + Z2 + ... + Zn
    """

    symbol = '-'

    def combine(self, leaf_results: Dict[str, SweepResult]) -> SweepResult:
        results, errors = self._child_results(leaf_results)
        omega = results[0].omega
        Z_total = np.zeros_like(omega, dtype=complex)
        for result in results:
            Z_total += result.Z
        return self._finish(omega, Z_total, errors)


class Parallel(CompositeNode):
    """
    Parallel connection.

    1/Z_total = 1/Z1 + 1/Z2 + ... + 1/Zn

    A branch with Z = 0 shorts the group (Z_total = 0). Admittances summing
    to exactly zero (ideal L-C resonance) leave Z_total undefined and fail
    that point.
    """

    symbol = '|'

    def combine(self, leaf_results: Dict[str, SweepResult]) -> SweepResult:
        results, errors = self._child_results(leaf_results)
        omega = results[0].omega
        Y_total = np.zeros_like(omega, dtype=complex)  # admittance
        shorted = np.zeros(omega.shape, dtype=bool)

        with np.errstate(divide='ignore', invalid='ignore'):
            for result in results:
                shorted |= result.Z == 0
                Y_total += 1 / result.Z
            Z_total = 1 / Y_total

        Z_total[shorted] = 0
        for i in np.flatnonzero((Y_total == 0) & ~shorted):
            if int(i) not in errors:
                errors[int(i)] = DomainError(
                    f"parallel group ({self}) has zero total admittance at w = {omega[i]}",
                    omega=float(omega[i]), index=int(i), source=f"({self})"
                )
        return self._finish(omega, Z_total, errors)


__all__ = ['Node', 'Leaf', 'CompositeNode', 'Series', 'Parallel']
