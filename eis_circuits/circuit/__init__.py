"""
Circuit topology and evaluation.

Modules
-------
- parser.py: representation grammar -> expression tree
- topology.py: Leaf, Series and Parallel nodes
- circuit.py: Circuit, the element registry that evaluates the tree
"""

from .topology import Node, Leaf, Series, Parallel
from .parser import parse_representation, ParsedRepresentation
from .circuit import Circuit

__all__ = [
    'Node',
    'Leaf',
    'Series',
    'Parallel',
    'parse_representation',
    'ParsedRepresentation',
    'Circuit',
]
