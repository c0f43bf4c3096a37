"""
Parser for circuit representation strings.

Grammar
-------
    expr      := series
    series    := parallel (('-' | '+') parallel)*
    parallel  := atom (('|' | '//') atom)*
    atom      := '(' expr ')' | leaf
    leaf      := NAME ['=' KIND ['(' [NUMBER (',' NUMBER)*] ')']]

Parallel binds tighter than series, so ``A - B | C`` means ``A - (B | C)``.
A bare NAME refers to an element declared elsewhere; ``NAME=KIND(p, ...)``
declares it inline (empty or missing parentheses give zero parameters).
Each name may appear only once: one leaf is one piece of hardware.

Examples
--------
    R0 - (R1 | C1)
    Rs=R(10) - (Rct=R(100) - Wd=Wfl(50, 0.5)) | Cdl=C(2e-5)
    (E1 + E2) // E3
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..elements.kinds import ElementKind
from ..errors import InvalidParameterCount, InvalidRepresentation
from .topology import Leaf, Node, Parallel, Series

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"""
    (?P<number>(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>//|[-+|()=,])
  | (?P<space>\s+)
""", re.VERBOSE)

SERIES_OPS = ('-', '+')
PARALLEL_OPS = ('|', '//')


@dataclass
class Token:
    type: str
    text: str
    pos: int


@dataclass
class Declaration:
    """Inline element declaration found in a representation."""
    name: str
    kind: ElementKind
    parameters: Optional[Tuple[float, ...]]
    pos: int


@dataclass
class ParsedRepresentation:
    """
    Result of parsing a representation string.

    Attributes
    ----------
    tree : Node
        Topology expression tree
    leaf_names : list of str
        Element names in traversal order (each exactly once)
    declarations : dict of str -> Declaration
        Inline declarations, keyed by element name
    positions : dict of str -> int
        Character offset of every leaf, for error messages
    """
    tree: Node
    leaf_names: List[str]
    declarations: Dict[str, Declaration] = field(default_factory=dict)
    positions: Dict[str, int] = field(default_factory=dict)


def tokenize(text: str) -> List[Token]:
    """Split a representation into tokens, dropping whitespace."""
    tokens = []
    pos = 0
    while pos < len(text):
        match = TOKEN_PATTERN.match(text, pos)
        if match is None:
            raise InvalidRepresentation(f"Unexpected character {text[pos]!r}", text, pos)
        if match.lastgroup != 'space':
            tokens.append(Token(match.lastgroup, match.group(), pos))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.positions: Dict[str, int] = {}
        self.declarations: Dict[str, Declaration] = {}

    # Token helpers

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _at_op(self, *ops: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.type == 'op' and tok.text in ops

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _error(self, message: str, tok: Optional[Token] = None) -> InvalidRepresentation:
        if tok is None:
            tok = self._peek()
        pos = tok.pos if tok is not None else len(self.text)
        return InvalidRepresentation(message, self.text, pos)

    def _expect_op(self, op: str) -> Token:
        if not self._at_op(op):
            tok = self._peek()
            found = f"'{tok.text}'" if tok else "end of input"
            raise self._error(f"Expected '{op}', found {found}")
        return self._advance()

    # Grammar

    def parse(self) -> ParsedRepresentation:
        if not self.tokens:
            raise InvalidRepresentation("Empty circuit representation", self.text, 0)
        tree = self._series()
        if self._peek() is not None:
            raise self._error(f"Unexpected '{self._peek().text}' after complete expression")
        return ParsedRepresentation(
            tree=tree,
            leaf_names=list(tree.leaves()),
            declarations=self.declarations,
            positions=self.positions,
        )

    def _series(self) -> Node:
        nodes = [self._parallel()]
        while self._at_op(*SERIES_OPS):
            self._advance()
            nodes.append(self._parallel())
        return nodes[0] if len(nodes) == 1 else Series(nodes)

    def _parallel(self) -> Node:
        nodes = [self._atom()]
        while self._at_op(*PARALLEL_OPS):
            self._advance()
            nodes.append(self._atom())
        return nodes[0] if len(nodes) == 1 else Parallel(nodes)

    def _atom(self) -> Node:
        tok = self._peek()
        if tok is None:
            raise self._error("Unexpected end of input, expected element name or '('")
        if tok.type == 'op' and tok.text == '(':
            self._advance()
            node = self._series()
            self._expect_op(')')
            return node
        if tok.type == 'name':
            return self._leaf()
        raise self._error(f"Expected element name or '(', found '{tok.text}'")

    def _leaf(self) -> Leaf:
        tok = self._advance()
        name = tok.text
        if name in self.positions:
            raise self._error(f"Element '{name}' appears more than once "
                              "(one leaf per element)", tok)
        self.positions[name] = tok.pos

        if self._at_op('='):
            self._advance()
            self.declarations[name] = self._declaration(name, tok.pos)
        return Leaf(name)

    def _declaration(self, name: str, pos: int) -> Declaration:
        kind_tok = self._peek()
        if kind_tok is None or kind_tok.type != 'name':
            raise self._error(f"Expected element kind after '{name}='")
        self._advance()
        try:
            kind = ElementKind.parse(kind_tok.text)
        except ValueError as e:
            raise self._error(str(e), kind_tok) from e

        params = None
        if self._at_op('('):
            open_tok = self._advance()
            values = []
            if not self._at_op(')'):
                values.append(self._number())
                while self._at_op(','):
                    self._advance()
                    values.append(self._number())
            self._expect_op(')')
            if values:
                if len(values) != kind.arity:
                    cause = InvalidParameterCount(kind, kind.arity, len(values), name)
                    raise self._error(str(cause), open_tok) from cause
                params = tuple(values)
        return Declaration(name, kind, params, pos)

    def _number(self) -> float:
        sign = 1.0
        if self._at_op('-', '+'):
            sign = -1.0 if self._advance().text == '-' else 1.0
        tok = self._peek()
        if tok is None or tok.type != 'number':
            raise self._error("Expected a number")
        self._advance()
        return sign * float(tok.text)


def parse_representation(text: str) -> ParsedRepresentation:
    """
    Parse a representation string into a topology tree.

    Parameters
    ----------
    text : str
        Circuit representation, e.g. "R0 - (R1=R(100) | C1=C(1e-6))"

    Returns
    -------
    parsed : ParsedRepresentation
        Tree, leaf order and inline declarations

    Raises
    ------
    InvalidRepresentation
        On syntax errors, unknown kinds, wrong inline parameter counts or
        repeated element names. Whether bare names are declared is checked
        by the circuit, which owns the element registry.
    """
    if not isinstance(text, str):
        raise InvalidRepresentation(f"Representation must be a string, got {type(text).__name__}")
    parsed = _Parser(text).parse()
    logger.debug(f"Parsed '{text}' -> {parsed.tree} ({len(parsed.leaf_names)} leaves)")
    return parsed


__all__ = [
    'parse_representation',
    'ParsedRepresentation',
    'Declaration',
    'tokenize',
]
