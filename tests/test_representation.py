#!/usr/bin/env python3
"""Test the circuit representation parser."""

import pytest
from eis_circuits import ElementKind, InvalidParameterCount, InvalidRepresentation
from eis_circuits.circuit import Leaf, Parallel, Series, parse_representation


def test_single_leaf():
    parsed = parse_representation('R0')
    assert isinstance(parsed.tree, Leaf)
    assert parsed.leaf_names == ['R0']
    assert parsed.declarations == {}


@pytest.mark.parametrize("text", ['R0 - R1 - R2', 'R0+R1+R2', 'R0 - R1 + R2'])
def test_series_operators(text):
    parsed = parse_representation(text)
    assert isinstance(parsed.tree, Series)
    assert len(parsed.tree.children) == 3
    assert parsed.leaf_names == ['R0', 'R1', 'R2']


@pytest.mark.parametrize("text", ['R1 | C1', 'R1//C1'])
def test_parallel_operators(text):
    parsed = parse_representation(text)
    assert isinstance(parsed.tree, Parallel)
    assert parsed.leaf_names == ['R1', 'C1']


def test_parallel_binds_tighter_than_series():
    tree = parse_representation('A - B | C').tree
    assert isinstance(tree, Series)
    assert isinstance(tree.children[0], Leaf)
    assert isinstance(tree.children[1], Parallel)
    assert str(tree) == 'A - (B | C)'


def test_parentheses_override_precedence():
    tree = parse_representation('(A - B) | C').tree
    assert isinstance(tree, Parallel)
    assert isinstance(tree.children[0], Series)


def test_nested_groups_are_kept():
    tree = parse_representation('((A - B) - C)').tree
    assert isinstance(tree, Series)
    assert isinstance(tree.children[0], Series), "Nested series groups are not flattened"


def test_leaf_order_follows_text():
    parsed = parse_representation('Rs - (Rct - Wd) | Cdl')
    assert parsed.leaf_names == ['Rs', 'Rct', 'Wd', 'Cdl']


def test_inline_declarations():
    parsed = parse_representation('Rs=R(10) - (Wd=Wfl(50, 0.5) | Cdl=C(2e-5)) - L1=L')
    decls = parsed.declarations
    assert decls['Rs'].kind is ElementKind.RESISTOR
    assert decls['Rs'].parameters == (10.0,)
    assert decls['Wd'].kind is ElementKind.FINITE_LENGTH_WARBURG
    assert decls['Wd'].parameters == (50.0, 0.5)
    assert decls['Cdl'].parameters == (2e-5,)
    assert decls['L1'].parameters is None, "Declaration without values uses defaults"


def test_signed_and_scientific_numbers():
    parsed = parse_representation('X=Wfs(-1.5e+2, .25)')
    assert parsed.declarations['X'].parameters == (-150.0, 0.25)


def test_render_round_trip():
    text = 'Rs - ((Rct - Wd) | Cdl) - (L1 | R2)'
    tree = parse_representation(text).tree
    again = parse_representation(str(tree)).tree
    assert str(again) == str(tree)


# =============================================================================
# Errors
# =============================================================================

@pytest.mark.parametrize("text", [
    '',
    '   ',
    'R0 -',
    '(R0 - R1',
    'R0 - R1)',
    'R0 R1',
    '| R0',
    'R0 - ()',
    'R0 & R1',
    'R0=',
    'R0=R(1,',
])
def test_syntax_errors(text):
    with pytest.raises(InvalidRepresentation):
        parse_representation(text)


def test_error_reports_position():
    with pytest.raises(InvalidRepresentation) as excinfo:
        parse_representation('R0 - R1 & R2')
    assert excinfo.value.position == 8
    assert '^' in str(excinfo.value)


def test_repeated_name_rejected():
    with pytest.raises(InvalidRepresentation, match="more than once"):
        parse_representation('R1 - (R2 | R1)')


def test_unknown_kind_rejected():
    with pytest.raises(InvalidRepresentation, match="Unknown element kind"):
        parse_representation('Q1=CPE(1, 0.9)')


def test_wrong_inline_parameter_count():
    with pytest.raises(InvalidRepresentation) as excinfo:
        parse_representation('R1=R(1, 2)')
    assert isinstance(excinfo.value.__cause__, InvalidParameterCount)


def test_non_string_rejected():
    with pytest.raises(InvalidRepresentation):
        parse_representation(None)
