#!/usr/bin/env python3
"""
Test Circuit construction, registry management and network evaluation.

Network impedances are compared against hand-written series/parallel
expressions of the element formulas.
"""

import numpy as np
import pytest
from eis_circuits import (
    Circuit,
    Element,
    DomainError,
    DuplicateName,
    InvalidParameterCount,
    InvalidRepresentation,
    NotFound,
    OwnershipError,
    capacitance,
    finite_length_warburg,
    resistance,
)


@pytest.fixture
def omega():
    return np.logspace(-2, 6, 41)


@pytest.fixture
def randles():
    return Circuit('randles', 'Rs=R(10) - (Rct=R(100) - Wd=Wfl(50, 0.5)) | Cdl=C(2e-5)')


# =============================================================================
# Evaluation
# =============================================================================

def test_series_rc_at_one_frequency():
    circuit = Circuit('rc', 'R0=R(100) - C0=C(1e-6)')
    Z = circuit.impedance([1000.0])
    np.testing.assert_allclose(Z, [100 - 1000j], rtol=1e-12)


def test_parallel_rc_matches_analytic(omega):
    R, C = 1000.0, 1e-6
    circuit = Circuit('rc', 'R1=R(1000) | C1=C(1e-6)')
    expected = R / (1 + 1j * omega * R * C)
    np.testing.assert_allclose(circuit.impedance(omega), expected, rtol=1e-12)


def test_randles_matches_manual_combination(randles, omega):
    Z_faradaic = resistance(100.0, omega) + finite_length_warburg(50.0, 0.5, omega)
    Z_dl = capacitance(2e-5, omega)
    expected = 10.0 + 1 / (1 / Z_faradaic + 1 / Z_dl)
    np.testing.assert_allclose(randles.impedance(omega), expected, rtol=1e-12)


def test_evaluate_agrees_with_impedance(randles, omega):
    result = randles.evaluate(omega)
    assert result.ok
    np.testing.assert_allclose(result.Z, randles.impedance(omega), rtol=1e-14)


def test_series_sum_order_independent(omega):
    a = Circuit('a', 'R1=R(10) - C1=C(1e-6) - L1=L(1e-3)').impedance(omega)
    b = Circuit('b', 'L1=L(1e-3) - R1=R(10) - C1=C(1e-6)').impedance(omega)
    np.testing.assert_allclose(a, b, rtol=1e-14)


def test_zero_frequency_fails_only_that_point():
    circuit = Circuit('rc', 'R0=R(100) - C0=C(1e-6)')
    result = circuit.evaluate([1000.0, 0.0, 10.0])
    assert list(result.errors) == [1]
    assert result.errors[1].source == 'C0'
    assert result.point(0) == pytest.approx(100 - 1000j)
    assert np.isnan(result.Z[1])

    with pytest.raises(DomainError):
        circuit.impedance([1000.0, 0.0])


def test_parallel_short_circuit():
    circuit = Circuit('short', 'R0=R(0) | C0=C(1e-6)')
    Z = circuit.impedance([10.0, 1000.0])
    assert np.all(Z == 0), "A zero-impedance branch shorts the parallel group"


def test_parallel_lc_resonance_fails_point():
    """Ideal L-C tank at w = 1/sqrt(LC) has zero total admittance."""
    circuit = Circuit('tank', 'L1=L(1) | C1=C(1)')
    result = circuit.evaluate([0.5, 1.0, 2.0])
    assert list(result.errors) == [1]
    assert result.errors[1].omega == 1.0
    assert np.isfinite(result.Z[0]) and np.isfinite(result.Z[2])


def test_parallel_evaluation_equals_sequential(randles):
    omega = np.logspace(-2, 6, 2000)
    omega[777] = 0.0  # one failing point inside a later chunk

    sequential = randles.evaluate(omega)
    chunked = randles.evaluate(omega, workers=4)

    np.testing.assert_array_equal(chunked.Z, sequential.Z)
    assert list(chunked.errors) == list(sequential.errors) == [777]
    assert chunked.errors[777].index == 777


def test_small_sweep_ignores_workers(randles):
    omega = np.logspace(0, 3, 20)
    np.testing.assert_allclose(randles.evaluate(omega, workers=8).Z,
                               randles.evaluate(omega).Z, rtol=1e-14)


def test_unwired_elements_are_ignored(omega):
    extra = Element('Rx', 'R', [1e9])
    circuit = Circuit('c', 'R1=R(10)', elements=[extra])
    assert 'Rx' in circuit
    np.testing.assert_allclose(circuit.impedance(omega), 10.0)


# =============================================================================
# Pre-declared elements
# =============================================================================

def test_predeclared_elements_referenced_by_name(omega):
    e1 = Element('E1', 'R', [100.0])
    e2 = Element('E2', 'C', [1e-6])
    circuit = Circuit('c', '(E1 + E2)', elements=[e1, e2])
    assert circuit['E1'] is e1
    expected = 100.0 + 1 / (1j * 1e-6 * omega)
    np.testing.assert_allclose(circuit.impedance(omega), expected, rtol=1e-12)


def test_undeclared_reference_rejected():
    with pytest.raises(InvalidRepresentation, match="E9"):
        Circuit('c', '(E1+E9)', elements=[Element('E1', 'R', [1.0])])


def test_inline_redeclaration_rejected():
    with pytest.raises(InvalidRepresentation, match="already exists"):
        Circuit('c', 'E1=R(5) - E2', elements=[Element('E1', 'R'), Element('E2', 'R')])


def test_duplicate_predeclared_names_rejected():
    with pytest.raises(DuplicateName):
        Circuit('c', 'E1', elements=[Element('E1', 'R'), Element('E1', 'C')])


def test_element_belongs_to_one_circuit():
    shared = Element('E1', 'R', [1.0])
    Circuit('first', 'E1', elements=[shared])
    with pytest.raises(OwnershipError):
        Circuit('second', 'E1', elements=[shared])


def test_non_element_rejected():
    with pytest.raises(TypeError):
        Circuit('c', 'E1', elements=['E1'])


# =============================================================================
# Registry
# =============================================================================

def test_registry_order(randles):
    randles.add_element('Rx', 'R', [1.0])
    assert [e.name for e in randles.elements] == ['Rs', 'Rct', 'Wd', 'Cdl', 'Rx']
    assert [e.name for e in randles.wired_elements] == ['Rs', 'Rct', 'Wd', 'Cdl']
    assert len(randles) == 5


def test_add_duplicate_rejected(randles):
    with pytest.raises(DuplicateName):
        randles.add_element('Rs', 'R', [1.0])


def test_add_checks_arity(randles):
    with pytest.raises(InvalidParameterCount):
        randles.add_element('Rx', 'R', [1.0, 2.0])
    assert 'Rx' not in randles


def test_get_missing_element(randles):
    with pytest.raises(NotFound):
        randles.get_element('nope')
    with pytest.raises(KeyError):
        randles['nope']


def test_remove_referenced_element_rejected(randles):
    with pytest.raises(InvalidRepresentation):
        randles.remove_element('Cdl')
    assert 'Cdl' in randles


def test_remove_missing_element(randles):
    with pytest.raises(NotFound):
        randles.remove_element('nope')


def test_removed_element_can_join_another_circuit(randles):
    element = randles.add_element('Rx', 'R', [5.0])
    assert randles.remove_element('Rx') is element
    assert 'Rx' not in randles

    other = Circuit('other', 'Rx', elements=[element])
    assert other['Rx'] is element


# =============================================================================
# Rewiring
# =============================================================================

def test_set_representation_rewires(randles, omega):
    randles.set_representation('Rs - Rct | Cdl - L1=L(1e-6)')
    assert randles.representation == 'Rs - Rct | Cdl - L1=L(1e-6)'
    assert [e.name for e in randles.wired_elements] == ['Rs', 'Rct', 'Cdl', 'L1']
    assert 'Wd' in randles, "Unwired elements stay registered"

    Z_par = 1 / (1 / 100.0 + 1j * 2e-5 * omega)
    expected = 10.0 + Z_par + 1j * 1e-6 * omega
    np.testing.assert_allclose(randles.impedance(omega), expected, rtol=1e-12)

    randles.remove_element('Wd')
    assert 'Wd' not in randles


def test_failed_rewire_changes_nothing(randles, omega):
    before = randles.impedance(omega)
    labels = randles.get_param_labels()

    with pytest.raises(InvalidRepresentation):
        randles.set_representation('Rs - New=R(1) - Missing')

    assert 'New' not in randles
    assert randles.get_param_labels() == labels
    np.testing.assert_array_equal(randles.impedance(omega), before)


def test_inline_representation_rebuilds_circuit(randles, omega):
    text = randles.to_representation()
    copy = Circuit('copy', text)
    np.testing.assert_allclose(copy.impedance(omega), randles.impedance(omega), rtol=1e-14)
    assert randles.to_representation(inline=False) == 'Rs - ((Rct - Wd) | Cdl)'


# =============================================================================
# Fitting interface
# =============================================================================

def test_parameter_vector(randles):
    assert randles.get_all_params() == [10.0, 100.0, 50.0, 0.5, 2e-5]
    assert randles.get_param_labels() == ['Rs.r', 'Rct.r', 'Wd.r', 'Wd.tau', 'Cdl.c']


def test_update_params(randles):
    assert randles.update_params([1, 2, 3, 4, 5e-6]) == 5
    assert randles['Wd'].parameters == (3.0, 4.0)
    assert randles.get_all_params() == [1.0, 2.0, 3.0, 4.0, 5e-6]


def test_update_params_wrong_length_writes_nothing(randles):
    with pytest.raises(InvalidParameterCount):
        randles.update_params([1.0, 2.0])
    assert randles.get_all_params() == [10.0, 100.0, 50.0, 0.5, 2e-5]


def test_impedance_with_explicit_params(randles, omega):
    params = [20.0, 200.0, 50.0, 0.5, 2e-5]
    Z = randles.impedance(omega, params)
    assert randles.get_all_params()[0] == 10.0, "Explicit params must not be stored"

    reference = Circuit('ref', 'Rs=R(20) - (Rct=R(200) - Wd=Wfl(50, 0.5)) | Cdl=C(2e-5)')
    np.testing.assert_allclose(Z, reference.impedance(omega), rtol=1e-14)

    with pytest.raises(InvalidParameterCount):
        randles.impedance(omega, params[:-1])
