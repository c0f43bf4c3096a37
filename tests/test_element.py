#!/usr/bin/env python3
"""Test Element construction, parameter handling and per-point evaluation."""

import threading

import numpy as np
import pytest
from eis_circuits import Element, ElementKind, DomainError, InvalidParameterCount
from eis_circuits.elements import ELEMENT_SPECS
from eis_circuits.sweep import SweepResult


EXPECTED_ARITY = {
    ElementKind.RESISTOR: 1,
    ElementKind.CAPACITOR: 1,
    ElementKind.INDUCTOR: 1,
    ElementKind.SEMI_INFINITE_WARBURG: 1,
    ElementKind.FINITE_LENGTH_WARBURG: 2,
    ElementKind.FINITE_SPACE_WARBURG: 2,
}

# Positive parameters that put every kind inside its formula domain
TYPICAL_PARAMS = {
    ElementKind.RESISTOR: [100.0],
    ElementKind.CAPACITOR: [1e-6],
    ElementKind.INDUCTOR: [1e-3],
    ElementKind.SEMI_INFINITE_WARBURG: [30.0],
    ElementKind.FINITE_LENGTH_WARBURG: [50.0, 0.5],
    ElementKind.FINITE_SPACE_WARBURG: [50.0, 0.5],
}


@pytest.fixture
def omega():
    return np.logspace(-2, 5, 36)


# =============================================================================
# Kinds and dispatch table
# =============================================================================

def test_every_kind_has_a_formula():
    assert set(ELEMENT_SPECS) == set(ElementKind), "Dispatch table must cover every kind"


@pytest.mark.parametrize("kind", list(ElementKind))
def test_arity(kind):
    assert kind.arity == EXPECTED_ARITY[kind]
    assert Element('X', kind).arity == EXPECTED_ARITY[kind]


@pytest.mark.parametrize("text, expected", [
    ('R', ElementKind.RESISTOR),
    ('Wfl', ElementKind.FINITE_LENGTH_WARBURG),
    ('FINITE_SPACE_WARBURG', ElementKind.FINITE_SPACE_WARBURG),
    ('FiniteLengthWarburg', ElementKind.FINITE_LENGTH_WARBURG),
    ('inductor', ElementKind.INDUCTOR),
    ('SemiInfiniteWarburg', ElementKind.SEMI_INFINITE_WARBURG),
])
def test_kind_parse(text, expected):
    assert ElementKind.parse(text) is expected


def test_kind_parse_rejects_unknown():
    with pytest.raises(ValueError, match="Unknown element kind"):
        ElementKind.parse('Q')


@pytest.mark.parametrize("kind", [5, None, 1.0])
def test_non_string_kind_rejected(kind):
    with pytest.raises(ValueError, match="ElementKind or str"):
        Element('X', kind)


# =============================================================================
# Construction and parameters
# =============================================================================

@pytest.mark.parametrize("kind", list(ElementKind))
def test_parameters_default_to_zeros(kind):
    element = Element('E1', kind)
    assert element.parameters == (0.0,) * EXPECTED_ARITY[kind]


def test_construction_rejects_wrong_parameter_count():
    with pytest.raises(InvalidParameterCount) as excinfo:
        Element('R1', ElementKind.RESISTOR, [1.0, 2.0])
    assert excinfo.value.expected == 1
    assert excinfo.value.got == 2


def test_set_parameters_keeps_old_vector_on_error():
    element = Element('Wd', 'Wfl', [10.0, 1.0])
    with pytest.raises(InvalidParameterCount):
        element.set_parameters([5.0])
    assert element.parameters == (10.0, 1.0), "Failed update must not change parameters"

    element.set_parameters([20.0, 2.0])
    assert element.parameters == (20.0, 2.0)


@pytest.mark.parametrize("name", ['', '1R', 'R-1', 'a b', None])
def test_invalid_names_rejected(name):
    with pytest.raises(ValueError):
        Element(name, 'R')


def test_param_labels():
    assert Element('Wd', 'Wfs').param_labels == ['r', 'tau']
    assert Element('W1', 'W').param_labels == ['sigma']


def test_declaration_text():
    element = Element('Wd', 'Wfl', [50, 0.5])
    assert element.declaration() == 'Wd=Wfl(50.0, 0.5)'


# =============================================================================
# Evaluation
# =============================================================================

@pytest.mark.parametrize("kind", list(ElementKind))
def test_element_uses_formula_of_its_kind(kind, omega):
    params = TYPICAL_PARAMS[kind]
    element = Element('E1', kind, params)
    result = element.evaluate(omega)
    assert result.ok, f"{kind.name} should evaluate on a positive sweep"
    np.testing.assert_allclose(result.Z, ELEMENT_SPECS[kind].formula(*params, omega), rtol=1e-14)


def test_inductor_sweep():
    element = Element('L1', 'L', [0.01])
    result = element.evaluate([1, 10, 100, 1000])
    np.testing.assert_allclose(result.Z.imag, [0.01, 0.1, 1, 10], rtol=1e-14)
    assert np.all(result.Z.real == 0)


def test_capacitor_reports_zero_frequency_per_point():
    element = Element('C1', 'C', [1e-6])
    result = element.evaluate([0.0, 10.0, 100.0])

    assert isinstance(result, SweepResult)
    assert list(result.errors) == [0], "Only the w = 0 point should fail"
    assert result.errors[0].index == 0
    assert result.errors[0].source == 'C1'
    np.testing.assert_allclose(result.Z[1:], [1 / (1j * 1e-6 * 10.0), 1 / (1j * 1e-6 * 100.0)])
    assert list(result.valid) == [False, True, True]

    with pytest.raises(DomainError):
        result.point(0)
    assert result.point(2) == pytest.approx(-1e4j)

    values = list(result)
    assert isinstance(values[0], DomainError)
    assert isinstance(values[1], complex)


def test_resistor_and_inductor_accept_zero_frequency():
    result = Element('R1', 'R', [5.0]).evaluate([0.0, 1.0])
    assert result.ok
    result = Element('L1', 'L', [1e-3]).evaluate([0.0, 1.0])
    assert result.ok
    assert result.Z[0] == 0


def test_negative_and_nan_frequencies_fail_for_every_kind():
    for kind, params in TYPICAL_PARAMS.items():
        result = Element('E1', kind, params).evaluate([-1.0, np.nan, 1.0])
        assert list(result.errors) == [0, 1], f"{kind.name} must reject negative and NaN w"


def test_zero_capacitance_fails_every_point():
    result = Element('C1', 'C').evaluate([1.0, 10.0])
    assert len(result.errors) == 2, "Default c = 0 has no finite impedance"


def test_unwrap_raises_first_error():
    result = Element('W1', 'W', [10.0]).evaluate([1.0, 0.0, -2.0])
    with pytest.raises(DomainError) as excinfo:
        result.unwrap()
    assert excinfo.value.index == 1


def test_impedance_raises_with_element_name():
    element = Element('Cdl', 'C', [1e-5])
    with pytest.raises(DomainError, match="Cdl"):
        element.impedance([1.0, 0.0])


def test_impedance_with_explicit_params_does_not_store_them(omega):
    element = Element('R1', 'R', [10.0])
    Z = element.impedance(omega, [20.0])
    assert np.all(Z == 20.0)
    assert element.parameters == (10.0,)


def test_results_do_not_alias_inputs():
    omega = np.array([1.0, 2.0, 3.0])
    element = Element('R1', 'R', [1.0])
    result = element.evaluate(omega)

    omega[:] = 0.0
    element.set_parameters([2.0])

    np.testing.assert_array_equal(result.omega, [1.0, 2.0, 3.0])
    assert np.all(result.Z == 1.0)


def test_concurrent_updates_give_consistent_snapshots(omega):
    """Every evaluation sees one whole parameter vector, never a mix."""
    element = Element('Wd', 'Wfl', [10.0, 1.0])
    Z_a = element.impedance(omega, [10.0, 1.0])
    Z_b = element.impedance(omega, [20.0, 2.0])
    stop = threading.Event()

    def writer():
        toggle = False
        while not stop.is_set():
            element.set_parameters([20.0, 2.0] if toggle else [10.0, 1.0])
            toggle = not toggle

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        for _ in range(200):
            Z = element.evaluate(omega).Z
            assert np.allclose(Z, Z_a) or np.allclose(Z, Z_b)
    finally:
        stop.set()
        thread.join()
