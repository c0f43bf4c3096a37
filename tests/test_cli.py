#!/usr/bin/env python3
"""
Integration tests for the CLI workflow.

Runs ``main()`` end to end: simulation, CSV export, fitting and error
reporting through the exit status.
"""

import logging

import numpy as np
import pytest
from eis_circuits.cli import main
from eis_circuits.cli.handlers import CSV_HEADER
from eis_circuits.cli.parser import parse_arguments


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() reconfigures the root logger; put the old handlers back."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_defaults():
    args = parse_arguments(['R0'])
    assert args.representation == 'R0'
    assert args.workers is None
    assert args.fit is False
    assert args.fix == []


def test_simulation_writes_csv(tmp_path):
    output = tmp_path / 'spectrum.csv'
    status = main(['R0=R(100) - C0=C(1e-6)', '--f-min', '1', '--f-max', '1000',
                   '--n-points', '4', '-q', '-o', str(output)])
    assert status == 0

    lines = output.read_text().splitlines()
    assert lines[0] == CSV_HEADER
    data = np.loadtxt(output, delimiter=',', skiprows=1)
    assert data.shape == (4, 5)
    np.testing.assert_allclose(data[:, 1], [1, 10, 100, 1000], rtol=1e-9)
    np.testing.assert_allclose(data[:, 2], 100.0, rtol=1e-9)
    np.testing.assert_allclose(data[:, 3], -1 / (1e-6 * data[:, 0]), rtol=1e-9)
    assert np.all(data[:, 4] == 1)


def test_simulation_prints_table(capsys):
    status = main(['Rs=R(10) - (Rp=R(100) | Cp=C(1e-5))', '--n-points', '5'])
    assert status == 0
    out = capsys.readouterr().out
    assert "Circuit 'circuit': Rs - (Rp | Cp)" in out
    assert 'Re Z [Ohm]' in out


def test_default_capacitance_reports_failed_points(capsys):
    status = main(['R0=R(1) - C0=C', '--n-points', '3', '-q'])
    assert status == 0, "Point failures are reported, not fatal"
    assert '3 of 3 point(s) could not be evaluated' in capsys.readouterr().out


def test_fit_workflow(capsys):
    status = main(['Rs=R(100) - (Rp=R(5000) | Cp=C(1e-6))', '--fit', '--seed', '1',
                   '--f-min', '0.1', '--f-max', '1e4', '--fix', 'Rs.r'])
    assert status == 0
    out = capsys.readouterr().out
    assert 'Fit results:' in out
    assert 'Rs.r' in out and '(fixed)' in out


@pytest.mark.parametrize("representation", ['R0 -', 'R0 - R1', 'Q=CPE(1)', 'R1=R(1, 2)'])
def test_invalid_representation_exits_with_error(representation, capsys):
    status = main([representation, '-q'])
    assert status == 1
    assert capsys.readouterr().err.startswith('!! ')


def test_invalid_range_exits_with_error():
    assert main(['R0=R(1)', '--f-min', '10', '--f-max', '1', '-q']) == 1


def test_quiet_run_prints_nothing_without_problems(capsys):
    assert main(['R0=R(1)', '--n-points', '2', '-q']) == 0
    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err == ''


def test_verbose_debug_goes_to_stderr(capsys):
    assert main(['R0=R(1) - C0=C(1e-6)', '--n-points', '2', '-v']) == 0
    captured = capsys.readouterr()
    assert '[DEBUG] ' in captured.err
    assert '[DEBUG]' not in captured.out
    assert 'Re Z [Ohm]' in captured.out, "INFO stays on stdout"
    assert 'Re Z [Ohm]' not in captured.err


def test_warnings_are_prefixed_on_stdout(capsys):
    main(['R0=R(1) - C0=C', '--n-points', '2', '-q'])
    captured = capsys.readouterr()
    assert captured.out.startswith('! ')
    assert captured.err == ''
