"""
CLI module for the EIS circuit toolkit.

This module provides the command-line interface components:
- logging: Custom log formatters and setup
- parser: Argument parsing
- handlers: Simulation and fitting workflow handlers
- main: Entry point (``eis-circuits`` console script)
"""

from .logging import setup_logging, log_separator
from .parser import parse_arguments
from .handlers import build_circuit, build_sweep, run_simulation, run_fit, write_spectrum
from .main import main

__all__ = [
    'setup_logging',
    'log_separator',
    'parse_arguments',
    'build_circuit',
    'build_sweep',
    'run_simulation',
    'run_fit',
    'write_spectrum',
    'main',
]
