"""
Command-line entry point: ``eis-circuits``.

Usage:
    eis-circuits 'R0=R(100) - C0=C(1e-6)'                 # simulate
    eis-circuits 'R0=R(100) - C0=C(1e-6)' -o spectrum.csv # + CSV export
    eis-circuits 'Rs=R(10) - (Rp=R(1e3) | Cp=C(1e-6))' --fit
"""

import logging
import sys
from typing import List, Optional

from .handlers import build_circuit, build_sweep, run_fit, run_simulation
from .logging import setup_logging
from .parser import parse_arguments
from ..errors import CircuitError

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI.

    Returns
    -------
    status : int
        0 on success, 1 if a circuit or fitting error was reported
    """
    args = parse_arguments(argv)
    setup_logging(args)

    try:
        circuit = build_circuit(args)
        omega = build_sweep(args)
        run_simulation(circuit, omega, args)
        run_fit(circuit, omega, args)
    except (CircuitError, ValueError) as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"Cannot write output: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
