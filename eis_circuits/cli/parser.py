"""
Argument parsing for the EIS circuit CLI.

Options are grouped as:
- Circuit
- Frequency sweep
- Output
- Fitting
"""

import argparse
from typing import List, Optional

from ..config import DEFAULT_F_MIN, DEFAULT_F_MAX, DEFAULT_WEIGHTING
from ..fitting import VALID_WEIGHTINGS
from ..version import get_version_string


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='eis-circuits',
        description=f'EIS equivalent circuit simulation ({get_version_string()})',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Representation grammar:
  '-' or '+'  series        '|' or '//'  parallel (binds tighter)
  NAME=KIND(p1, p2)         inline element, KIND in R C L W Wfl Wfs

Examples:
  eis-circuits 'R0=R(100) - C0=C(1e-6)'
  eis-circuits 'Rs=R(10) - (Rct=R(100) - Wd=Wfl(50, 0.5)) | Cdl=C(2e-5)' -o randles.csv
  eis-circuits 'Rs=R(10) - (Rp=R(1000) | Cp=C(1e-6))' --fit --noise 0.02
        """
    )

    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {get_version_string()}')

    # ==========================================================================
    # Circuit
    # ==========================================================================
    circuit_group = parser.add_argument_group('Circuit')
    circuit_group.add_argument('representation',
                               help='Circuit representation with inline element declarations')
    circuit_group.add_argument('--name', type=str, default='circuit',
                               help='Circuit name used in reports (default: circuit)')

    # ==========================================================================
    # Frequency sweep
    # ==========================================================================
    sweep_group = parser.add_argument_group('Frequency sweep')
    sweep_group.add_argument('--f-min', type=float, default=DEFAULT_F_MIN,
                             help=f'Lowest frequency [Hz] (default: {DEFAULT_F_MIN:g})')
    sweep_group.add_argument('--f-max', type=float, default=DEFAULT_F_MAX,
                             help=f'Highest frequency [Hz] (default: {DEFAULT_F_MAX:g})')
    sweep_group.add_argument('--n-points', type=int, default=None,
                             help='Number of log-spaced points (default: 10 per decade)')
    sweep_group.add_argument('--descending', action='store_true',
                             help='Sweep from high to low frequency')
    sweep_group.add_argument('--workers', type=int, default=None,
                             help='Evaluate the sweep on this many threads')

    # ==========================================================================
    # Output
    # ==========================================================================
    output_group = parser.add_argument_group('Output')
    output_group.add_argument('--output', '-o', type=str, default=None,
                              help='Write the spectrum to a CSV file')
    output_group.add_argument('--verbose', '-v', action='count', default=0,
                              help='Show debug messages')
    output_group.add_argument('--quiet', '-q', action='store_true',
                              help='Only show warnings and errors')

    # ==========================================================================
    # Fitting
    # ==========================================================================
    fit_group = parser.add_argument_group('Fitting')
    fit_group.add_argument('--fit', action='store_true',
                           help='Fit the circuit back to a noisy synthetic copy of its spectrum')
    fit_group.add_argument('--noise', type=float, default=0.01,
                           help='Relative noise of the synthetic spectrum (default: 0.01)')
    fit_group.add_argument('--seed', type=int, default=None,
                           help='Random seed for the synthetic noise')
    fit_group.add_argument('--perturb', type=float, default=0.3,
                           help='Start the fit from parameters scaled by (1 + perturb) '
                                '(default: 0.3)')
    fit_group.add_argument('--weighting', choices=VALID_WEIGHTINGS, default=DEFAULT_WEIGHTING,
                           help=f'Residual weighting (default: {DEFAULT_WEIGHTING})')
    fit_group.add_argument('--fix', action='append', default=[], metavar='LABEL',
                           help="Hold a parameter fixed, e.g. --fix Rs.r (repeatable)")

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Parameters
    ----------
    argv : list of str, optional
        Arguments (default: sys.argv[1:])

    Returns
    -------
    args : argparse.Namespace
        Parsed command line arguments
    """
    return build_parser().parse_args(argv)
