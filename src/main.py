#!/usr/bin/env python3
"""
===============================================================================
LAMBERT TARGETER - MAIN ENTRY POINT
===============================================================================
Command-line driver for the zero-revolution Lambert solvers.

Solves a single transfer given on the command line, or every case listed in
the YAML configuration file, with Izzo's method, Gooding's method or both.
When both solvers converge the velocity difference between them is reported
as a cross-check.

USAGE:
    python main.py                                  # cases from config
    python main.py --method gooding                 # Gooding only
    python main.py --r1 7e6 0 0 --r2 0 8e6 0 --tof 3600 --body earth
    python main.py --r1 ... --r2 ... --tof 300 --tof-unit days --mu 1.327e20

DEPENDENCIES:
    numpy, scipy, pyyaml
===============================================================================
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import yaml

# ---------------------------------------------------------------------------
# Path setup: ensure all project modules are importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import LambertSettings, load_config, settings_from_dict
from core.constants import JULIAN_DAY, get_body_mu
from core.exceptions import InputError, LambertError
from guidance.lambert_targeter import METHODS, solve_lambert_problem
from guidance.velocity_reconstruction import LambertSolution

logger = logging.getLogger('lambert')


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def parse_case(case: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize a transfer case from the config file or the command line.

    A case needs 'r1', 'r2', a time of flight ('time_of_flight' in seconds
    or 'time_of_flight_days') and either 'mu' or 'body'. Optional keys are
    'name', 'long_way' and 'retrograde'.

    Raises:
        InputError: If a required key is missing or malformed.
    """
    name = case.get('name', 'transfer')
    try:
        r1 = np.array(case['r1'], dtype=float)
        r2 = np.array(case['r2'], dtype=float)
    except KeyError as exc:
        raise InputError(f"Case '{name}' is missing {exc.args[0]}") from None
    except (TypeError, ValueError) as exc:
        raise InputError(f"Case '{name}' has non-numeric positions") from exc

    if 'time_of_flight' in case:
        tof = float(case['time_of_flight'])
    elif 'time_of_flight_days' in case:
        tof = float(case['time_of_flight_days']) * JULIAN_DAY
    else:
        raise InputError(f"Case '{name}' has no time_of_flight")

    if 'mu' in case:
        mu = float(case['mu'])
    elif 'body' in case:
        try:
            mu = get_body_mu(case['body'])
        except ValueError as exc:
            raise InputError(str(exc)) from exc
    else:
        raise InputError(f"Case '{name}' needs either 'mu' or 'body'")

    return {
        'name': name,
        'r1': r1,
        'r2': r2,
        'time_of_flight': tof,
        'mu': mu,
        'long_way': case.get('long_way'),
        'retrograde': bool(case.get('retrograde', False)),
    }


def run_case(
    case: Dict[str, Any],
    methods: List[str],
    settings: Optional[LambertSettings] = None,
) -> Dict[str, LambertSolution]:
    """
    Solve one parsed case with each requested method.

    Solver failures are logged and the method is left out of the result, so
    one non-converging method does not hide the other.

    Returns:
        Mapping of method name to LambertSolution for the methods that
        converged.
    """
    logger.info("Case: %s (tof=%.3f s, mu=%.6e)", case['name'], case['time_of_flight'], case['mu'])
    solutions = {}
    for method in methods:
        try:
            solution = solve_lambert_problem(
                case['r1'], case['r2'], case['time_of_flight'], case['mu'],
                method=method,
                long_way=case['long_way'],
                retrograde=case['retrograde'],
                settings=settings,
            )
        except LambertError as exc:
            logger.error("  %-8s failed: %s: %s", method, type(exc).__name__, exc)
            continue
        solutions[method] = solution
        logger.info(
            "  %-8s x=%.10f iterations=%d", method, solution.x_parameter, solution.iterations,
        )
        logger.info("           v1 = %s m/s", np.array2string(solution.departure_velocity, precision=6))
        logger.info("           v2 = %s m/s", np.array2string(solution.arrival_velocity, precision=6))

    if len(solutions) == 2:
        izzo, gooding = solutions['izzo'], solutions['gooding']
        dv1 = np.linalg.norm(izzo.departure_velocity - gooding.departure_velocity)
        dv2 = np.linalg.norm(izzo.arrival_velocity - gooding.arrival_velocity)
        logger.info("  Izzo vs Gooding: |dv1|=%.3e m/s, |dv2|=%.3e m/s", dv1, dv2)
    return solutions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Zero-revolution Lambert targeter (Izzo and Gooding solvers)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                       Solve config cases
  python main.py --method izzo                         Izzo only
  python main.py --r1 7e6 0 0 --r2 0 8e6 0 --tof 3600  Single Earth transfer
        """,
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to Lambert config YAML')
    parser.add_argument('--method', choices=list(METHODS) + ['both'], default='both',
                        help='Solver to run (default: both)')
    parser.add_argument('--r1', type=float, nargs=3, metavar=('X', 'Y', 'Z'),
                        help='Departure position (m)')
    parser.add_argument('--r2', type=float, nargs=3, metavar=('X', 'Y', 'Z'),
                        help='Arrival position (m)')
    parser.add_argument('--tof', type=float, help='Time of flight')
    parser.add_argument('--tof-unit', choices=['s', 'days'], default='s',
                        help='Unit of --tof (default: s)')
    parser.add_argument('--body', type=str, default='earth',
                        help='Central body when --mu is not given (default: earth)')
    parser.add_argument('--mu', type=float, default=None,
                        help='Gravitational parameter (m^3/s^2)')
    way = parser.add_mutually_exclusive_group()
    way.add_argument('--long-way', dest='long_way', action='store_const', const=True,
                     default=None, help='Force the long way (> 180 deg)')
    way.add_argument('--short-way', dest='long_way', action='store_const', const=False,
                     help='Force the short way (< 180 deg)')
    parser.add_argument('--retrograde', action='store_true',
                        help='Motion is clockwise about +z')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging (iteration details)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point. Returns 0 if every requested solve converged, 1 if any
    failed and 2 for invalid input or configuration.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    methods = list(METHODS) if args.method == 'both' else [args.method]

    try:
        config = load_config(args.config)
        settings = settings_from_dict(config)

        if args.r1 is not None or args.r2 is not None:
            if args.r1 is None or args.r2 is None or args.tof is None:
                raise InputError("--r1, --r2 and --tof must be given together")
            raw = {
                'name': 'command line',
                'r1': args.r1,
                'r2': args.r2,
                'time_of_flight' if args.tof_unit == 's' else 'time_of_flight_days': args.tof,
                'long_way': args.long_way,
                'retrograde': args.retrograde,
            }
            if args.mu is not None:
                raw['mu'] = args.mu
            else:
                raw['body'] = args.body
            cases = [parse_case(raw)]
        else:
            cases = [parse_case(case) for case in config.get('cases', [])]
    except (InputError, OSError, yaml.YAMLError) as exc:
        logger.error("%s", exc)
        return 2

    if not cases:
        logger.warning("No transfer cases to solve")
        return 0

    failures = 0
    for case in cases:
        solutions = run_case(case, methods, settings)
        failures += len(methods) - len(solutions)

    logger.info("Solved %d case(s), %d solver failure(s)", len(cases), failures)
    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
