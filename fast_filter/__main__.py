#!/usr/bin/env python3
"""
Fast Filter - Command Line Interface

Keep the rows of a CSV/TSV/Excel file whose chosen field passes a single
operator test defined in a YAML recipe.
"""

import sys
import argparse

from fast_filter import __version__, __description__
from fast_filter.core.main import run_main


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""

    epilog_for_argparse = """
examples:
  FILTERING:
    # Keep matching rows, print them as CSV
    %(prog)s active_west.yaml --input customers.csv

    # Write kept rows to a file, supplying a deferred criteria value
    %(prog)s by_region.yaml --input customers.xlsx --output west.xlsx --var region=west

  CHECKING:
    # Report every configuration problem without filtering
    %(prog)s --validate-recipe by_region.yaml --input customers.csv

    # List operator tokens
    %(prog)s --list-operators

note: Criteria may contain ${name} macros, resolved from settings.variables
      and --var overrides just before filtering. Use $${ for a literal ${.
"""

    parser = argparse.ArgumentParser(
        description=__description__,
        prog="fast-filter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog_for_argparse
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'fast_filter {__version__}'
    )

    parser.add_argument(
        'recipe_file',
        nargs='?',
        metavar='RECIPE.yaml',
        help='YAML or JSON recipe with settings and filter sections'
    )

    parser.add_argument(
        '--input', '-i',
        dest='input_file',
        metavar='FILE',
        help='Input data file (.csv, .tsv, .txt, .xlsx, .xls, .xlsm)'
    )

    parser.add_argument(
        '--output', '-o',
        dest='output_file',
        metavar='FILE',
        help='Output file for kept rows (default: CSV on stdout)'
    )

    parser.add_argument(
        '--var',
        action='append',
        dest='variable_overrides',
        metavar='NAME=VALUE',
        help='Set a variable for ${NAME} macros (repeatable). Example: --var region=west'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output and debug logging'
    )

    parser.add_argument(
        '--validate-recipe',
        metavar='RECIPE.yaml',
        help='Validate a recipe and report all configuration problems'
    )

    parser.add_argument(
        '--list-operators',
        action='store_true',
        help='List the supported operator tokens'
    )

    return parser


def main() -> int:
    """Main entry point for the command line interface."""

    parser = create_argument_parser()

    # Special case: no arguments shows help instead of error
    if len(sys.argv) == 1:
        parser.print_help()
        return 0

    try:
        args = parser.parse_args()
        return run_main(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
