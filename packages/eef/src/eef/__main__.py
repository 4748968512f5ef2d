"""
eef — trend extraction from the command line.

    eef extrema data.csv --column Close                   Control points on extrema
    eef extrema data.csv --depend-on first_deriv -o out.csv
    eef partition data.csv --levels 4                     Control points on partitions
    eef partition data.parquet --levels 5 --x-column t --config eef.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from polars.exceptions import PolarsError

from eef import config
from eef.errors import EEFError
from eef.signals import ExtremaSignal, PartitionSignal


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('path', help='CSV, TSV or Parquet file')
    parser.add_argument('--column', '-c', default=None,
                        help='Value column (default: first numeric column)')
    parser.add_argument('--x-column', '-x', dest='x_column', default=None,
                        help='Coordinate column (default: unit steps)')
    parser.add_argument('--reverse', action='store_true', default=None,
                        help='Reverse row order before fitting (newest-first exports)')
    parser.add_argument('--p-order', '-p', dest='p_order', type=int, default=None,
                        help='Polynomial order of the trend, 0-4 (default: 3)')
    parser.add_argument('--output', '-o', default=None,
                        help='Write x, value, trend, diff here (.csv, .tsv or .parquet)')
    parser.add_argument('--config', default=None,
                        help='YAML file overriding defaults')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log progress')


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='eef',
        description='Extract a smooth trend from one column of a data file.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  eef extrema prices.csv --column Close --reverse --depend-on first_deriv
  eef partition signal.parquet --levels 5 --x-column t -o trend.parquet
""",
    )
    subparsers = parser.add_subparsers(dest='method', required=True)

    extrema_parser = subparsers.add_parser('extrema', help='Control points on extrema of a driving signal')
    _add_common(extrema_parser)
    extrema_parser.add_argument('--depend-on', '-d', dest='depend_on', default=None,
                                choices=[m.value for m in ExtremaSignal],
                                help='Driving signal (default: second_deriv)')

    partition_parser = subparsers.add_parser('partition', help='Control points on a weighted bisection')
    _add_common(partition_parser)
    partition_parser.add_argument('--levels', '-l', dest='split_levels', type=int, default=None,
                                  help='Split levels (default: 4)')
    partition_parser.add_argument('--depend-on', '-d', dest='depend_on', default=None,
                                  choices=[m.value for m in PartitionSignal],
                                  help='Weight signal (default: abs_second_deriv)')
    return parser


def main(argv: Optional[List[str]] = None):
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    input_path = Path(args.path).expanduser()
    if not input_path.exists():
        print(f"Error: {input_path} does not exist")
        sys.exit(1)

    try:
        cfg = config.load(args.config) if args.config else config.CONFIG
    except (OSError, EEFError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    def setting(value, path):
        return value if value is not None else config.get(path, config=cfg)

    from eef.cli import run, summarize
    try:
        result = run(
            input_path,
            method=args.method,
            column=setting(args.column, 'cli.column'),
            x_column=setting(args.x_column, 'cli.x_column'),
            reverse=bool(setting(args.reverse, 'cli.reverse')),
            p_order=setting(args.p_order, 'trend.p_order_default'),
            depend_on=setting(args.depend_on, f'{args.method}.depend_on'),
            split_levels=setting(getattr(args, 'split_levels', None), 'cli.split_levels'),
            output_path=Path(args.output).expanduser() if args.output else None,
            config=cfg,
        )
    except (EEFError, PolarsError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if result['output_path'] is None:
        print(summarize(result))


if __name__ == "__main__":
    main()
