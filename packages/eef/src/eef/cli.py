"""
EEF file runner
===============

Run trend extraction on one column of a CSV, TSV or Parquet file and
write x, value, trend, diff.

    eef extrema data.csv --column Close --depend-on first_deriv --output trend.csv
    eef partition data.parquet --levels 5 --x-column t --output trend.parquet
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import polars as pl

from eef.control_points import unit_step_coordinates
from eef.errors import InvalidArgumentError
from eef.trend import eef_extrema, eef_partition

logger = logging.getLogger(__name__)


SUPPORTED_FORMATS = {
    '.csv': 'csv',
    '.tsv': 'tsv',
    '.txt': 'tsv',
    '.parquet': 'parquet',
    '.pq': 'parquet',
}


def detect_format(filename: str) -> str:
    """
    Detect file format from filename.

    Raises:
        InvalidArgumentError: If format not supported
    """
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        raise InvalidArgumentError(
            f"Unsupported format: {suffix or '(none)'}. "
            f"Supported: {', '.join(SUPPORTED_FORMATS.keys())}"
        )
    return SUPPORTED_FORMATS[suffix]


def load_table(path: Path) -> pl.DataFrame:
    fmt = detect_format(str(path))
    if fmt == 'parquet':
        return pl.read_parquet(path)
    if fmt == 'tsv':
        return pl.read_csv(path, separator='\t')
    return pl.read_csv(path)


def write_table(df: pl.DataFrame, path: Path) -> None:
    fmt = detect_format(str(path))
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == 'parquet':
        df.write_parquet(path)
    elif fmt == 'tsv':
        df.write_csv(path, separator='\t')
    else:
        df.write_csv(path)


def _numeric_column(df: pl.DataFrame, name: str) -> np.ndarray:
    if name not in df.columns:
        raise InvalidArgumentError(f"Column {name!r} not found. Columns: {df.columns}")
    if not df.schema[name].is_numeric():
        raise InvalidArgumentError(f"Column {name!r} is not numeric ({df.schema[name]})")
    nulls = df[name].null_count()
    if nulls:
        raise InvalidArgumentError(f"Column {name!r} has {nulls} empty cells")
    return df[name].cast(pl.Float64).to_numpy()


def _pick_value_column(df: pl.DataFrame, x_column: Optional[str]) -> str:
    """First numeric column that is not the x column."""
    for name, dtype in df.schema.items():
        if name != x_column and dtype.is_numeric():
            return name
    raise InvalidArgumentError(f"No numeric value column found. Columns: {df.columns}")


def run(
    input_path: Path,
    method: str,
    column: Optional[str] = None,
    x_column: Optional[str] = None,
    reverse: bool = False,
    p_order: Optional[int] = None,
    depend_on: Optional[str] = None,
    split_levels: Optional[int] = None,
    output_path: Optional[Path] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Load a table, extract the trend of one column, optionally write it out.

    Args:
        input_path: CSV, TSV or Parquet file.
        method: 'extrema' or 'partition'.
        column: Value column (default: first numeric column).
        x_column: Coordinate column (default: unit steps).
        reverse: Reverse row order first (newest-first exports).
        p_order, depend_on: Passed to the entry point.
        split_levels: Required for 'partition'.
        output_path: Where to write x, value, trend, diff.
        config: Settings dict passed to the entry point.

    Returns:
        dict with the result frame, the column used and the output path.
    """
    df = load_table(input_path)
    if reverse:
        df = df.reverse()
    if df.height == 0:
        raise InvalidArgumentError(f"{input_path} has no rows")

    column = column or _pick_value_column(df, x_column)
    ys = _numeric_column(df, column)
    xs = _numeric_column(df, x_column) if x_column else None
    logger.info("Loaded %d rows from %s, column %r", len(ys), input_path, column)

    if method == 'extrema':
        trend, diff = eef_extrema(ys, xs, p_order=p_order, depend_on=depend_on, config=config)
    elif method == 'partition':
        if split_levels is None:
            raise InvalidArgumentError("partition needs split_levels")
        trend, diff = eef_partition(ys, split_levels, xs, p_order=p_order, depend_on=depend_on, config=config)
    else:
        raise InvalidArgumentError(f"Unknown method {method!r}, must be 'extrema' or 'partition'")

    x_out = xs if xs is not None else unit_step_coordinates(len(ys), config)
    result = pl.DataFrame({
        'x': x_out,
        'value': ys,
        'trend': trend,
        'diff': diff,
    })

    if output_path is not None:
        write_table(result, output_path)
        logger.info("Wrote %d rows to %s", result.height, output_path)

    return {
        'frame': result,
        'column': column,
        'output_path': output_path,
    }


def summarize(result: Dict[str, Any]) -> str:
    frame = result['frame']
    diff = frame['diff'].to_numpy()
    return (
        f"{result['column']}: n={frame.height} "
        f"trend=[{frame['trend'].min():.6g}, {frame['trend'].max():.6g}] "
        f"rms(diff)={float(np.sqrt(np.mean(diff ** 2))):.6g}"
    )
