"""
Reading and writing series directories.

Every regular file in a directory is one series: a CSV file whose first row
is a header and whose second column holds the sample values. The first
column (typically a timestamp) is ignored.

Any malformed row aborts the load; bad records are never skipped.
"""

from pathlib import Path
from typing import Dict, Iterable, Mapping, Sequence, Union
import csv
import logging
import math

import numpy as np

from ..evolution.errors import DataError


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_HEADER = ('timestamp', 'value')


def load_series_file(path: PathLike) -> np.ndarray:
    """
    Load the value column of a single two-column CSV file.

    Raises:
        DataError: if the file is not UTF-8 text, a row has fewer than two
            columns, or a value is unparseable or not finite
    """
    path = Path(path)
    values = []

    with open(path, 'r', newline='', encoding='utf-8') as f:
        reader = csv.reader(f)
        try:
            next(reader, None)  # header

            for row in reader:
                if not row:
                    continue
                values.append(_parse_value(path, reader.line_num, row))
        except (UnicodeDecodeError, csv.Error) as e:
            raise DataError(f"{path}: not a readable CSV file ({e})") from e

    return np.array(values, dtype=np.float64)


def _parse_value(path: Path, line_num: int, row: Sequence[str]) -> float:
    if len(row) < 2:
        raise DataError(f"{path}:{line_num}: expected at least 2 columns, got {len(row)}")
    try:
        value = float(row[1])
    except ValueError:
        raise DataError(f"{path}:{line_num}: cannot parse value {row[1]!r}") from None
    if not math.isfinite(value):
        raise DataError(f"{path}:{line_num}: value {row[1]!r} is not finite")
    return value


def load_series_directory(path: PathLike) -> Dict[str, np.ndarray]:
    """
    Load every regular file in a directory.

    Args:
        path: Directory of CSV series

    Returns:
        File path (as string) -> values, in sorted path order

    Raises:
        DataError: if the directory does not exist or a file is malformed
    """
    directory = Path(path)
    if not directory.is_dir():
        raise DataError(f"Data directory not found: {directory}")

    dataset = {}
    for file_path in sorted(directory.iterdir()):
        if not file_path.is_file():
            continue
        dataset[str(file_path)] = load_series_file(file_path)

    logger.info("Loaded %d series from %s", len(dataset), directory)
    return dataset


def write_series_file(
    path: PathLike,
    values: Iterable[float],
    header: Sequence[str] = DEFAULT_HEADER,
) -> Path:
    """Write values as a two-column CSV (index, value) with a header row."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(list(header))
        for i, value in enumerate(values):
            writer.writerow([i, repr(float(value))])

    return path


def write_series_directory(
    path: PathLike,
    dataset: Mapping[str, Iterable[float]],
) -> Dict[str, Path]:
    """
    Write each series of a dataset to ``<path>/<name>.csv``.

    Series identifiers that are paths are reduced to their file stem.

    Returns:
        Series identifier -> written file
    """
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)

    written = {}
    for series_id, values in dataset.items():
        written[series_id] = write_series_file(
            directory / f"{Path(series_id).stem}.csv", values
        )
    return written
