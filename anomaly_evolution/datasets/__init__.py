"""Time-series datasets: directory ingestion and synthetic generators."""

from .loader import (
    load_series_file,
    load_series_directory,
    write_series_file,
    write_series_directory,
)
from .synthetic import (
    sine_wave,
    sawtooth_wave,
    square_wave,
    random_walk,
    inject_anomalies,
    SERIES,
    get_series,
    list_series,
    make_corpus,
)

__all__ = [
    'load_series_file',
    'load_series_directory',
    'write_series_file',
    'write_series_directory',
    'sine_wave',
    'sawtooth_wave',
    'square_wave',
    'random_walk',
    'inject_anomalies',
    'SERIES',
    'get_series',
    'list_series',
    'make_corpus',
]
