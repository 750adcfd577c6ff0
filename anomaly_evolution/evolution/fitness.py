"""
Fitness evaluation for the sliding-window predictors.

Fitness is a single scalar per chromosome: the arithmetic mean, over every
series in the dataset, of the RMSE between the chromosome's predictions and
the observed continuation. Lower is better.

Evaluation is the dominant cost of a run (population x series x length) and
has to be repeated every generation, because the genes change between
generations and fitness is a pure function of (genes, dataset).
"""

from typing import Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING
from datetime import datetime
from pathlib import Path
import csv
import logging

import numpy as np

from .errors import ConfigurationError, DataError

if TYPE_CHECKING:
    from .chromosome import Chromosome


logger = logging.getLogger(__name__)

# Dataset: series identifier -> ordered samples
Dataset = Mapping[str, np.ndarray]


def rmse(actual, predicted) -> float:
    """
    Root-mean-square error between two equally long sequences.

    Args:
        actual: Observed values
        predicted: Predicted values

    Returns:
        sqrt(mean((predicted - actual) ** 2))
    """
    actual = np.asarray(actual, dtype=np.float64)
    predicted = np.asarray(predicted, dtype=np.float64)
    if actual.shape != predicted.shape:
        raise ValueError(
            f"Cannot compare sequences of shape {actual.shape} and {predicted.shape}"
        )
    if actual.size == 0:
        raise ValueError("RMSE of empty sequences is undefined")
    return float(np.sqrt(np.mean((predicted - actual) ** 2)))


def validate_dataset(dataset: Dataset, gene_length: int) -> None:
    """
    Check that every series can be evaluated with the given gene length.

    Raises:
        DataError: if the dataset is empty or a series holds NaN or inf
        ConfigurationError: if the gene length is not shorter than the
            shortest series
    """
    if not dataset:
        raise DataError("Dataset contains no series")

    for series_id, series in dataset.items():
        if not np.all(np.isfinite(np.asarray(series, dtype=np.float64))):
            raise DataError(f"Series '{series_id}' contains non-finite values")

    shortest_id = min(dataset, key=lambda k: len(dataset[k]))
    shortest = len(dataset[shortest_id])
    if gene_length >= shortest:
        raise ConfigurationError(
            f"Gene length {gene_length} must be smaller than the shortest series "
            f"('{shortest_id}' has {shortest} samples)"
        )


def set_fitness_for_dataset(
    population: Iterable['Chromosome'],
    dataset: Dataset,
) -> None:
    """
    Evaluate every chromosome against every series and store the mean RMSE
    in ``chromosome.fitness``.

    Raises:
        DataError: naming the chromosome index and series that failed
    """
    if not dataset:
        raise DataError("Cannot evaluate fitness against an empty dataset")

    for index, chromosome in enumerate(population):
        try:
            chromosome.fitness = chromosome.calculate_dataset_fitness(dataset)
        except DataError as e:
            raise DataError(f"Chromosome {index}: {e}") from e


def dataset_fitness_report(chromosome: 'Chromosome', dataset: Dataset) -> Dict[str, float]:
    """Per-series fitness of a single chromosome (does not touch its fitness)."""
    return {
        series_id: chromosome.calculate_sample_fitness(series, series_id)
        for series_id, series in dataset.items()
    }


def prediction_filename(
    series_id: str,
    timestamp: Optional[datetime] = None,
    stem: Optional[str] = None,
) -> str:
    """Timestamped CSV name for a series' prediction export."""
    timestamp = timestamp or datetime.now()
    stem = stem or Path(series_id).stem or 'series'
    return f"{stem}_prediction_data_{timestamp.strftime('%Y-%m-%dT%H-%M-%S')}.csv"


def _unique_stem(series_id: str, used: set) -> str:
    """File stem of the series, numbered when another series already took it."""
    base = Path(series_id).stem or 'series'
    stem, n = base, 1
    while stem in used:
        stem = f"{base}_{n}"
        n += 1
    used.add(stem)
    return stem


def export_predictions(
    chromosome: 'Chromosome',
    dataset: Dataset,
    output_dir: Path,
    timestamp: Optional[datetime] = None,
) -> List[Path]:
    """
    Write one CSV per series comparing the observed and predicted values.

    Columns: Actual, Predicted, Difference (Actual - Predicted). Row i holds
    the prediction made from window i and the sample that follows it.

    Returns:
        Paths of the files written
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = timestamp or datetime.now()

    written = []
    used_stems = set()
    for series_id, series in dataset.items():
        predictions = chromosome.predict(series, series_id)
        actual = np.asarray(series, dtype=np.float64)[chromosome.length:]

        stem = _unique_stem(series_id, used_stems)
        path = output_dir / prediction_filename(series_id, timestamp, stem)
        with open(path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['Actual', 'Predicted', 'Difference'])
            for a, p in zip(actual, predictions):
                writer.writerow([repr(float(a)), repr(float(p)), repr(float(a - p))])

        logger.info("Wrote %d predictions for %s to %s", len(predictions), series_id, path)
        written.append(path)

    return written
