"""
Chromosome representation for the sliding-window predictor.

A Chromosome is a fixed-length vector of real-valued weights (genes). Applied
to a window of L consecutive samples it predicts the next sample as the
gene-weighted average of the window:

    prediction = sum(window[k] * genes[k]) / sum(genes)

Its fitness is the RMSE between those predictions and the true continuation
of the series, so lower is better.
"""

from dataclasses import dataclass
from typing import Dict, List, Any, Optional
import logging
import math
import random

import numpy as np

from .errors import DataError
from .fitness import rmse


logger = logging.getLogger(__name__)

# Default window length (samples per prediction)
DEFAULT_GENE_LENGTH = 60


@dataclass(eq=False)
class Chromosome:
    """
    Candidate linear predictor.

    Attributes:
        genes: 1-D float array of weights, owned exclusively by this chromosome
        fitness: Mean RMSE from the last evaluation (0.0 until first evaluated)
    """
    genes: np.ndarray
    fitness: float = 0.0

    def __post_init__(self):
        """Take an owned float copy of the genes and validate the shape."""
        self.genes = np.array(self.genes, dtype=np.float64)
        if self.genes.ndim != 1 or self.genes.size == 0:
            raise ValueError(
                f"Genes must be a non-empty 1-D sequence, got shape {self.genes.shape}"
            )

    @classmethod
    def random(
        cls,
        gene_length: int = DEFAULT_GENE_LENGTH,
        rng: Optional[random.Random] = None,
    ) -> 'Chromosome':
        """Create a chromosome with every gene drawn uniformly from [0, 1)."""
        rng = rng or random.Random()
        return cls(genes=[rng.random() for _ in range(gene_length)])

    @property
    def length(self) -> int:
        """Number of genes (L)."""
        return int(self.genes.size)

    @property
    def gene_sum(self) -> float:
        return float(self.genes.sum())

    def _check_series(self, series, series_id: Optional[str]) -> np.ndarray:
        data = np.asarray(series, dtype=np.float64)
        if data.ndim != 1 or data.size <= self.length:
            name = f" '{series_id}'" if series_id else ''
            raise DataError(
                f"Series{name} has {data.size} samples; more than {self.length} "
                f"are needed to form a prediction window"
            )
        return data

    def predict(self, series: np.ndarray, series_id: Optional[str] = None) -> np.ndarray:
        """
        Predict the continuation of a series.

        Returns len(series) - L predictions; prediction i is made from
        series[i:i+L] and is compared against series[i+L].

        Raises:
            DataError: if the series is not longer than the gene vector
        """
        data = self._check_series(series, series_id)
        windows = np.lib.stride_tricks.sliding_window_view(data, self.length)[:-1]
        return windows @ self.genes / self.gene_sum

    def calculate_sample_fitness(
        self,
        series: np.ndarray,
        series_id: Optional[str] = None,
    ) -> float:
        """
        RMSE of this chromosome's predictions against a single series.

        A zero (or non-finite) gene sum cannot normalize the weighted average,
        so such a chromosome scores ``inf`` instead of producing NaN.
        """
        data = self._check_series(series, series_id)

        gene_sum = self.gene_sum
        if gene_sum == 0.0 or not math.isfinite(gene_sum):
            return math.inf

        return rmse(data[self.length:], self.predict(data, series_id))

    def calculate_dataset_fitness(self, dataset: Dict[str, np.ndarray]) -> float:
        """Mean sample fitness over every series in the dataset (not stored)."""
        if not dataset:
            raise DataError("Cannot evaluate fitness against an empty dataset")

        total = 0.0
        for series_id, series in dataset.items():
            sample_fitness = self.calculate_sample_fitness(series, series_id)
            logger.debug("Series: %s, Fitness: %s", series_id, sample_fitness)
            total += sample_fitness
        return total / len(dataset)

    def copy(self) -> 'Chromosome':
        """Independent copy (genes are not shared)."""
        return Chromosome(genes=self.genes.copy(), fitness=self.fitness)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            'genes': [float(g) for g in self.genes],
            'fitness': float(self.fitness),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Chromosome':
        return cls(genes=data['genes'], fitness=data.get('fitness', 0.0))

    def __repr__(self) -> str:
        head = ', '.join(f"{g:.3f}" for g in self.genes[:3])
        return f"Chromosome(L={self.length}, genes=[{head}, ...], fitness={self.fitness:.4f})"


def create_random_chromosomes(
    count: int,
    gene_length: int = DEFAULT_GENE_LENGTH,
    rng: Optional[random.Random] = None,
) -> List[Chromosome]:
    """Create ``count`` independent random chromosomes."""
    rng = rng or random.Random()
    return [Chromosome.random(gene_length, rng) for _ in range(count)]
