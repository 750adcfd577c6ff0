"""
Fitness history for evolutionary runs.

Records, per generation:
- the best (minimum) fitness in the population
- the best fitness seen so far across the run
- summary statistics of the population

The history is append-only and is used for reporting and termination only.
"""

from dataclasses import dataclass, asdict
from typing import List, Dict, Any
from datetime import datetime
import math

from .population import Population, get_population_stats


@dataclass
class GenerationStats:
    """Statistics for a single generation."""
    generation: int
    best_fitness: float
    best_so_far: float
    mean_fitness: float
    worst_fitness: float
    std_fitness: float
    population_size: int
    degenerate_count: int
    gene_diversity: float
    elapsed_seconds: float
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EvolutionHistory:
    """
    Tracks evolution progress over generations.

    ``fitness_trajectory`` holds the best fitness of each generation's
    population. It is not guaranteed to be monotone: random selection, fresh
    blood, crossover and mutation can all displace or alter the current best.
    ``best_so_far_trajectory`` is the running minimum and never increases.
    """

    def __init__(self):
        self.generations: List[GenerationStats] = []
        self.fitness_trajectory: List[float] = []
        self.best_so_far_trajectory: List[float] = []

    def __len__(self) -> int:
        return len(self.fitness_trajectory)

    @property
    def best_so_far(self) -> float:
        if not self.best_so_far_trajectory:
            return math.inf
        return self.best_so_far_trajectory[-1]

    def record_generation(
        self,
        generation: int,
        population: Population,
        elapsed_seconds: float = 0.0,
    ) -> GenerationStats:
        """
        Record statistics for an evaluated generation.

        Args:
            generation: Generation number
            population: Current population with fitness evaluated
            elapsed_seconds: Wall-clock time since the run started

        Returns:
            GenerationStats for this generation
        """
        stats = get_population_stats(population)
        best = stats['min_fitness']

        record = GenerationStats(
            generation=generation,
            best_fitness=best,
            best_so_far=min(best, self.best_so_far),
            mean_fitness=stats['mean_fitness'],
            worst_fitness=stats['max_fitness'],
            std_fitness=stats['std_fitness'],
            population_size=stats['size'],
            degenerate_count=stats['degenerate_count'],
            gene_diversity=stats['gene_diversity'],
            elapsed_seconds=elapsed_seconds,
            timestamp=datetime.now().isoformat(),
        )

        self.generations.append(record)
        self.fitness_trajectory.append(record.best_fitness)
        self.best_so_far_trajectory.append(record.best_so_far)
        return record

    def to_dict(self) -> Dict[str, Any]:
        """Convert history to dictionary for serialization."""
        return {
            'generations': [g.to_dict() for g in self.generations],
            'fitness_trajectory': self.fitness_trajectory,
            'best_so_far_trajectory': self.best_so_far_trajectory,
        }

    def should_early_stop(
        self,
        patience: int = 10,
        min_improvement: float = 1e-6,
    ) -> bool:
        """
        Check whether the best-so-far fitness has stalled.

        Args:
            patience: Generations without improvement before stopping
            min_improvement: Minimum decrease to count as progress

        Returns:
            True if should stop, False otherwise
        """
        # Need at least patience + 1 generations to compare
        if len(self.best_so_far_trajectory) <= patience:
            return False

        older_best = self.best_so_far_trajectory[-(patience + 1)]
        recent_best = self.best_so_far_trajectory[-1]
        if math.isinf(older_best):
            return False
        return older_best - recent_best < min_improvement
