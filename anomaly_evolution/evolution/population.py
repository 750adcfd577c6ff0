"""
Population management for the evolutionary search.

Handles:
- Initial population creation (uniform random genes)
- Generation advancement: selection, crossover, mutation
- Population statistics for reporting

The population size never changes: selection rebuilds a collection of
exactly the same size, crossover and mutation work in place.
"""

import random
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from .chromosome import Chromosome, DEFAULT_GENE_LENGTH
from .errors import ConfigurationError
from .fitness import Dataset, set_fitness_for_dataset
from .operators import (
    check_tournament_feasible,
    inject_fresh_blood,
    mutate_chromosome,
    percent_of,
    random_selection,
    segment_crossover,
    selection_counts,
    tournament_selection,
    tournament_window,
)


class Population:
    """
    Ordered, mutable collection of chromosomes with a fixed size.

    All stochastic operations draw from the injected ``rng``.
    """

    def __init__(
        self,
        chromosomes: List[Chromosome],
        rng: Optional[random.Random] = None,
    ):
        if not chromosomes:
            raise ConfigurationError("A population needs at least one chromosome")

        lengths = {c.length for c in chromosomes}
        if len(lengths) != 1:
            raise ConfigurationError(f"Chromosomes have mixed gene lengths: {sorted(lengths)}")

        self.chromosomes = list(chromosomes)
        self.rng = rng or random.Random()

    @classmethod
    def random(
        cls,
        size: int,
        gene_length: int = DEFAULT_GENE_LENGTH,
        rng: Optional[random.Random] = None,
    ) -> 'Population':
        """Create a population of ``size`` random chromosomes."""
        if size < 1:
            raise ConfigurationError(f"Population size must be positive, got {size}")
        if gene_length < 1:
            raise ConfigurationError(f"Gene length must be positive, got {gene_length}")

        rng = rng or random.Random()
        return cls([Chromosome.random(gene_length, rng) for _ in range(size)], rng)

    def __len__(self) -> int:
        return len(self.chromosomes)

    def __iter__(self) -> Iterator[Chromosome]:
        return iter(self.chromosomes)

    def __getitem__(self, index: int) -> Chromosome:
        return self.chromosomes[index]

    @property
    def gene_length(self) -> int:
        return self.chromosomes[0].length

    def evaluate(self, dataset: Dataset) -> None:
        """Recompute the fitness of every chromosome."""
        set_fitness_for_dataset(self.chromosomes, dataset)

    def best_index(self) -> int:
        """Index of the lowest-fitness chromosome (first one on ties)."""
        return min(range(len(self.chromosomes)), key=lambda i: self.chromosomes[i].fitness)

    def best(self) -> Chromosome:
        return self.chromosomes[self.best_index()]

    def selection(self, rates: Tuple[float, float, float]) -> None:
        """
        Replace the population with the survivors of one selection pass.

        Args:
            rates: (random %, tournament %, fresh blood %), summing to 100

        Raises:
            ConfigurationError: bad rates, or a tournament window that
                cannot be formed from the remaining individuals
        """
        size = len(self.chromosomes)
        n_random, n_tournament, n_fresh = selection_counts(rates, size)
        check_tournament_feasible(rates, size)

        pool = list(self.chromosomes)
        survivors = random_selection(pool, n_random, self.rng)
        survivors.extend(
            tournament_selection(pool, n_tournament, tournament_window(size), self.rng)
        )
        inject_fresh_blood(survivors, n_fresh, self.gene_length, self.rng)

        if len(survivors) != size:
            raise AssertionError(
                f"Selection produced {len(survivors)} individuals, expected {size}"
            )
        self.chromosomes = survivors

    def crossover(self, rate: float) -> int:
        """
        Perform round(rate% x size) segment swaps between random pairs.

        Returns:
            Number of crossover events performed
        """
        size = len(self.chromosomes)
        events = percent_of(rate, size)
        if events and size < 2:
            raise ConfigurationError("Crossover needs at least two chromosomes")

        for _ in range(events):
            i, j = self.rng.sample(range(size), 2)
            segment_crossover(self.chromosomes[i], self.chromosomes[j], self.rng)
        return events

    def mutation(self, rates: Tuple[float, float]) -> int:
        """
        Mutate round(individual% x size) random chromosomes, each at
        round(gene% x L) random positions. Picks may repeat.

        Returns:
            Number of chromosome picks performed
        """
        individual_rate, gene_rate = rates
        size = len(self.chromosomes)
        n_individuals = percent_of(individual_rate, size)
        n_genes = percent_of(gene_rate, self.gene_length)

        for _ in range(n_individuals):
            chromosome = self.chromosomes[self.rng.randrange(size)]
            mutate_chromosome(chromosome, n_genes, self.rng)
        return n_individuals

    def fitness_values(self) -> np.ndarray:
        return np.array([c.fitness for c in self.chromosomes], dtype=np.float64)


def get_population_stats(population: Population) -> Dict[str, Any]:
    """
    Compute statistics about the population.

    Non-finite fitness values (degenerate chromosomes) are counted but left
    out of the mean and standard deviation.

    Args:
        population: Evaluated population

    Returns:
        Dictionary with population statistics
    """
    fitnesses = population.fitness_values()
    finite = fitnesses[np.isfinite(fitnesses)]
    gene_sums = np.array([c.gene_sum for c in population])

    return {
        'size': len(population),
        'gene_length': population.gene_length,
        'min_fitness': float(fitnesses.min()),
        'max_fitness': float(fitnesses.max()),
        'mean_fitness': float(finite.mean()) if finite.size else float('inf'),
        'std_fitness': float(finite.std()) if finite.size else 0.0,
        'degenerate_count': int(fitnesses.size - finite.size),
        'mean_gene_sum': float(gene_sums.mean()),
        'gene_diversity': compute_gene_diversity(population),
    }


def compute_gene_diversity(population: Population) -> float:
    """
    Mean per-position standard deviation of the genes.

    0.0 means every chromosome is identical; uniform random genes give
    roughly 0.29.
    """
    genes = np.vstack([c.genes for c in population])
    return float(genes.std(axis=0).mean())
