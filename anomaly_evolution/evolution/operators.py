"""
Evolutionary operators: selection, crossover, and mutation.

These operators drive the evolutionary search by:
- Selecting survivors (random, tournament) and injecting fresh blood
- Swapping gene segments between chromosomes
- Overwriting genes with fresh random values

Every operator takes an explicit ``random.Random`` so a seeded run is
reproducible. Selection is consumptive: a survivor is removed from the pool
it was drawn from, so no individual is selected twice in one pass.
"""

import random
from typing import List, Tuple

from .chromosome import Chromosome
from .errors import ConfigurationError


# =============================================================================
# Selection Operators
# =============================================================================

def _take(pool: List[Chromosome], index: int) -> Chromosome:
    """Remove pool[index] by swapping in the last element (order not kept)."""
    chosen = pool[index]
    pool[index] = pool[-1]
    pool.pop()
    return chosen


def tournament_window(population_size: int) -> int:
    """Size of the contiguous window each tournament is drawn from."""
    return max(population_size // 10, 2)


def random_selection(
    pool: List[Chromosome],
    n_select: int,
    rng: random.Random,
) -> List[Chromosome]:
    """
    Move ``n_select`` uniformly random individuals out of ``pool``.

    Args:
        pool: Remaining individuals (modified in place)
        n_select: Number of individuals to select
        rng: Random source

    Returns:
        Selected individuals, each drawn at most once
    """
    if n_select > len(pool):
        raise ConfigurationError(
            f"Cannot randomly select {n_select} individuals from {len(pool)}"
        )
    return [_take(pool, rng.randrange(len(pool))) for _ in range(n_select)]


def tournament_selection(
    pool: List[Chromosome],
    n_select: int,
    window: int,
    rng: random.Random,
) -> List[Chromosome]:
    """
    Tournament selection without replacement.

    Each tournament picks a random contiguous window of ``window`` individuals
    from what is left of the pool and moves its lowest-fitness member out.
    Ties go to the first occurrence in the window.

    Raises:
        ConfigurationError: if the pool shrinks below the window size
    """
    selected = []

    for _ in range(n_select):
        if len(pool) < window:
            raise ConfigurationError(
                f"Tournament window of {window} cannot be formed from "
                f"{len(pool)} remaining individuals; selection rates and "
                f"population size are incompatible"
            )

        start = rng.randint(0, len(pool) - window)
        winner = start
        for i in range(start + 1, start + window):
            if pool[i].fitness < pool[winner].fitness:
                winner = i
        selected.append(_take(pool, winner))

    return selected


def inject_fresh_blood(
    survivors: List[Chromosome],
    n_fresh: int,
    gene_length: int,
    rng: random.Random,
) -> None:
    """Insert ``n_fresh`` new random chromosomes at random positions."""
    for _ in range(n_fresh):
        position = rng.randint(0, len(survivors))
        survivors.insert(position, Chromosome.random(gene_length, rng))


# =============================================================================
# Crossover Operators
# =============================================================================

def segment_crossover(
    first: Chromosome,
    second: Chromosome,
    rng: random.Random,
) -> Tuple[int, int, int]:
    """
    Swap one contiguous gene segment between two chromosomes, in place.

    The segment length is drawn from [1, L/2] and each chromosome gets its
    own start offset, so the segment can move to a different position.

    Example:
        first:  [a b c d e f]    length=2, start1=1, start2=3
        second: [u v w x y z]
        after:  [a x y d e f] / [u v w b c z]

    Returns:
        (segment_length, first_start, second_start)
    """
    shortest = min(first.length, second.length)
    if shortest < 2:
        raise ConfigurationError("Crossover needs chromosomes with at least 2 genes")

    length = rng.randint(1, shortest // 2)
    first_start = rng.randint(0, first.length - length)
    second_start = rng.randint(0, second.length - length)

    first_slice = slice(first_start, first_start + length)
    second_slice = slice(second_start, second_start + length)

    segment = first.genes[first_slice].copy()
    first.genes[first_slice] = second.genes[second_slice]
    second.genes[second_slice] = segment

    return length, first_start, second_start


# =============================================================================
# Mutation Operators
# =============================================================================

def mutate_chromosome(
    chromosome: Chromosome,
    n_genes: int,
    rng: random.Random,
) -> List[int]:
    """
    Overwrite ``n_genes`` randomly chosen genes with fresh values in [0, 1).

    Positions may repeat. Fitness is left stale until the next evaluation.

    Returns:
        The mutated positions, in the order they were drawn
    """
    positions = [rng.randrange(chromosome.length) for _ in range(n_genes)]
    for position in positions:
        chromosome.genes[position] = rng.random()
    return positions


# =============================================================================
# Helper Functions
# =============================================================================

def percent_of(rate: float, total: int) -> int:
    """round(rate% of total), with halves rounded up."""
    return int(rate * total / 100.0 + 0.5)


def selection_counts(
    rates: Tuple[float, float, float],
    population_size: int,
) -> Tuple[int, int, int]:
    """
    Convert (random, tournament, fresh) percentages into individual counts.

    Tournament and fresh counts are floored; the random count absorbs the
    remainder so the three always add up to ``population_size``.

    Raises:
        ConfigurationError: if the rates are negative or do not sum to 100
    """
    if len(rates) != 3:
        raise ConfigurationError(f"Expected three selection rates, got {len(rates)}")
    if any(r < 0 for r in rates):
        raise ConfigurationError(f"Selection rates must be non-negative: {rates}")
    if abs(sum(rates) - 100) > 1e-9:
        raise ConfigurationError(
            f"Selection rates must sum to 100, got {sum(rates)} from {tuple(rates)}"
        )

    _, tournament_rate, fresh_rate = rates
    n_tournament = int(tournament_rate * population_size // 100)
    n_fresh = int(fresh_rate * population_size // 100)
    n_random = population_size - n_tournament - n_fresh
    return n_random, n_tournament, n_fresh


def check_tournament_feasible(
    rates: Tuple[float, float, float],
    population_size: int,
) -> None:
    """
    Raise ConfigurationError if the configured tournaments would run out of
    individuals to draw their window from.
    """
    n_random, n_tournament, _ = selection_counts(rates, population_size)
    if n_tournament == 0:
        return

    window = tournament_window(population_size)
    # Pool left for the last tournament
    remaining = population_size - n_random - (n_tournament - 1)
    if remaining < window:
        raise ConfigurationError(
            f"Population of {population_size} is too small for {n_tournament} "
            f"tournaments of window {window} after {n_random} random selections"
        )
