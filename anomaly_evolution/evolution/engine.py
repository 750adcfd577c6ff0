"""
Main evolutionary optimization engine.

Orchestrates the evolution loop:
1. Evaluate fitness of every chromosome against the training series
2. Record the best chromosome and the generation statistics
3. Stop if the fitness target, time budget or generation cap is reached
4. Selection (random + tournament + fresh blood)
5. Crossover
6. Mutation
7. Repeat

After the loop the best chromosome found can be re-evaluated against held-out
datasets (e.g. known-good and known-anomalous series).
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import logging
import random
import time

from .chromosome import Chromosome, DEFAULT_GENE_LENGTH
from .errors import ConfigurationError
from .fitness import Dataset, dataset_fitness_report, validate_dataset
from .history import EvolutionHistory, GenerationStats
from .operators import check_tournament_feasible, selection_counts
from .population import Population


logger = logging.getLogger(__name__)

# Stop reasons
STOP_FITNESS_TARGET = 'fitness_target'
STOP_TIME_BUDGET = 'time_budget'
STOP_MAX_GENERATIONS = 'max_generations'
STOP_EARLY = 'early_stop'


@dataclass
class EvolutionConfig:
    """Configuration for an evolution run."""
    # Population parameters
    population_size: int = 30
    gene_length: int = DEFAULT_GENE_LENGTH

    # Operator rates, all in percent
    selection_rates: Tuple[float, float, float] = (50, 25, 25)
    crossover_rate: float = 10
    mutation_rates: Tuple[float, float] = (10, 5)

    # Termination
    fitness_target: float = 4.05
    max_duration_seconds: float = 3600
    max_generations: Optional[int] = None
    early_stop_patience: Optional[int] = None
    early_stop_min_improvement: float = 1e-6

    # Reproducibility
    seed: Optional[int] = None

    def validate(self) -> None:
        """
        Reject configurations the engine cannot run.

        Raises:
            ConfigurationError: describing the first problem found
        """
        if self.population_size < 2:
            raise ConfigurationError(
                f"Population size must be at least 2, got {self.population_size}"
            )
        if self.gene_length < 2:
            raise ConfigurationError(f"Gene length must be at least 2, got {self.gene_length}")

        rates = list(self.selection_rates) + [self.crossover_rate] + list(self.mutation_rates)
        if any(not 0 <= r <= 100 for r in rates):
            raise ConfigurationError(f"Rates must be percentages in [0, 100]: {rates}")
        if len(self.mutation_rates) != 2:
            raise ConfigurationError(
                f"Expected (individual, gene) mutation rates, got {self.mutation_rates}"
            )

        selection_counts(self.selection_rates, self.population_size)
        check_tournament_feasible(self.selection_rates, self.population_size)

        if self.max_duration_seconds <= 0:
            raise ConfigurationError("Time budget must be positive")
        if self.max_generations is not None and self.max_generations < 1:
            raise ConfigurationError("max_generations must be at least 1")
        if self.early_stop_patience is not None and self.early_stop_patience < 1:
            raise ConfigurationError("early_stop_patience must be at least 1")

    @classmethod
    def randomized(cls, rng: Optional[random.Random] = None, **overrides) -> 'EvolutionConfig':
        """
        Sample population size and operator rates at random.

        Ranges: population [10, 60), crossover [5, 25)%, individual mutation
        [1, 15)%, gene mutation [1, 10)%. Keyword arguments override any field.
        """
        rng = rng or random.Random()
        params = {
            'population_size': rng.randrange(10, 60),
            'crossover_rate': rng.randrange(5, 25),
            'mutation_rates': (rng.randrange(1, 15), rng.randrange(1, 10)),
        }
        params.update(overrides)
        return cls(**params)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['selection_rates'] = list(self.selection_rates)
        d['mutation_rates'] = list(self.mutation_rates)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionConfig':
        data = dict(data)
        if 'selection_rates' in data:
            data['selection_rates'] = tuple(data['selection_rates'])
        if 'mutation_rates' in data:
            data['mutation_rates'] = tuple(data['mutation_rates'])
        return cls(**data)


@dataclass
class EvolutionResult:
    """Results from an evolution run."""
    best_chromosome: Chromosome
    history: EvolutionHistory
    generations_completed: int
    runtime_seconds: float
    stop_reason: str
    config: EvolutionConfig
    holdout_fitness: Dict[str, float] = field(default_factory=dict)

    @property
    def best_fitness(self) -> float:
        return self.best_chromosome.fitness

    def summary(self) -> str:
        """Generate summary string."""
        lines = [
            f"Generations: {self.generations_completed}",
            f"Stop reason: {self.stop_reason}",
            f"Runtime: {self.runtime_seconds:.1f}s",
            f"Best fitness (training): {self.best_fitness:.4f}",
        ]
        for name, value in self.holdout_fitness.items():
            lines.append(f"Fitness ({name}): {value:.4f}")
        return '\n'.join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'best_chromosome': self.best_chromosome.to_dict(),
            'best_fitness': self.best_fitness,
            'fitness_history': self.history.fitness_trajectory,
            'best_so_far_history': self.history.best_so_far_trajectory,
            'generations_completed': self.generations_completed,
            'runtime_seconds': self.runtime_seconds,
            'stop_reason': self.stop_reason,
            'holdout_fitness': self.holdout_fitness,
            'config': self.config.to_dict(),
        }


class EvolutionEngine:
    """
    Evolves sliding-window predictors against a training dataset.

    The engine owns the population and threads a single random source
    through every stochastic step.
    """

    def __init__(
        self,
        config: EvolutionConfig,
        training_data: Dataset,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize evolution engine.

        Args:
            config: Evolution configuration
            training_data: Series identifier -> samples
            rng: Random source (defaults to one seeded from config.seed)
            clock: Monotonic time source in seconds

        Raises:
            ConfigurationError: invalid config or gene length too long
            DataError: empty training dataset
        """
        config.validate()
        validate_dataset(training_data, config.gene_length)

        self.config = config
        self.training_data = training_data
        self.rng = rng or random.Random(config.seed)
        self.clock = clock

        self.population: Optional[Population] = None
        self.champion: Optional[Chromosome] = None
        self.history = EvolutionHistory()
        self.generation = 0
        self._start_time: Optional[float] = None

    def initialize_population(self) -> None:
        """Create the initial random population and reset run state."""
        self.population = Population.random(
            self.config.population_size,
            self.config.gene_length,
            self.rng,
        )
        self.champion = None
        self.history = EvolutionHistory()
        self.generation = 0
        self._start_time = self.clock()

    def evaluate_population(self) -> Chromosome:
        """
        Evaluate every chromosome and update the champion.

        Returns:
            The best chromosome of the current population
        """
        if self.population is None:
            raise ConfigurationError("Population not initialized")

        self.population.evaluate(self.training_data)
        best = self.population.best()
        if self.champion is None or best.fitness < self.champion.fitness:
            self.champion = best.copy()
        return best

    def advance(self) -> None:
        """Apply selection, crossover and mutation to produce the next generation."""
        self.population.selection(self.config.selection_rates)
        self.population.crossover(self.config.crossover_rate)
        self.population.mutation(self.config.mutation_rates)

    def _elapsed(self) -> float:
        return self.clock() - self._start_time

    def _stop_reason(self, best: Chromosome) -> Optional[str]:
        if best.fitness < self.config.fitness_target:
            return STOP_FITNESS_TARGET
        if self._elapsed() > self.config.max_duration_seconds:
            return STOP_TIME_BUDGET
        if (self.config.max_generations is not None
                and self.generation >= self.config.max_generations):
            return STOP_MAX_GENERATIONS
        if self.config.early_stop_patience is not None and self.history.should_early_stop(
            patience=self.config.early_stop_patience,
            min_improvement=self.config.early_stop_min_improvement,
        ):
            return STOP_EARLY
        return None

    def run_generation(self) -> GenerationStats:
        """Evaluate the current generation and record it (no advancement)."""
        self.generation += 1
        best = self.evaluate_population()
        stats = self.history.record_generation(
            generation=self.generation,
            population=self.population,
            elapsed_seconds=self._elapsed(),
        )
        logger.info(
            "Generation %d: best %.4f, best so far %.4f, mean %.4f",
            self.generation, best.fitness, stats.best_so_far, stats.mean_fitness,
        )
        return stats

    def evolve(
        self,
        progress_callback: Optional[Callable[[int, GenerationStats], None]] = None,
    ) -> EvolutionResult:
        """
        Run the generation loop until a stop condition is met.

        Args:
            progress_callback: Optional callback(generation, stats)

        Returns:
            EvolutionResult with the best chromosome and the fitness history
        """
        if self.population is None:
            self.initialize_population()

        self._start_time = self.clock()

        while True:
            stats = self.run_generation()

            if progress_callback:
                progress_callback(self.generation, stats)

            stop_reason = self._stop_reason(self.population.best())
            if stop_reason:
                break

            self.advance()

        runtime = self._elapsed()
        logger.info(
            "Evolution stopped after %d generations (%s), best fitness %.4f",
            self.generation, stop_reason, self.champion.fitness,
        )

        return EvolutionResult(
            best_chromosome=self.champion.copy(),
            history=self.history,
            generations_completed=self.generation,
            runtime_seconds=runtime,
            stop_reason=stop_reason,
            config=self.config,
        )

    def evaluate_holdout(
        self,
        datasets: Mapping[str, Dataset],
        chromosome: Optional[Chromosome] = None,
    ) -> Dict[str, float]:
        """
        Mean fitness of a chromosome (the champion by default) on each named
        held-out dataset. The chromosome's stored fitness is not changed.
        """
        chromosome = chromosome or self.champion
        if chromosome is None:
            raise ConfigurationError("No chromosome to evaluate; run evolve() first")

        results = {}
        for name, dataset in datasets.items():
            validate_dataset(dataset, chromosome.length)
            results[name] = chromosome.calculate_dataset_fitness(dataset)
            logger.info("Held-out fitness (%s): %.4f", name, results[name])
        return results

    def series_report(
        self,
        dataset: Dataset,
        chromosome: Optional[Chromosome] = None,
    ) -> Dict[str, float]:
        """Per-series fitness of the champion (or the given chromosome)."""
        chromosome = chromosome or self.champion
        if chromosome is None:
            raise ConfigurationError("No chromosome to evaluate; run evolve() first")
        return dataset_fitness_report(chromosome, dataset)


def run_evolution(
    training_data: Dataset,
    config: Optional[EvolutionConfig] = None,
    holdout: Optional[Mapping[str, Dataset]] = None,
    progress_callback: Optional[Callable[[int, GenerationStats], None]] = None,
) -> EvolutionResult:
    """Convenience wrapper: build an engine, evolve, evaluate held-out sets."""
    engine = EvolutionEngine(config or EvolutionConfig(), training_data)
    engine.initialize_population()
    result = engine.evolve(progress_callback=progress_callback)
    if holdout:
        result.holdout_fitness = engine.evaluate_holdout(holdout)
    return result
