"""
Evolutionary search for sliding-window anomaly predictors.

This module provides a genetic algorithm that evolves linear predictors for
time series. Each chromosome weights a window of L samples to predict the
next one; its fitness is the prediction RMSE, so series that a well-trained
chromosome predicts badly are likely anomalous.

Key components:
- Chromosome: Fixed-length gene vector plus fitness
- set_fitness_for_dataset: Mean RMSE of each chromosome over a dataset
- Population: Selection, crossover and mutation over a fixed-size collection
- EvolutionEngine: Main evolutionary optimization loop

Example usage:
    from anomaly_evolution.evolution import EvolutionEngine, EvolutionConfig
    from anomaly_evolution.datasets import make_corpus

    training = make_corpus(['sine', 'sawtooth'], n_series=4, seed=1)

    config = EvolutionConfig(population_size=20, max_generations=50, seed=1)
    engine = EvolutionEngine(config, training)
    engine.initialize_population()
    result = engine.evolve()

    print(f"Best fitness: {result.best_fitness:.3f}")
"""

from .errors import EvolutionError, ConfigurationError, DataError
from .chromosome import Chromosome, create_random_chromosomes, DEFAULT_GENE_LENGTH
from .fitness import (
    Dataset,
    rmse,
    set_fitness_for_dataset,
    dataset_fitness_report,
    validate_dataset,
    export_predictions,
)
from .operators import (
    random_selection,
    tournament_selection,
    inject_fresh_blood,
    segment_crossover,
    mutate_chromosome,
    selection_counts,
    tournament_window,
)
from .population import Population, get_population_stats, compute_gene_diversity
from .history import EvolutionHistory, GenerationStats
from .engine import EvolutionEngine, EvolutionConfig, EvolutionResult, run_evolution

__all__ = [
    # Core classes
    'Chromosome',
    'Population',
    'EvolutionEngine',
    'EvolutionConfig',
    'EvolutionResult',
    'EvolutionHistory',
    'GenerationStats',
    # Errors
    'EvolutionError',
    'ConfigurationError',
    'DataError',
    # Chromosome helpers
    'create_random_chromosomes',
    'DEFAULT_GENE_LENGTH',
    # Fitness
    'Dataset',
    'rmse',
    'set_fitness_for_dataset',
    'dataset_fitness_report',
    'validate_dataset',
    'export_predictions',
    # Operators
    'random_selection',
    'tournament_selection',
    'inject_fresh_blood',
    'segment_crossover',
    'mutate_chromosome',
    'selection_counts',
    'tournament_window',
    # Population
    'get_population_stats',
    'compute_gene_diversity',
    # Driver
    'run_evolution',
]
