"""
Tests for the evolution driver and configuration.

Run with: python -m pytest tests/test_engine.py -v
"""

import itertools
import random
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from anomaly_evolution.datasets.synthetic import make_corpus, sine_wave
from anomaly_evolution.evolution.engine import (
    EvolutionConfig,
    EvolutionEngine,
    run_evolution,
    STOP_EARLY,
    STOP_FITNESS_TARGET,
    STOP_MAX_GENERATIONS,
    STOP_TIME_BUDGET,
)
from anomaly_evolution.evolution.errors import ConfigurationError, DataError


@pytest.fixture
def training_data():
    return make_corpus(['sine'], n_series=2, seed=3, n_samples=120, period=20.0)


def small_config(**overrides):
    params = dict(
        population_size=10,
        gene_length=10,
        fitness_target=0.0,
        max_generations=5,
        seed=42,
    )
    params.update(overrides)
    return EvolutionConfig(**params)


class TestEvolutionConfig:
    """Tests for configuration validation."""

    def test_defaults_are_valid(self):
        config = EvolutionConfig()
        config.validate()

        assert config.population_size == 30
        assert config.gene_length == 60
        assert config.selection_rates == (50, 25, 25)
        assert config.fitness_target == 4.05
        assert config.max_duration_seconds == 3600

    @pytest.mark.parametrize('overrides', [
        {'selection_rates': (50, 25, 20)},
        {'population_size': 1},
        {'gene_length': 1},
        {'crossover_rate': -1},
        {'mutation_rates': (10, 150)},
        {'population_size': 10, 'selection_rates': (0, 100, 0)},
        {'max_duration_seconds': 0},
        {'max_generations': 0},
        {'early_stop_patience': 0},
    ])
    def test_invalid_configs(self, overrides):
        with pytest.raises(ConfigurationError):
            EvolutionConfig(**overrides).validate()

    def test_randomized(self):
        for seed in range(20):
            config = EvolutionConfig.randomized(random.Random(seed))
            config.validate()

            assert 10 <= config.population_size < 60
            assert 5 <= config.crossover_rate < 25
            assert 1 <= config.mutation_rates[0] < 15
            assert 1 <= config.mutation_rates[1] < 10

    def test_randomized_overrides(self):
        config = EvolutionConfig.randomized(random.Random(0), gene_length=12, population_size=11)

        assert config.gene_length == 12
        assert config.population_size == 11

    def test_dict_round_trip(self):
        config = small_config(selection_rates=(60, 20, 20))

        restored = EvolutionConfig.from_dict(config.to_dict())

        assert restored == config


class TestEvolutionEngine:
    """Tests for the generation loop."""

    def test_rejects_gene_length_longer_than_series(self, training_data):
        with pytest.raises(ConfigurationError):
            EvolutionEngine(small_config(gene_length=120), training_data)

    def test_rejects_empty_dataset(self):
        with pytest.raises(DataError):
            EvolutionEngine(small_config(), {})

    def test_stops_at_max_generations(self, training_data):
        engine = EvolutionEngine(small_config(), training_data)
        engine.initialize_population()

        result = engine.evolve()

        assert result.stop_reason == STOP_MAX_GENERATIONS
        assert result.generations_completed == 5
        assert len(result.history) == 5
        assert len(engine.population) == 10

    def test_stops_at_fitness_target(self, training_data):
        engine = EvolutionEngine(small_config(fitness_target=1e9), training_data)

        result = engine.evolve()

        assert result.stop_reason == STOP_FITNESS_TARGET
        assert result.generations_completed == 1

    def test_stops_at_time_budget(self, training_data):
        ticks = itertools.count(0, 10)
        config = small_config(max_generations=100, max_duration_seconds=25)
        engine = EvolutionEngine(config, training_data, clock=lambda: next(ticks))

        result = engine.evolve()

        assert result.stop_reason == STOP_TIME_BUDGET
        assert result.generations_completed < 100

    def test_early_stop(self, training_data):
        config = small_config(
            max_generations=None,
            early_stop_patience=3,
            early_stop_min_improvement=1e9,
        )
        engine = EvolutionEngine(config, training_data)

        result = engine.evolve()

        assert result.stop_reason == STOP_EARLY
        assert result.generations_completed == 4

    def test_champion_is_best_seen(self, training_data):
        engine = EvolutionEngine(small_config(max_generations=15), training_data)

        result = engine.evolve()

        trajectory = result.history.fitness_trajectory
        assert result.best_fitness == min(trajectory)
        assert result.history.best_so_far_trajectory[-1] == min(trajectory)
        assert all(c is not result.best_chromosome for c in engine.population)

        # The stored fitness matches a fresh evaluation of the genes
        assert result.best_chromosome.calculate_dataset_fitness(training_data) == pytest.approx(
            result.best_fitness
        )

    def test_seeded_runs_are_reproducible(self, training_data):
        first = EvolutionEngine(small_config(max_generations=8), training_data).evolve()
        second = EvolutionEngine(small_config(max_generations=8), training_data).evolve()

        assert first.history.fitness_trajectory == second.history.fitness_trajectory
        np.testing.assert_array_equal(first.best_chromosome.genes, second.best_chromosome.genes)

    def test_progress_callback(self, training_data):
        calls = []
        engine = EvolutionEngine(small_config(max_generations=3), training_data)

        engine.evolve(progress_callback=lambda gen, stats: calls.append((gen, stats.best_fitness)))

        assert [gen for gen, _ in calls] == [1, 2, 3]

    def test_evaluate_holdout(self, training_data):
        engine = EvolutionEngine(small_config(), training_data)
        engine.evolve()
        champion_fitness = engine.champion.fitness

        good = make_corpus(['sine'], n_series=2, seed=50, n_samples=120, period=20.0)
        bad = make_corpus(
            ['sine'], n_series=2, seed=60, n_samples=120, period=20.0,
            anomalous=True, n_anomalies=10,
        )
        results = engine.evaluate_holdout({'good': good, 'bad': bad})

        assert set(results) == {'good', 'bad'}
        assert results['bad'] > results['good']
        assert engine.champion.fitness == champion_fitness

    def test_evaluate_holdout_before_evolve(self, training_data):
        engine = EvolutionEngine(small_config(), training_data)

        with pytest.raises(ConfigurationError):
            engine.evaluate_holdout({'good': training_data})

    def test_series_report(self, training_data):
        engine = EvolutionEngine(small_config(max_generations=2), training_data)
        engine.evolve()

        report = engine.series_report(training_data)

        assert set(report) == set(training_data)
        assert np.mean(list(report.values())) == pytest.approx(engine.champion.fitness)


class TestIntegration:
    """End-to-end runs on a periodic series."""

    def test_best_so_far_is_monotone(self):
        training = {'sine': sine_wave(n_samples=200, period=25.0, noise=0.0)}
        config = EvolutionConfig(
            population_size=10,
            gene_length=25,
            fitness_target=0.0,
            max_generations=30,
            seed=2024,
        )

        result = run_evolution(training, config)

        best_so_far = result.history.best_so_far_trajectory
        assert len(best_so_far) == 30
        assert all(b <= a for a, b in zip(best_so_far, best_so_far[1:]))
        # Per-generation best is reported separately and may go up
        assert len(result.history.fitness_trajectory) == 30
        assert best_so_far[-1] <= best_so_far[0]

    def test_result_serialization(self, training_data):
        result = run_evolution(
            training_data,
            small_config(max_generations=3),
            holdout={'good': training_data},
        )

        d = result.to_dict()

        assert len(d['fitness_history']) == 3
        assert len(d['best_chromosome']['genes']) == 10
        assert d['holdout_fitness']['good'] == pytest.approx(result.best_fitness)
        assert d['config']['population_size'] == 10
        assert 'Best fitness (training)' in result.summary()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
