#!/usr/bin/env python3
"""
Quick Start - Minimal example to get started with evolutionary anomaly detection.

Evolves a predictor on clean synthetic series, then compares its error on
clean and spiked series. Anomalous series should score a higher RMSE.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from anomaly_evolution.datasets import make_corpus
from anomaly_evolution.evolution import EvolutionConfig, EvolutionEngine

print("Evolutionary Anomaly Detection - Quick Start")
print("="*40)

# Synthetic training and held-out sets
training = make_corpus(['sine', 'sawtooth'], n_series=3, seed=1)
good = make_corpus(['sine', 'sawtooth'], n_series=2, seed=100)
bad = make_corpus(['sine', 'sawtooth'], n_series=2, anomalous=True, n_anomalies=10, seed=200)
print(f"\nTraining series: {len(training)}")

config = EvolutionConfig(
    population_size=20,
    gene_length=30,
    max_generations=40,
    fitness_target=0.0,  # Run all generations
    seed=7,
)
engine = EvolutionEngine(config, training)
engine.initialize_population()

print("\nEvolving...")
result = engine.evolve()
result.holdout_fitness = engine.evaluate_holdout({'good': good, 'bad': bad})

print(f"\n{result.summary()}")
print("\nTry changing the population size or rates to experiment!")
