"""
Command line driver.

Usage:
    anomaly-evolution train --training-dir DIR [options]
    anomaly-evolution generate --output-dir DIR [options]

Training options:
    --good-dir DIR          Held-out series expected to be normal
    --bad-dir DIR           Held-out series expected to be anomalous
    --population N          Population size (default: 30)
    --gene-length L         Window length (default: 60)
    --selection R T F       Random / tournament / fresh blood percentages
    --crossover C           Crossover events as percent of population
    --mutation I G          Individual and gene mutation percentages
    --target F              Stop when best fitness drops below F
    --max-duration S        Wall-clock budget in seconds
    --max-generations N     Generation cap
    --patience N            Stop after N generations without improvement
    --seed N                Random seed for reproducibility
    --randomize             Sample population size and rates at random
    --output FILE           Write the result summary as JSON
    --export-predictions D  Write per-series prediction CSVs to D
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path

from .datasets.loader import load_series_directory, write_series_directory
from .datasets.synthetic import SERIES, make_corpus
from .evolution.engine import EvolutionConfig, EvolutionEngine
from .evolution.errors import EvolutionError
from .evolution.fitness import export_predictions


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='anomaly-evolution',
        description='Evolve sliding-window predictors for time-series anomaly detection',
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help='Log per-series fitness values'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    train = subparsers.add_parser('train', help='Run the genetic algorithm')
    train.add_argument('--training-dir', type=Path, default=Path('training_data'))
    train.add_argument('--good-dir', type=Path, default=None)
    train.add_argument('--bad-dir', type=Path, default=None)

    defaults = EvolutionConfig()
    train.add_argument(
        '--population', type=int, default=None,
        help=f'Population size (default: {defaults.population_size})'
    )
    train.add_argument(
        '--gene-length', type=int, default=defaults.gene_length,
        help=f'Genes per chromosome (default: {defaults.gene_length})'
    )
    train.add_argument(
        '--selection', type=float, nargs=3, default=list(defaults.selection_rates),
        metavar=('RANDOM', 'TOURNAMENT', 'FRESH'),
        help='Selection percentages, must sum to 100 (default: 50 25 25)'
    )
    train.add_argument(
        '--crossover', type=float, default=None,
        help=f'Crossover rate in percent (default: {defaults.crossover_rate})'
    )
    train.add_argument(
        '--mutation', type=float, nargs=2, default=None,
        metavar=('INDIVIDUAL', 'GENE'),
        help='Mutation percentages (default: 10 5)'
    )
    train.add_argument(
        '--target', type=float, default=defaults.fitness_target,
        help=f'Fitness target (default: {defaults.fitness_target})'
    )
    train.add_argument(
        '--max-duration', type=float, default=defaults.max_duration_seconds,
        help=f'Time budget in seconds (default: {defaults.max_duration_seconds})'
    )
    train.add_argument('--max-generations', type=int, default=None)
    train.add_argument('--patience', type=int, default=None)
    train.add_argument('--seed', type=int, default=None)
    train.add_argument(
        '--randomize', action='store_true',
        help='Sample population size, crossover and mutation rates at random'
    )
    train.add_argument('--output', type=Path, default=None)
    train.add_argument('--export-predictions', type=Path, default=None)

    generate = subparsers.add_parser('generate', help='Write synthetic series directories')
    generate.add_argument('--output-dir', type=Path, required=True)
    generate.add_argument(
        '--series', nargs='+', default=['sine', 'sawtooth'], choices=sorted(SERIES),
    )
    generate.add_argument('--count', type=int, default=3, help='Series per name and set')
    generate.add_argument('--samples', type=int, default=500)
    generate.add_argument('--anomalies', type=int, default=5)
    generate.add_argument('--seed', type=int, default=None)

    return parser.parse_args(argv)


def print_banner():
    print("=" * 70)
    print("   TIME-SERIES ANOMALY DETECTION - Evolutionary Predictor Search")
    print("=" * 70)


def print_config(config: EvolutionConfig, n_series: int):
    print("\nConfiguration:")
    print(f"   Population size:    {config.population_size}")
    print(f"   Gene length:        {config.gene_length}")
    print(f"   Selection rates:    {tuple(config.selection_rates)}")
    print(f"   Crossover rate:     {config.crossover_rate}")
    print(f"   Mutation rates:     {tuple(config.mutation_rates)}")
    print(f"   Fitness target:     {config.fitness_target}")
    print(f"   Time budget:        {config.max_duration_seconds}s")
    print(f"   Training series:    {n_series}")


def progress_callback(gen: int, stats):
    """Print progress during evolution."""
    print(
        f"\r   Gen {gen:4d} | "
        f"Best fitness: {stats.best_fitness:.4f} | "
        f"Best so far: {stats.best_so_far:.4f} | "
        f"Elapsed: {stats.elapsed_seconds:.1f}s",
        end='', flush=True
    )


def build_config(args) -> EvolutionConfig:
    params = dict(
        gene_length=args.gene_length,
        selection_rates=tuple(args.selection),
        fitness_target=args.target,
        max_duration_seconds=args.max_duration,
        max_generations=args.max_generations,
        early_stop_patience=args.patience,
        seed=args.seed,
    )
    # Explicit values win over both the defaults and --randomize
    if args.population is not None:
        params['population_size'] = args.population
    if args.crossover is not None:
        params['crossover_rate'] = args.crossover
    if args.mutation is not None:
        params['mutation_rates'] = tuple(args.mutation)

    if args.randomize:
        return EvolutionConfig.randomized(random.Random(args.seed), **params)
    return EvolutionConfig(**params)


def run_train(args) -> int:
    print_banner()

    config = build_config(args)
    training_data = load_series_directory(args.training_dir)
    print_config(config, len(training_data))

    engine = EvolutionEngine(config, training_data)
    engine.initialize_population()

    print("\n   Starting evolution...")
    result = engine.evolve(progress_callback=progress_callback)
    print()  # New line after progress

    holdout = {}
    if args.good_dir:
        holdout['good'] = load_series_directory(args.good_dir)
    if args.bad_dir:
        holdout['bad'] = load_series_directory(args.bad_dir)
    if holdout:
        result.holdout_fitness = engine.evaluate_holdout(holdout)

    print("\nBest Chromosome Fitnesses:")
    print(f"   {[round(f, 4) for f in result.history.fitness_trajectory]}")
    print(f"\nBest chromosome: {result.best_chromosome}")

    print("\n   Results:")
    print("   --------")
    for line in result.summary().splitlines():
        print(f"   {line}")

    if args.export_predictions:
        datasets = {'training': training_data, **holdout}
        for name, dataset in datasets.items():
            export_predictions(
                result.best_chromosome, dataset, args.export_predictions / name
            )
        print(f"\n   Predictions written to {args.export_predictions}")

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"   Summary written to {args.output}")

    return 0


def run_generate(args) -> int:
    base_seed = args.seed
    sets = {
        'training_data': (False, 0),
        'good_testing_data': (False, 1),
        'bad_testing_data': (True, 2),
    }

    for directory, (anomalous, offset) in sets.items():
        seed = None if base_seed is None else base_seed + 100000 * offset
        corpus = make_corpus(
            args.series,
            n_series=args.count,
            anomalous=anomalous,
            n_anomalies=args.anomalies,
            seed=seed,
            n_samples=args.samples,
        )
        written = write_series_directory(args.output_dir / directory, corpus)
        print(f"   {directory}: {len(written)} series")

    return 0


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        if args.command == 'train':
            return run_train(args)
        return run_generate(args)
    except EvolutionError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
