"""
Synthetic time series for anomaly-detector experimentation.

These series are designed to:
1. Be periodic (a sliding-window average can learn to predict them)
2. Have different shapes (smooth, ramped, stepped, drifting)
3. Optionally carry injected anomalies (spikes) for "bad" test sets

Each generator returns a 1-D float array.
"""

from typing import Callable, Dict, List, Optional, Sequence

import numpy as np


def sine_wave(
    n_samples: int = 500,
    period: float = 50.0,
    amplitude: float = 10.0,
    offset: float = 50.0,
    noise: float = 0.5,
    phase: float = 0.0,
    seed: Optional[int] = None,
) -> np.ndarray:
    """
    Smooth sinusoid around ``offset``.

    Args:
        n_samples: Number of samples
        period: Samples per cycle
        amplitude: Peak deviation from the offset
        offset: Mean level
        noise: Standard deviation of Gaussian noise
        phase: Phase shift in radians
        seed: Random seed

    Returns:
        Series of shape (n_samples,)
    """
    rng = np.random.default_rng(seed)
    t = np.arange(n_samples)
    series = offset + amplitude * np.sin(2 * np.pi * t / period + phase)
    return series + rng.normal(0, noise, n_samples)


def sawtooth_wave(
    n_samples: int = 500,
    period: float = 50.0,
    amplitude: float = 10.0,
    offset: float = 50.0,
    noise: float = 0.5,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Linear ramp that resets every period."""
    rng = np.random.default_rng(seed)
    t = np.arange(n_samples)
    ramp = (t % period) / period  # 0 -> 1
    series = offset + amplitude * (2 * ramp - 1)
    return series + rng.normal(0, noise, n_samples)


def square_wave(
    n_samples: int = 500,
    period: float = 50.0,
    amplitude: float = 10.0,
    offset: float = 50.0,
    noise: float = 0.5,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Alternates between offset +/- amplitude every half period."""
    rng = np.random.default_rng(seed)
    t = np.arange(n_samples)
    series = offset + amplitude * np.where((t % period) < period / 2, 1.0, -1.0)
    return series + rng.normal(0, noise, n_samples)


def random_walk(
    n_samples: int = 500,
    step: float = 1.0,
    offset: float = 50.0,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Gaussian random walk starting at ``offset``. Not periodic."""
    rng = np.random.default_rng(seed)
    return offset + np.cumsum(rng.normal(0, step, n_samples))


def inject_anomalies(
    series: np.ndarray,
    n_anomalies: int = 5,
    magnitude: float = 5.0,
    seed: Optional[int] = None,
) -> np.ndarray:
    """
    Add spikes of +/- ``magnitude`` standard deviations at random positions.

    Returns a new array; the input is not modified.
    """
    rng = np.random.default_rng(seed)
    result = np.array(series, dtype=np.float64)
    if n_anomalies <= 0 or result.size == 0:
        return result

    scale = result.std() or 1.0
    positions = rng.choice(result.size, size=min(n_anomalies, result.size), replace=False)
    signs = rng.choice([-1.0, 1.0], size=positions.size)
    result[positions] += signs * magnitude * scale
    return result


# Series registry
SERIES: Dict[str, Dict] = {
    'sine': {
        'function': sine_wave,
        'name': 'Sine',
        'description': 'Smooth periodic signal',
        'periodic': True,
        'default_params': {'n_samples': 500, 'period': 50.0, 'noise': 0.5},
    },
    'sawtooth': {
        'function': sawtooth_wave,
        'name': 'Sawtooth',
        'description': 'Ramp with a sharp reset each period',
        'periodic': True,
        'default_params': {'n_samples': 500, 'period': 50.0, 'noise': 0.5},
    },
    'square': {
        'function': square_wave,
        'name': 'Square',
        'description': 'Two-level signal with abrupt transitions',
        'periodic': True,
        'default_params': {'n_samples': 500, 'period': 50.0, 'noise': 0.5},
    },
    'random_walk': {
        'function': random_walk,
        'name': 'Random Walk',
        'description': 'Drifting non-periodic baseline',
        'periodic': False,
        'default_params': {'n_samples': 500, 'step': 1.0},
    },
}


def get_series(name: str, **kwargs) -> np.ndarray:
    """
    Get a synthetic series by name.

    Args:
        name: Series name
        **kwargs: Override default parameters

    Returns:
        Series values
    """
    if name not in SERIES:
        available = ', '.join(SERIES.keys())
        raise ValueError(f"Unknown series '{name}'. Available: {available}")

    info = SERIES[name]
    params = info['default_params'].copy()
    params.update(kwargs)

    return info['function'](**params)


def list_series() -> Dict[str, Dict]:
    """List all available series with their metadata."""
    return {
        name: {k: v for k, v in info.items() if k != 'function'}
        for name, info in SERIES.items()
    }


def make_corpus(
    names: Sequence[str] = ('sine', 'sawtooth'),
    n_series: int = 3,
    anomalous: bool = False,
    n_anomalies: int = 5,
    seed: Optional[int] = None,
    **kwargs,
) -> Dict[str, np.ndarray]:
    """
    Build a dataset mapping of ``n_series`` variants of each named series.

    Args:
        names: Series names from SERIES
        n_series: Variants per name (each with its own noise seed)
        anomalous: Inject spikes into every series
        n_anomalies: Spikes per series when anomalous
        seed: Base random seed
        **kwargs: Passed to every generator

    Returns:
        Identifier (e.g. 'sine_0') -> values
    """
    corpus = {}
    for name_index, name in enumerate(names):
        for i in range(n_series):
            series_seed = None if seed is None else seed + 1000 * name_index + i
            series = get_series(name, seed=series_seed, **kwargs)
            if anomalous:
                series = inject_anomalies(series, n_anomalies=n_anomalies, seed=series_seed)
            corpus[f"{name}_{i}"] = series
    return corpus
