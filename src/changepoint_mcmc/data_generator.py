"""
Change-Point MCMC — Synthetic Data Generator
=============================================
Draws noisy observations from a fully specified change-point model.

Times are uniform over one day [0, 24) and sorted ascending. The regime
boundary is half-open: an observation at exactly t == τ belongs to regime 2,
the same rule the likelihood uses.

License: MIT
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .config import Params, DAY_START, DAY_END


@dataclass(frozen=True)
class DataPoint:
    """One noisy observation."""
    time: float    # Hours in [0, 24)
    value: float


def generate_data(true_params: Params,
                  known_sigma: float,
                  count: int,
                  rng: Optional[np.random.Generator] = None) -> Tuple[DataPoint, ...]:
    """Generate `count` observations from the true change-point model.

    Args:
        true_params: Generating (τ, μ1, μ2)
        known_sigma: Measurement noise standard deviation
        count: Number of observations
        rng: Random source (fresh default generator if None)

    Returns:
        Tuple of DataPoint sorted by time
    """
    if rng is None:
        rng = np.random.default_rng()

    times = np.sort(rng.uniform(DAY_START, DAY_END, size=count))
    means = np.where(times < true_params.tau, true_params.mu1, true_params.mu2)
    values = means + known_sigma * rng.standard_normal(count)

    return tuple(DataPoint(time=float(t), value=float(v))
                 for t, v in zip(times, values))


def data_to_arrays(data: Sequence[DataPoint]) -> Tuple[np.ndarray, np.ndarray]:
    """Split a dataset into (times, values) float arrays."""
    times = np.fromiter((p.time for p in data), dtype=float, count=len(data))
    values = np.fromiter((p.value for p in data), dtype=float, count=len(data))
    return times, values
