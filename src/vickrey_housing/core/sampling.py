"""Random variates for wealth, prices and turnover selection

All functions take an explicit ``np.random.Generator`` so a seeded run is
reproducible end to end.
"""

from typing import Sequence, TypeVar, Union
import numpy as np

T = TypeVar("T")

FLOOR_RATIO = 0.1       # samples never fall below 10% of the mean
WEALTH_NOISE_RATIO = 0.1


def sample_wealth(rng: np.random.Generator, mean: float, std: float, size=None):
    """Heavy-tailed wealth: exponential(mean) plus small Gaussian noise, floored at 0.1*mean"""
    base = rng.exponential(mean, size)
    noise = rng.normal(0.0, std * WEALTH_NOISE_RATIO, size)
    return np.maximum(base + noise, mean * FLOOR_RATIO)


def sample_price(rng: np.random.Generator, mean: float, std: float, size=None):
    """Gaussian price floored at 0.1*mean"""
    return np.maximum(rng.normal(mean, std, size), mean * FLOOR_RATIO)


def pick_k_without_replacement(
    rng: np.random.Generator,
    collection: Union[np.ndarray, Sequence[T]],
    k: int,
) -> Union[np.ndarray, list]:
    """Uniformly pick min(k, len) distinct elements. The input is not modified."""
    n = len(collection)
    k = min(max(int(k), 0), n)
    idx = rng.choice(n, size=k, replace=False) if k > 0 else np.array([], dtype=np.int64)

    if isinstance(collection, np.ndarray):
        return collection[idx]
    return [collection[i] for i in idx]
