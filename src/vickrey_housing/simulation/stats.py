"""Market statistics snapshot

Pure functions of engine state; nothing here mutates the engine.
"""

import math

import numpy as np

from ..markets.auction import summarize
from .recorder import MarketSnapshot

TOP_SHARE = 0.10


def gini_coefficient(values) -> float:
    """sum|wi - wj| / (2 n^2 mean); 0 for n <= 1 or zero total

    Uses the sorted-rank identity sum_ij |wi - wj| = 2 sum_k (2k - n + 1) w_(k).
    """
    w = np.sort(np.asarray(values, dtype=np.float64))
    n = len(w)
    total = float(w.sum()) if n else 0.0
    if n <= 1 or total <= 0:
        return 0.0
    k = np.arange(n, dtype=np.float64)
    g = float(np.sum((2.0 * k - n + 1.0) * w)) / (n * total)
    return min(max(g, 0.0), 1.0)


def top_decile_share(values, share: float = TOP_SHARE) -> float:
    """Fraction of total wealth held by the richest ceil(share * n)"""
    w = np.sort(np.asarray(values, dtype=np.float64))[::-1]
    n = len(w)
    total = float(w.sum()) if n else 0.0
    if n == 0 or total <= 0:
        return 0.0
    k = max(1, math.ceil(share * n))
    return float(w[:k].sum() / total)


def _describe(values) -> tuple[float, float, float, float]:
    """(mean, median, min, max), zeros for an empty array"""
    if len(values) == 0:
        return 0.0, 0.0, 0.0, 0.0
    return (float(np.mean(values)), float(np.median(values)),
            float(np.min(values)), float(np.max(values)))


def compute_snapshot(engine) -> MarketSnapshot:
    """Statistics for the engine's current state"""
    agents = engine.agents
    houses = engine.houses
    intrinsicness = engine.config.housing.intrinsicness

    n_people = agents.n
    housed = int(agents.housed_mask().sum())
    unhoused = int(agents.unhoused_mask().sum())
    occupied = int(houses.occupied_mask().sum())

    wealth = agents.wealth
    avg_w, med_w, min_w, max_w = _describe(wealth)
    values = houses.value(intrinsicness)
    avg_v, med_v, min_v, max_v = _describe(values)

    report = summarize(engine.last_auction_results)

    return MarketSnapshot(
        tick=engine.tick_count,
        year=engine.current_year,

        total_participants=n_people,
        housed_participants=housed,
        unhoused_participants=unhoused,
        housing_rate=housed / n_people if n_people else 0.0,

        total_dwellings=houses.n,
        occupied_dwellings=occupied,
        available_dwellings=houses.n - occupied,
        occupancy_rate=occupied / houses.n,

        average_wealth=avg_w,
        median_wealth=med_w,
        min_wealth=min_w,
        max_wealth=max_w,
        wealth_range=max_w - min_w,
        gini_coefficient=gini_coefficient(wealth),
        wealth_concentration=top_decile_share(wealth),

        average_dwelling_value=avg_v,
        median_dwelling_value=med_v,
        min_dwelling_value=min_v,
        max_dwelling_value=max_v,
        dwelling_value_range=max_v - min_v,

        market_velocity=report.successful_sales,
        affordability_ratio=avg_v / avg_w if avg_w > 0 else 0.0,

        auctions_attempted=report.total_auctioned,
        auctions_sold=report.successful_sales,
        auction_success_rate=(report.successful_sales / report.total_auctioned
                              if report.total_auctioned else 0.0),
        average_clearing_price=report.average_price,
        total_revenue=report.total_revenue,
    )
