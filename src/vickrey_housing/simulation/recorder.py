"""Statistics recording"""

import json
from collections import deque
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Iterator

from pydantic import ConfigDict, TypeAdapter, ValidationError

from ..core.errors import HistoryImportError


@dataclass(frozen=True)
class MarketSnapshot:
    """Per-tick market statistics"""
    __pydantic_config__ = ConfigDict(extra="forbid")

    tick: int
    year: int

    # population
    total_participants: int
    housed_participants: int
    unhoused_participants: int
    housing_rate: float

    # dwellings
    total_dwellings: int
    occupied_dwellings: int
    available_dwellings: int
    occupancy_rate: float

    # wealth
    average_wealth: float
    median_wealth: float
    min_wealth: float
    max_wealth: float
    wealth_range: float
    gini_coefficient: float
    wealth_concentration: float     # top 10% share

    # dwelling value
    average_dwelling_value: float
    median_dwelling_value: float
    min_dwelling_value: float
    max_dwelling_value: float
    dwelling_value_range: float

    # market
    market_velocity: int             # dwellings sold last tick
    affordability_ratio: float       # mean value / mean wealth

    # auctions (last tick)
    auctions_attempted: int
    auctions_sold: int
    auction_success_rate: float
    average_clearing_price: float
    total_revenue: float

    def to_dict(self) -> dict:
        return asdict(self)


SNAPSHOT_FIELDS = tuple(f.name for f in fields(MarketSnapshot))
METRIC_NAMES = tuple(name for name in SNAPSHOT_FIELDS if name not in ("tick", "year"))

METRIC_CATEGORIES = {
    "population": ("total_participants", "housed_participants", "unhoused_participants", "housing_rate"),
    "housing": ("total_dwellings", "occupied_dwellings", "available_dwellings", "occupancy_rate"),
    "wealth": ("average_wealth", "median_wealth", "gini_coefficient", "wealth_concentration"),
    "market": ("average_dwelling_value", "median_dwelling_value", "affordability_ratio", "market_velocity"),
    "auctions": ("auction_success_rate", "average_clearing_price"),
}

_SNAPSHOT_LIST = TypeAdapter(list[MarketSnapshot])


class TimeSeries:
    """(tick, value) pairs over a frozen copy of the history; iterable any number of times"""

    def __init__(self, records: tuple, metric: str):
        self._records = records
        self.metric = metric
        self.known = metric in SNAPSHOT_FIELDS

    def __iter__(self) -> Iterator[tuple[int, float]]:
        for s in self._records:
            yield s.tick, float(getattr(s, self.metric)) if self.known else 0.0

    def __len__(self):
        return len(self._records)

    def ticks(self) -> list[int]:
        return [t for t, _ in self]

    def values(self) -> list[float]:
        return [v for _, v in self]


class MetricsHistory:
    """Bounded statistics history (oldest evicted first)"""

    def __init__(self, capacity: int = 1000):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._data: deque[MarketSnapshot] = deque(maxlen=capacity)
        self.started_at = datetime.now(timezone.utc)

    def __len__(self):
        return len(self._data)

    def __iter__(self):
        return iter(tuple(self._data))

    def record_snapshot(self, snapshot: MarketSnapshot) -> MarketSnapshot:
        self._data.append(snapshot)
        return snapshot

    # === queries ===

    def latest(self) -> MarketSnapshot | None:
        return self._data[-1] if self._data else None

    def snapshots(self) -> tuple[MarketSnapshot, ...]:
        return tuple(self._data)

    def time_series(self, metric: str) -> TimeSeries:
        """Unknown metrics give a zero-filled series"""
        return TimeSeries(tuple(self._data), metric)

    def in_range(self, start_tick: int, end_tick: int) -> list[MarketSnapshot]:
        """Snapshots with start_tick <= tick <= end_tick"""
        return [s for s in self._data if start_tick <= s.tick <= end_tick]

    def tick_range(self) -> tuple[int, int]:
        if not self._data:
            return 0, 0
        ticks = [s.tick for s in self._data]
        return min(ticks), max(ticks)

    def metric_summary(self, metric: str) -> dict:
        values = self.time_series(metric).values()
        if not values:
            return {"min": 0.0, "max": 0.0, "avg": 0.0, "trend": 0.0, "count": 0}
        return {
            "min": min(values),
            "max": max(values),
            "avg": sum(values) / len(values),
            "trend": values[-1] - values[0] if len(values) > 1 else 0.0,
            "count": len(values),
        }

    def available_metrics(self) -> list[str]:
        return list(METRIC_NAMES) if self._data else []

    def summary(self) -> dict:
        """Final summary"""
        if not self._data:
            return {}
        first = self._data[0]
        last = self._data[-1]
        return {
            'ticks': len(self._data),
            'first_year': first.year,
            'last_year': last.year,
            'final_participants': last.total_participants,
            'final_housing_rate': last.housing_rate,
            'final_occupancy_rate': last.occupancy_rate,
            'final_gini': last.gini_coefficient,
            'gini_change': last.gini_coefficient - first.gini_coefficient,
            'final_affordability_ratio': last.affordability_ratio,
            'total_transactions': sum(s.auctions_sold for s in self._data),
            'total_revenue': sum(s.total_revenue for s in self._data),
        }

    def clear(self):
        self._data.clear()
        self.started_at = datetime.now(timezone.utc)

    # === export / import ===

    def export_records(self) -> list[dict]:
        return [s.to_dict() for s in self._data]

    def export_json(self, indent: int = 2) -> str:
        return json.dumps({
            "metadata": {
                "recording_started": self.started_at.isoformat(),
                "exported_at": datetime.now(timezone.utc).isoformat(),
                "data_point_count": len(self._data),
                "capacity": self.capacity,
            },
            "data": self.export_records(),
        }, indent=indent)

    def import_records(self, records) -> int:
        """Replace history with validated records (all or nothing)"""
        try:
            snapshots = _SNAPSHOT_LIST.validate_python(records)
        except ValidationError as exc:
            raise HistoryImportError(
                f"invalid history records ({exc.error_count()} errors)", exc
            ) from exc
        self._data = deque(snapshots[-self.capacity:], maxlen=self.capacity)
        return len(self._data)

    def import_json(self, payload: str | bytes) -> int:
        try:
            doc = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise HistoryImportError("history payload is not valid JSON", exc) from exc
        if not isinstance(doc, dict) or not isinstance(doc.get("data"), list):
            raise HistoryImportError("history payload must be an object with a 'data' list")
        return self.import_records(doc["data"])
