"""Shared test fixtures"""

import numpy as np
import pytest

from vickrey_housing import DwellingStock, ParticipantPool, ScenarioConfig
from vickrey_housing.simulation.recorder import MarketSnapshot, SNAPSHOT_FIELDS


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def make_market(dwelling_values, wealths, year=2025):
    """Stock with price = intrinsic value and an unhoused pool"""
    houses = DwellingStock(len(dwelling_values))
    houses.initialize(np.asarray(dwelling_values, dtype=float))
    agents = ParticipantPool()
    agents.add(np.asarray(wealths, dtype=float), year)
    return houses, agents


def make_snapshot(tick, **values):
    data = {name: 0 for name in SNAPSHOT_FIELDS}
    data.update(tick=tick, year=2024 + tick)
    data.update(values)
    return MarketSnapshot(**data)


def make_config(**sections):
    """ScenarioConfig from per-section overrides, e.g. housing={'dwelling_count': 5}"""
    return ScenarioConfig(**sections)
