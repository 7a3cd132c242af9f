"""Vickrey housing market simulation

Discrete-time housing market where a heterogeneous-wealth population bids on
a fixed dwelling stock through batched sealed-bid second-price auctions.

Main components:
- Vickrey (second-price) clearing with a single-bidder discount
- Batched clearing: one dwelling per participant per tick
- Population turnover (uniform exits, fresh entries)
- Vacancy depreciation of intrinsic value
- Inequality analytics (Gini, top-decile share, affordability)
"""

from .config.schema import (
    ScenarioConfig,
    SimulationConfig,
    PopulationConfig,
    HousingConfig,
    MarketConfig,
)
from .config.loader import load_scenario, load_scenario_from_dict
from .core.errors import HousingSimError, HistoryImportError
from .core.types import ColorState, DwellingView, ParticipantView
from .agents.population import ParticipantPool
from .housing.stock import DwellingStock
from .markets.auction import AuctionReport, AuctionResult, ClearingHouse
from .simulation.engine import MarketEngine
from .simulation.recorder import MarketSnapshot, MetricsHistory
from .simulation.stats import compute_snapshot, gini_coefficient, top_decile_share

__version__ = "0.1.0"

__all__ = [
    "MarketEngine",
    "ScenarioConfig",
    "SimulationConfig",
    "PopulationConfig",
    "HousingConfig",
    "MarketConfig",
    "load_scenario",
    "load_scenario_from_dict",
    "HousingSimError",
    "HistoryImportError",
    "ColorState",
    "DwellingView",
    "ParticipantView",
    "ParticipantPool",
    "DwellingStock",
    "AuctionReport",
    "AuctionResult",
    "ClearingHouse",
    "MarketSnapshot",
    "MetricsHistory",
    "compute_snapshot",
    "gini_coefficient",
    "top_decile_share",
]
