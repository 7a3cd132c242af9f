"""Pydantic config schema - JSON validation and defaults

Out-of-range values raise ``pydantic.ValidationError`` at construction (and on
assignment); nothing is clamped.
"""

from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class SimulationConfig(_Section):
    """Simulation master settings"""
    name: str = "default"
    num_steps: int = Field(default=50, ge=0)
    seed: int = 42
    starting_year: int = 2025
    history_capacity: int = Field(default=1000, gt=0)


class PopulationConfig(_Section):
    """Participants and turnover"""
    participant_count: int = Field(default=10, gt=0)
    wealth_mean: float = Field(default=500000.0, gt=0)
    wealth_std: float = Field(default=300000.0, gt=0)
    turnover_in: int = Field(default=2, ge=0)      # entries per tick
    turnover_out: int = Field(default=2, ge=0)     # exits per tick


class HousingConfig(_Section):
    """Dwelling stock"""
    dwelling_count: int = Field(default=10, gt=0)
    dwelling_price_mean: float = Field(default=400000.0, gt=0)
    dwelling_price_std: float = Field(default=250000.0, gt=0)
    intrinsicness: float = Field(default=0.7, ge=0.0, le=1.0)
    vacancy_depreciation_rate: float = Field(default=0.05, ge=0.0, le=0.2)
    min_dwelling_value: float = Field(default=1000.0, gt=0)
    initial_occupancy: float = Field(default=0.8, ge=0.0, le=1.0)


class MarketConfig(_Section):
    """Auction parameters"""
    upgrade_threshold: float = Field(default=1.5, gt=0)
    n_auction_steps: int = Field(default=1, ge=1)
    single_bidder_discount: float = Field(default=0.75, gt=0.0, le=1.0)


class ScenarioConfig(_Section):
    """Top-level scenario (everything combined)"""
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    population: PopulationConfig = Field(default_factory=PopulationConfig)
    housing: HousingConfig = Field(default_factory=HousingConfig)
    market: MarketConfig = Field(default_factory=MarketConfig)
