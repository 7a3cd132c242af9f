"""Simulation engine - ties every component together"""

import logging
import math
from pathlib import Path

import numpy as np

from ..config.loader import load_scenario
from ..config.schema import ScenarioConfig
from ..core.sampling import pick_k_without_replacement, sample_price, sample_wealth
from ..core.types import NO_DWELLING, NO_OWNER, DwellingView, ParticipantView
from ..agents.population import ParticipantPool
from ..housing.stock import DwellingStock
from ..markets.auction import AuctionReport, AuctionResult, ClearingHouse, summarize
from .phases import Phase, DEFAULT_PHASE_ORDER
from .recorder import MarketSnapshot, MetricsHistory
from .stats import compute_snapshot

logger = logging.getLogger(__name__)


class MarketEngine:
    """Housing market simulation engine

    One ``tick()`` is one simulated year. State is only mutated inside
    ``tick()``, ``initialize()`` and ``reset()``; everything else is a read.
    """

    def __init__(self, config: ScenarioConfig, rng: np.random.Generator = None):
        self.config = config
        self._seeded_externally = rng is not None
        self.rng = rng if rng is not None else np.random.default_rng(config.simulation.seed)

        # Core systems
        self.agents = ParticipantPool()
        self.houses = DwellingStock(config.housing.dwelling_count)

        # Recorder
        self.history = MetricsHistory(config.simulation.history_capacity)

        # Phase order
        self.phase_order = DEFAULT_PHASE_ORDER

        self.current_year = config.simulation.starting_year
        self.tick_count = 0
        self.last_auction_results: tuple[AuctionResult, ...] = ()
        self.last_freed: tuple[int, ...] = ()

        self.initialize()

    @classmethod
    def from_preset(cls, preset_dir: str | Path, rng: np.random.Generator = None) -> 'MarketEngine':
        """Create from a preset directory or scenario file"""
        return cls(load_scenario(preset_dir), rng=rng)

    # === initialization ===

    def initialize(self):
        """Create dwellings and participants, then pre-populate occupancy"""
        cfg = self.config
        rng = self.rng

        prices = sample_price(rng, cfg.housing.dwelling_price_mean,
                              cfg.housing.dwelling_price_std, self.houses.n)
        self.houses.initialize(prices)

        wealth = sample_wealth(rng, cfg.population.wealth_mean,
                               cfg.population.wealth_std, cfg.population.participant_count)
        self.agents.add(wealth, self.current_year)

        self._match_initial_ownership()

        logger.info("Initialized: %d participants, %d dwellings, %d occupied",
                    self.agents.n, self.houses.n, int(self.houses.occupied_mask().sum()))

    def _match_initial_ownership(self):
        """Pair the k cheapest dwellings with the k poorest participants, in order"""
        k = min(int(math.floor(self.config.housing.initial_occupancy * self.houses.n)), self.agents.n)
        if k == 0:
            return
        values = self.houses.value(self.config.housing.intrinsicness)
        house_order = np.argsort(values, kind="stable")[:k]
        agent_order = np.argsort(self.agents.wealth, kind="stable")[:k]
        for house_id, row in zip(house_order, agent_order):
            self.houses.owner_id[house_id] = self.agents.ids[row]
            self.agents.data.dwelling[row] = house_id

    # === tick ===

    def tick(self) -> MarketSnapshot:
        """Simulate one year; returns the recorded snapshot"""
        self.tick_count += 1
        for phase in self.phase_order:
            self._execute_phase(phase)
        return self.history.latest()

    def _execute_phase(self, phase: Phase):
        """Run a single phase"""
        cfg = self.config

        if phase == Phase.AGE:
            self.houses.age()

        elif phase == Phase.DEPRECIATE:
            self.houses.depreciate(
                cfg.housing.vacancy_depreciation_rate,
                cfg.housing.min_dwelling_value,
            )

        elif phase == Phase.EXIT:
            self._process_exits(cfg.population.turnover_out)

        elif phase == Phase.ENTRY:
            self._process_entries(cfg.population.turnover_in)

        elif phase == Phase.CLEAR:
            self._conduct_auctions()

        elif phase == Phase.ADVANCE_YEAR:
            self.current_year += 1

        elif phase == Phase.RECORD_STATS:
            snap = self.history.record_snapshot(self.snapshot())
            logger.info(
                "Year %d (tick %d): %d participants, %d housed, %d/%d dwellings occupied, gini=%.3f",
                snap.year, snap.tick, snap.total_participants, snap.housed_participants,
                snap.occupied_dwellings, snap.total_dwellings, snap.gini_coefficient,
            )

    def _process_exits(self, turnover_out: int) -> int:
        """Pick exits from the whole population, housed or not"""
        if turnover_out == 0 or self.agents.n == 0:
            return 0
        rows = np.sort(pick_k_without_replacement(self.rng, np.arange(self.agents.n), turnover_out))
        owned = self.agents.data.dwelling[rows]
        owned = owned[owned != NO_DWELLING]
        self.houses.release(owned, self.agents)
        removed = self.agents.remove(rows)
        logger.debug("%d participants exit, releasing %d dwellings", len(removed), len(owned))
        return len(removed)

    def _process_entries(self, turnover_in: int) -> int:
        if turnover_in == 0:
            return 0
        cfg = self.config.population
        wealth = sample_wealth(self.rng, cfg.wealth_mean, cfg.wealth_std, turnover_in)
        new_ids = self.agents.add(wealth, self.current_year)
        logger.debug("%d participants enter", len(new_ids))
        return len(new_ids)

    def _conduct_auctions(self):
        """Batched Vickrey clearing over the dwellings available at phase start

        Dwellings vacated by upgrades during this phase wait for the next tick.
        """
        available = self.houses.available_ids()
        if len(available) == 0:
            self.last_auction_results = ()
            self.last_freed = ()
            logger.debug("no dwellings available for auction")
            return

        n_steps = self.config.market.n_auction_steps
        batch_size = math.ceil(len(available) / n_steps)
        clearing = self.clearing_house()
        already_won = clearing.new_won_mask(self.agents)

        results: list[AuctionResult] = []
        freed: list[int] = []
        for start in range(0, len(available), batch_size):
            batch = available[start:start + batch_size]
            batch_results = clearing.run_batch(batch, self.agents, self.houses, already_won)
            freed.extend(clearing.execute_transactions(batch_results, self.agents, self.houses))
            results.extend(batch_results)

        self.last_auction_results = tuple(results)
        self.last_freed = tuple(freed)
        report = summarize(results)
        logger.debug("auctions: %d/%d sold, revenue %.0f, avg price %.0f",
                     report.successful_sales, report.total_auctioned,
                     report.total_revenue, report.average_price)

    def clearing_house(self) -> ClearingHouse:
        """Clearing house built from the current market config"""
        cfg = self.config
        return ClearingHouse(
            cfg.housing.intrinsicness,
            cfg.market.upgrade_threshold,
            cfg.market.single_bidder_discount,
        )

    # === read-only views ===

    def snapshot(self) -> MarketSnapshot:
        return compute_snapshot(self)

    def participants(self) -> list[ParticipantView]:
        return self.agents.views()

    def dwellings(self) -> list[DwellingView]:
        return self.houses.views(self.config.housing.intrinsicness)

    def auction_report(self) -> AuctionReport:
        return summarize(self.last_auction_results)

    def ownership_violations(self) -> list[str]:
        """Empty when every ownership invariant holds"""
        problems = []
        houses = self.houses
        d = self.agents.data

        if houses.n != self.config.housing.dwelling_count:
            problems.append(f"dwelling count {houses.n} != {self.config.housing.dwelling_count}")

        owned = np.flatnonzero(houses.owner_id != NO_OWNER)
        for h in owned:
            owner = int(houses.owner_id[h])
            try:
                row = self.agents.row_of(owner)
            except KeyError:
                problems.append(f"dwelling {h} owned by missing participant {owner}")
                continue
            if d.dwelling[row] != h:
                problems.append(f"dwelling {h} -> participant {owner} -> dwelling {int(d.dwelling[row])}")

        housed = d.dwelling[d.dwelling != NO_DWELLING]
        if len(np.unique(housed)) != len(housed):
            problems.append("a dwelling is referenced by more than one participant")
        for row in np.flatnonzero(d.dwelling != NO_DWELLING):
            h = int(d.dwelling[row])
            if houses.owner_id[h] != d.id[row]:
                problems.append(f"participant {int(d.id[row])} -> dwelling {h} not owned back")

        if int(houses.occupied_mask().sum()) + len(houses.available_ids()) != houses.n:
            problems.append("occupied + available != total")
        return problems

    # === driver ===

    def run(self, n_steps: int = None, progress: bool = True) -> dict:
        """Run the simulation

        Args:
            n_steps: number of ticks (None = config value)
            progress: print progress
        """
        if n_steps is None:
            n_steps = self.config.simulation.num_steps

        if progress:
            print(f"Starting simulation: {n_steps} years, {self.agents.n:,} participants, "
                  f"{self.houses.n:,} dwellings")

        for step in range(n_steps):
            snap = self.tick()
            if progress and ((step + 1) % 5 == 0 or step + 1 == n_steps):
                print(f"  Year {snap.year} ({step+1:3d}/{n_steps}): occupancy={snap.occupancy_rate:.1%} "
                      f"housed={snap.housing_rate:.1%} gini={snap.gini_coefficient:.3f} "
                      f"sold={snap.auctions_sold}/{snap.auctions_attempted}")

        summary = self.history.summary()
        if progress:
            print(f"\nSimulation complete. {n_steps} years elapsed.")
            print(f"  Total transactions: {summary.get('total_transactions', 0):,}")
            print(f"  Final occupancy: {summary.get('final_occupancy_rate', 0):.1%}")
            print(f"  Final gini: {summary.get('final_gini', 0):.3f}")

        return summary

    def reset(self, rng: np.random.Generator = None):
        """Reinitialize from config; participant ids restart at 0"""
        if rng is not None:
            self.rng = rng
        elif not self._seeded_externally:
            self.rng = np.random.default_rng(self.config.simulation.seed)
        self.current_year = self.config.simulation.starting_year
        self.tick_count = 0
        self.last_auction_results = ()
        self.last_freed = ()
        self.agents.reset()
        self.houses = DwellingStock(self.config.housing.dwelling_count)
        self.history.clear()
        self.initialize()
