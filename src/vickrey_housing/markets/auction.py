"""Vickrey batch auction (sealed bid, second price)

One batch auctions a list of available dwellings against the live pool.
A participant can win at most one dwelling per tick; the shared
``already_won`` mask carries that across batches.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.types import NO_DWELLING

logger = logging.getLogger(__name__)

SINGLE_BIDDER_DISCOUNT = 0.75


@dataclass(frozen=True)
class AuctionResult:
    """Outcome for one dwelling"""
    dwelling_id: int
    winner_id: Optional[int] = None
    winning_bid: float = 0.0
    clearing_price: float = 0.0
    bidder_count: int = 0

    @property
    def sold(self) -> bool:
        return self.winner_id is not None


@dataclass(frozen=True)
class AuctionReport:
    total_auctioned: int = 0
    successful_sales: int = 0
    failed_sales: int = 0
    total_revenue: float = 0.0
    average_price: float = 0.0


def summarize(results) -> AuctionReport:
    sold = [r.clearing_price for r in results if r.sold]
    revenue = float(sum(sold))
    return AuctionReport(
        total_auctioned=len(results),
        successful_sales=len(sold),
        failed_sales=len(results) - len(sold),
        total_revenue=revenue,
        average_price=revenue / len(sold) if sold else 0.0,
    )


class ClearingHouse:
    """Clears batches of dwellings with Vickrey pricing"""

    def __init__(self, intrinsicness: float, upgrade_threshold: float,
                 single_bidder_discount: float = SINGLE_BIDDER_DISCOUNT):
        self.intrinsicness = intrinsicness
        self.upgrade_threshold = upgrade_threshold
        self.single_bidder_discount = single_bidder_discount

    def new_won_mask(self, agents) -> np.ndarray:
        return np.zeros(agents.n, dtype=bool)

    def run_batch(self, dwelling_ids, agents, houses, already_won: np.ndarray = None) -> list[AuctionResult]:
        """Auction each dwelling in order; returns one result per dwelling

        Args:
            dwelling_ids: available dwellings in this batch
            agents: ParticipantPool (bidder pool)
            houses: DwellingStock
            already_won: (n,) bool mask over pool rows, updated in place
        """
        if already_won is None:
            already_won = self.new_won_mask(agents)

        # values are fixed for the batch: transactions run after it closes
        values = houses.value(self.intrinsicness)
        dwelling = agents.data.dwelling
        current_values = np.full(agents.n, np.nan)
        housed = dwelling != NO_DWELLING
        current_values[housed] = values[dwelling[housed]]
        bids = agents.bid_amount()

        results = []
        for h in np.asarray(dwelling_ids, dtype=np.int64):
            result = self._auction_single(int(h), float(values[h]), agents, bids,
                                          current_values, already_won)
            results.append(result)

        logger.debug("batch of %d dwellings: %d sold", len(results),
                     sum(1 for r in results if r.sold))
        return results

    def _auction_single(self, dwelling_id, value, agents, bids, current_values, already_won) -> AuctionResult:
        eligible = ~already_won & agents.should_bid(value, current_values, self.upgrade_threshold)
        rows = np.flatnonzero(eligible)

        if len(rows) == 0:
            logger.debug("dwelling %d (value %.0f): no bidders", dwelling_id, value)
            return AuctionResult(dwelling_id=dwelling_id)

        # stable sort: equal bids go to the earlier pool row
        order = np.argsort(-bids[rows], kind="stable")
        winner_row = rows[order[0]]
        winning_bid = float(bids[winner_row])
        if len(rows) == 1:
            price = winning_bid * self.single_bidder_discount
        else:
            price = float(bids[rows[order[1]]])

        already_won[winner_row] = True
        winner_id = int(agents.data.id[winner_row])
        logger.debug("dwelling %d (value %.0f): winner %d bid %.0f pays %.0f, %d bidders",
                     dwelling_id, value, winner_id, winning_bid, price, len(rows))
        return AuctionResult(
            dwelling_id=dwelling_id,
            winner_id=winner_id,
            winning_bid=winning_bid,
            clearing_price=price,
            bidder_count=len(rows),
        )

    def execute_transactions(self, results, agents, houses) -> list[int]:
        """Transfer every won dwelling; returns dwellings vacated by upgrading winners

        Vacated dwellings are not re-listed in the current tick.
        """
        freed = []
        for r in results:
            if not r.sold:
                continue
            row = agents.row_of(r.winner_id)
            previous = int(agents.data.dwelling[row])
            if previous != NO_DWELLING:
                freed.append(previous)
            houses.transfer_to(r.dwelling_id, agents, row, r.clearing_price)
            logger.debug("participant %d bought dwelling %d for %.0f",
                         r.winner_id, r.dwelling_id, r.clearing_price)
        return freed
