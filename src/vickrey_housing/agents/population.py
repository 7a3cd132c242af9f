"""Participant population - NumPy Structure of Arrays container

Rows are appended on entry and deleted on exit. Participant ids come from a
counter owned by the pool, so ids stay sorted and every engine starts from 0.
"""

import numpy as np
from dataclasses import dataclass, field

from ..core.types import NO_DWELLING, ArrayBool, ArrayF64, ArrayI64, ParticipantView


@dataclass
class ParticipantArrays:
    """All participant data as NumPy arrays (SoA pattern)"""
    id: np.ndarray = field(default=None)              # (n,) int64, ascending
    wealth: np.ndarray = field(default=None)          # (n,) float64, fixed at entry
    dwelling: np.ndarray = field(default=None)        # (n,) int64 dwelling id (-1 = unhoused)
    year_entered: np.ndarray = field(default=None)    # (n,) int64

    FIELDS = ("id", "wealth", "dwelling", "year_entered")


class ParticipantPool:
    """Participant population manager

    Every behavioral rule is vectorized over the whole pool; pass ``rows``
    to evaluate a subset.
    """

    def __init__(self):
        self.data = ParticipantArrays()
        self._next_id = 0
        self._allocate_arrays()

    def _allocate_arrays(self):
        d = self.data
        d.id = np.zeros(0, dtype=np.int64)
        d.wealth = np.zeros(0, dtype=np.float64)
        d.dwelling = np.zeros(0, dtype=np.int64)
        d.year_entered = np.zeros(0, dtype=np.int64)

    @property
    def n(self) -> int:
        return len(self.data.id)

    def __len__(self):
        return self.n

    @property
    def ids(self) -> ArrayI64:
        return self.data.id

    @property
    def wealth(self) -> ArrayF64:
        return self.data.wealth

    # === population changes ===

    def add(self, wealth, year: int) -> ArrayI64:
        """Append unhoused participants; returns their new ids"""
        wealth = np.atleast_1d(np.asarray(wealth, dtype=np.float64))
        if np.any(wealth < 0):
            raise ValueError("wealth must be non-negative")
        k = len(wealth)
        new_ids = np.arange(self._next_id, self._next_id + k, dtype=np.int64)
        self._next_id += k

        d = self.data
        d.id = np.concatenate([d.id, new_ids])
        d.wealth = np.concatenate([d.wealth, wealth])
        d.dwelling = np.concatenate([d.dwelling, np.full(k, NO_DWELLING, dtype=np.int64)])
        d.year_entered = np.concatenate([d.year_entered, np.full(k, year, dtype=np.int64)])
        return new_ids

    def remove(self, rows) -> ArrayI64:
        """Delete rows; callers must release their dwellings first"""
        rows = np.asarray(rows, dtype=np.int64)
        d = self.data
        removed = d.id[rows].copy()
        if np.any(d.dwelling[rows] != NO_DWELLING):
            raise ValueError("cannot remove participants that still own a dwelling")
        for name in ParticipantArrays.FIELDS:
            setattr(d, name, np.delete(getattr(d, name), rows))
        return removed

    def reset(self):
        self._next_id = 0
        self._allocate_arrays()

    # === lookups ===

    def row_of(self, participant_ids):
        """Map participant id(s) to row(s); KeyError if any id is not live"""
        ids = self.data.id
        pids = np.asarray(participant_ids, dtype=np.int64)
        rows = np.searchsorted(ids, pids)
        clipped = np.minimum(rows, max(len(ids) - 1, 0))
        found = (rows < len(ids)) & (ids[clipped] == pids) if len(ids) else np.zeros(pids.shape, dtype=bool)
        if not np.all(found):
            missing = np.atleast_1d(pids)[~np.atleast_1d(found)]
            raise KeyError(f"unknown participant id(s): {missing.tolist()}")
        return int(rows) if rows.ndim == 0 else rows

    def housed_mask(self) -> ArrayBool:
        return self.data.dwelling != NO_DWELLING

    def unhoused_mask(self) -> ArrayBool:
        return self.data.dwelling == NO_DWELLING

    # === bidding rules ===

    def can_afford(self, value: float, rows=None) -> ArrayBool:
        """wealth >= dwelling value"""
        wealth = self.data.wealth if rows is None else self.data.wealth[rows]
        return wealth >= value

    def should_bid(self, value: float, current_values: ArrayF64,
                   upgrade_threshold: float, rows=None) -> ArrayBool:
        """Unhoused: can_afford. Housed: can_afford and value >= threshold * current value.

        Args:
            value: perceived value of the dwelling on offer
            current_values: (n,) value of each participant's current dwelling
                (ignored for unhoused rows)
            upgrade_threshold: minimum value ratio an owner needs to move
        """
        dwelling = self.data.dwelling if rows is None else self.data.dwelling[rows]
        current = current_values if rows is None else current_values[rows]
        unhoused = dwelling == NO_DWELLING
        upgrade = np.zeros(len(dwelling), dtype=bool)
        upgrade[~unhoused] = value >= upgrade_threshold * current[~unhoused]
        return self.can_afford(value, rows) & (unhoused | upgrade)

    def bid_amount(self, rows=None) -> ArrayF64:
        """Everyone bids their full wealth"""
        wealth = self.data.wealth if rows is None else self.data.wealth[rows]
        return wealth.copy()

    # === read-only views ===

    def view(self, row: int) -> ParticipantView:
        d = self.data
        dwelling = int(d.dwelling[row])
        return ParticipantView(
            id=int(d.id[row]),
            wealth=float(d.wealth[row]),
            dwelling_id=None if dwelling == NO_DWELLING else dwelling,
            year_entered=int(d.year_entered[row]),
        )

    def views(self) -> list[ParticipantView]:
        return [self.view(i) for i in range(self.n)]
