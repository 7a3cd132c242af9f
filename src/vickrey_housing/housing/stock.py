"""Dwelling stock - NumPy SoA

The stock is fixed for the lifetime of a simulation. A dwelling's id is its row.
"""

import numpy as np

from ..core.types import (
    NO_DWELLING, NO_OWNER, ArrayBool, ArrayF64, ArrayI64, ColorState, DwellingView,
)

DEFAULT_MIN_VALUE = 1000.0


class DwellingStock:
    """Dwelling stock management"""

    def __init__(self, n: int):
        if n <= 0:
            raise ValueError("dwelling count must be positive")
        self.n = n

        # value
        self.intrinsic_value = np.zeros(n, dtype=np.float64)
        self.last_sale_price = np.zeros(n, dtype=np.float64)

        # ownership
        self.owner_id = np.full(n, NO_OWNER, dtype=np.int64)
        self.years_since_transfer = np.zeros(n, dtype=np.int64)

    @property
    def ids(self) -> ArrayI64:
        return np.arange(self.n, dtype=np.int64)

    def initialize(self, intrinsic_values):
        """Set intrinsic values; the initial price equals the intrinsic value"""
        values = np.asarray(intrinsic_values, dtype=np.float64)
        if values.shape != (self.n,):
            raise ValueError(f"expected {self.n} values, got shape {values.shape}")
        self.intrinsic_value[:] = values
        self.last_sale_price[:] = values
        self.owner_id[:] = NO_OWNER
        self.years_since_transfer[:] = 0

    def value(self, intrinsicness: float, ids=None) -> ArrayF64:
        """Perceived value = a * intrinsic + (1 - a) * last sale price"""
        if ids is None:
            return intrinsicness * self.intrinsic_value + (1.0 - intrinsicness) * self.last_sale_price
        return intrinsicness * self.intrinsic_value[ids] + (1.0 - intrinsicness) * self.last_sale_price[ids]

    # === state masks ===

    def available_mask(self) -> ArrayBool:
        return self.owner_id == NO_OWNER

    def occupied_mask(self) -> ArrayBool:
        return self.owner_id != NO_OWNER

    def available_ids(self) -> ArrayI64:
        return np.flatnonzero(self.available_mask())

    def color_state(self) -> np.ndarray:
        """ColorState code per dwelling, from (owned?, transferred this tick?)"""
        fresh = self.years_since_transfer == 0
        return np.where(
            self.occupied_mask(),
            np.where(fresh, ColorState.JUST_OCCUPIED, ColorState.OCCUPIED),
            np.where(fresh, ColorState.JUST_AVAILABLE, ColorState.AVAILABLE),
        ).astype(np.int64)

    # === per-tick updates ===

    def age(self):
        self.years_since_transfer += 1

    def depreciate(self, rate: float, min_value: float = DEFAULT_MIN_VALUE) -> int:
        """Vacant dwellings lose `rate` of intrinsic value, floored at min_value

        The floor only stops the decline; values already below it are left alone.
        """
        vacant = self.available_mask()
        if rate > 0 and np.any(vacant):
            v = self.intrinsic_value[vacant]
            self.intrinsic_value[vacant] = np.maximum(v * (1.0 - rate), np.minimum(v, min_value))
        return int(vacant.sum())

    # === ownership ===

    def release(self, dwelling_ids, agents) -> int:
        """Clear owner on both sides; released dwellings become just-available"""
        ids = np.atleast_1d(np.asarray(dwelling_ids, dtype=np.int64))
        if len(ids) == 0:
            return 0
        owners = self.owner_id[ids]
        owned = owners != NO_OWNER
        if np.any(owned):
            rows = agents.row_of(owners[owned])
            agents.data.dwelling[rows] = NO_DWELLING
        self.owner_id[ids] = NO_OWNER
        self.years_since_transfer[ids] = 0
        return int(owned.sum())

    def transfer_to(self, dwelling_id: int, agents, row: int, price: float):
        """Give a dwelling to the participant at `row`

        Any dwelling the participant already owns is released first, and any
        previous owner of the target is detached.
        """
        d = agents.data
        current = int(d.dwelling[row])
        if current != NO_DWELLING and current != dwelling_id:
            self.release(current, agents)
        if self.owner_id[dwelling_id] != NO_OWNER and self.owner_id[dwelling_id] != d.id[row]:
            self.release(dwelling_id, agents)

        self.owner_id[dwelling_id] = d.id[row]
        d.dwelling[row] = dwelling_id
        self.last_sale_price[dwelling_id] = price
        self.years_since_transfer[dwelling_id] = 0

    # === read-only views ===

    def view(self, dwelling_id: int, intrinsicness: float) -> DwellingView:
        owner = int(self.owner_id[dwelling_id])
        years = int(self.years_since_transfer[dwelling_id])
        state = ColorState(int(self.color_state()[dwelling_id]))
        return DwellingView(
            id=int(dwelling_id),
            value=float(self.value(intrinsicness, dwelling_id)),
            intrinsic_value=float(self.intrinsic_value[dwelling_id]),
            last_sale_price=float(self.last_sale_price[dwelling_id]),
            owner_id=None if owner == NO_OWNER else owner,
            years_since_transfer=years,
            color_state=state,
        )

    def views(self, intrinsicness: float) -> list[DwellingView]:
        return [self.view(i, intrinsicness) for i in range(self.n)]
