"""Simulation phase definitions"""

from enum import IntEnum


class Phase(IntEnum):
    """Simulation phases (run in this order every tick)"""
    AGE = 0             # years_since_transfer += 1 on every dwelling
    DEPRECIATE = 1      # vacant dwellings lose intrinsic value
    EXIT = 2            # turnover_out participants leave, releasing dwellings
    ENTRY = 3           # turnover_in unhoused participants arrive
    CLEAR = 4           # batched Vickrey auctions over available dwellings
    ADVANCE_YEAR = 5    # year counter
    RECORD_STATS = 6    # snapshot -> history


DEFAULT_PHASE_ORDER = list(Phase)
