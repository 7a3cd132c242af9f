"""Common types and enums"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, TypeAlias
import numpy as np

# Array type aliases
ArrayF64: TypeAlias = np.ndarray  # float64 array
ArrayI64: TypeAlias = np.ndarray  # int64 array
ArrayBool: TypeAlias = np.ndarray  # bool array

NO_OWNER = -1       # dwelling without owner (available)
NO_DWELLING = -1    # unhoused participant


class ColorState(IntEnum):
    AVAILABLE = 0
    JUST_AVAILABLE = 1    # released this tick
    OCCUPIED = 2
    JUST_OCCUPIED = 3     # sold this tick

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True)
class ParticipantView:
    """Read-only participant record"""
    id: int
    wealth: float
    dwelling_id: Optional[int]
    year_entered: int


@dataclass(frozen=True)
class DwellingView:
    """Read-only dwelling record"""
    id: int
    value: float
    intrinsic_value: float
    last_sale_price: float
    owner_id: Optional[int]
    years_since_transfer: int
    color_state: ColorState

    @property
    def is_available(self) -> bool:
        return self.owner_id is None
