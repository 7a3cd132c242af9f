"""Exceptions

Configuration errors surface as ``pydantic.ValidationError`` from the config
schema. Degenerate markets (no bidders, no vacancies, no participants) are
valid states and never raise.
"""

from typing import Optional


class HousingSimError(Exception):
    """Base class for simulation errors"""


class HistoryImportError(HousingSimError, ValueError):
    """Malformed history payload; existing history is left untouched"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
