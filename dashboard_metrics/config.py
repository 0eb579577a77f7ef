"""
Rebase Settings

Constants and the settings object threaded through the rebase engine.
Values match the statistics produced by the export pipeline; changing them
breaks parity with the precomputed full-history figures.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .errors import InvalidDataError

BASE_CAPITAL = 10_000.0
PERIODS_PER_YEAR = 365          # calendar days, not 252 trading days
TRADE_WINDOW_TOLERANCE = 0.95   # cv_start >= 95% of the boundary value

DEFAULT_DATA_PATH = Path("public/data/dashboard.json")


@dataclass(frozen=True)
class RebaseSettings:
    """Numeric conventions for rebasing a dashboard dataset."""
    base_capital: float = BASE_CAPITAL
    periods_per_year: int = PERIODS_PER_YEAR
    trade_window_tolerance: float = TRADE_WINDOW_TOLERANCE

    @classmethod
    def from_dict(cls, config: Optional[Dict]) -> "RebaseSettings":
        """
        Build settings from a config dict, falling back to defaults per key.

        Raises:
            InvalidDataError: If any value is not positive
        """
        config = config or {}
        settings = cls(
            base_capital=float(config.get('base_capital', BASE_CAPITAL)),
            periods_per_year=int(config.get('periods_per_year', PERIODS_PER_YEAR)),
            trade_window_tolerance=float(config.get('trade_window_tolerance', TRADE_WINDOW_TOLERANCE)),
        )
        for name in ('base_capital', 'periods_per_year', 'trade_window_tolerance'):
            if getattr(settings, name) <= 0:
                raise InvalidDataError(f"{name} must be positive, got {getattr(settings, name)}")
        return settings


DEFAULT_SETTINGS = RebaseSettings()
