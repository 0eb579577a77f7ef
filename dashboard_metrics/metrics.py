"""
Standardized Performance Metrics
================================

Path-dependent calculations used when a performance record is rebuilt from a
value series: drawdowns, Sharpe/Sortino, monthly compounding and CAGR.

All percentages are rounded half away from zero to 2 decimals so repeated
recomputation never drifts. Calculations that cannot be performed (too few
points, zero deviation, zero peak) return None instead of raising.
"""
import logging
import pandas as pd
import numpy as np
from typing import List, Dict, Optional, Sequence, Union

from .config import PERIODS_PER_YEAR

logger = logging.getLogger(__name__)

Series = List[float]
NullableSeries = List[Optional[float]]
MonthlyReturns = Dict[str, Dict[str, Optional[float]]]


# =============================================================================
# Conversion Helpers
# =============================================================================

def to_float_series(values: Sequence[Optional[float]]) -> pd.Series:
    """Convert a (nullable) list to a float Series with NaN for None."""
    return pd.Series([np.nan if v is None else v for v in values], dtype="float64")


def to_nullable_list(series: Union[pd.Series, np.ndarray]) -> NullableSeries:
    """Convert a float Series back to a list, mapping NaN/inf to None."""
    return [float(v) if np.isfinite(v) else None for v in np.asarray(series, dtype="float64")]


def round_half_away(value: Optional[float], decimals: int = 2) -> Optional[float]:
    """
    Round half away from zero.

    Python's round() and numpy's round() are both half-to-even, which makes
    a -0.125 drawdown and a 0.125 return round differently. None, NaN and
    inf all map to None.
    """
    if value is None:
        return None
    value = float(value)
    if not np.isfinite(value):
        return None
    scale = 10 ** decimals
    rounded = float(np.sign(value) * np.floor(abs(value) * scale + 0.5) / scale)
    return rounded + 0.0  # -0.0 -> 0.0


def round_series(series: pd.Series, decimals: int = 2) -> pd.Series:
    """Vectorised round_half_away; NaN stays NaN."""
    scale = 10 ** decimals
    rounded = np.sign(series) * np.floor(series.abs() * scale + 0.5) / scale
    return rounded + 0.0


# =============================================================================
# Drawdown
# =============================================================================

def calculate_drawdown_series(values: Sequence[float]) -> NullableSeries:
    """
    Calculate running drawdown percentage from a dense value series.

    Formula: (value / running_max - 1) * 100, running_max seeded with values[0]

    Args:
        values: Dense series of portfolio values

    Returns:
        Drawdown percentages (<= 0), same length as values. The first element
        is always 0. A point whose running max is zero yields None.
    """
    if len(values) == 0:
        return []

    series = to_float_series(values)
    running_max = series.cummax()
    drawdown = (series / running_max.where(running_max != 0) - 1) * 100
    return to_nullable_list(round_series(drawdown))


def calculate_nullable_drawdown_series(values: Sequence[Optional[float]]) -> NullableSeries:
    """
    Calculate running drawdown percentage from a sparse value series.

    Null rule: None inputs emit None and are skipped, so they neither update
    nor reset the running maximum. The running maximum starts at the first
    non-null value.

    Args:
        values: Sparse series (e.g. step chart or benchmark)

    Returns:
        Drawdown percentages with None where the input was None
    """
    if len(values) == 0:
        return []

    series = to_float_series(values)
    # cummax skips NaN and carries the max forward across gaps
    running_max = series.cummax()
    drawdown = (series / running_max.where(running_max != 0) - 1) * 100
    return to_nullable_list(round_series(drawdown))


def calculate_max_drawdown(drawdown_pct: Sequence[Optional[float]]) -> Optional[float]:
    """
    Most negative value of a drawdown series, ignoring None.

    Returns:
        Max drawdown as a negative percentage (e.g. -15.3), or None if the
        series holds no values
    """
    present = [v for v in drawdown_pct if v is not None]
    if not present:
        return None
    return round_half_away(min(present))


# =============================================================================
# Returns
# =============================================================================

def calculate_daily_returns(values: Sequence[float]) -> Series:
    """
    Calculate period-over-period fractional returns.

    Formula: values[i] / values[i-1] - 1, for i >= 1

    Returns:
        List of len(values) - 1 returns (empty for fewer than 2 values)
    """
    if len(values) < 2:
        return []
    series = to_float_series(values)
    returns = (series / series.shift(1) - 1).iloc[1:]
    return [float(r) for r in returns]


def calculate_total_return(start_value: Optional[float], end_value: Optional[float]) -> Optional[float]:
    """
    Total return in percent between two values, unrounded.

    Returns None when either value is missing or the start value is zero.
    """
    if start_value is None or end_value is None or start_value == 0:
        return None
    return (end_value / start_value - 1) * 100


def calculate_cagr(
    start_value: float,
    end_value: float,
    start_date: str,
    end_date: str,
    periods: int = PERIODS_PER_YEAR
) -> Optional[float]:
    """
    Calculate Compound Annual Growth Rate over a calendar-day span.

    Formula: ((end / start) ** (periods / days) - 1) * 100

    Args:
        start_value: Value on start_date
        end_value: Value on end_date
        start_date: ISO date of the first point
        end_date: ISO date of the last point
        periods: Days per year (365, calendar days)

    Returns:
        CAGR as a rounded percentage, or None when the span is empty or the
        values are not positive
    """
    days = (pd.Timestamp(end_date) - pd.Timestamp(start_date)).days
    if days <= 0 or start_value <= 0 or end_value <= 0:
        return None
    growth = end_value / start_value
    return round_half_away((growth ** (periods / days) - 1) * 100)


# =============================================================================
# Risk Ratios
# =============================================================================

def calculate_sharpe_ratio(returns: Sequence[float], periods: int = PERIODS_PER_YEAR) -> Optional[float]:
    """
    Calculate annualized Sharpe ratio (risk-free rate of zero).

    Formula: mean(returns) / std(returns, ddof=1) * sqrt(periods)

    Args:
        returns: Periodic fractional returns, no nulls
        periods: Annualization factor (365: calendar days, not trading days)

    Returns:
        Sharpe ratio rounded to 2 decimals, or None for fewer than 2 returns,
        any non-finite return, or a zero/non-finite standard deviation
    """
    if returns is None or len(returns) < 2:
        return None

    series = pd.Series(returns, dtype="float64")
    if not np.isfinite(series).all():
        logger.debug(f"Sharpe undefined: non-finite return in {len(series)} returns")
        return None

    std = series.std(ddof=1)
    if not np.isfinite(std) or std == 0:
        logger.debug(f"Sharpe undefined: std={std} over {len(series)} returns")
        return None

    return round_half_away(series.mean() / std * np.sqrt(periods))


def calculate_sortino_ratio(returns: Sequence[float], periods: int = PERIODS_PER_YEAR) -> Optional[float]:
    """
    Calculate annualized Sortino ratio.

    The downside deviation is taken over the negative returns only, measured
    from zero with an N-1 denominator: sqrt(sum(r^2 for r < 0) / (k - 1)).

    Args:
        returns: Periodic fractional returns, no nulls
        periods: Annualization factor

    Returns:
        Sortino ratio rounded to 2 decimals, or None when any return is not
        finite, fewer than two negative returns exist or the result is not finite
    """
    if returns is None or len(returns) < 2:
        return None

    series = pd.Series(returns, dtype="float64")
    if not np.isfinite(series).all():
        return None

    downside = series[series < 0]
    if len(downside) < 2:
        return None

    downside_std = np.sqrt((downside ** 2).sum() / (len(downside) - 1))
    if not np.isfinite(downside_std) or downside_std == 0:
        return None

    return round_half_away(series.mean() / downside_std * np.sqrt(periods))


# =============================================================================
# Monthly Returns
# =============================================================================

def calculate_monthly_returns(dates: Sequence[str], values: Sequence[float]) -> MonthlyReturns:
    """
    Compound daily returns into calendar-month returns.

    Each daily return belongs to the month of its later date. Months with no
    contributing day are absent rather than zero.

    Args:
        dates: ISO dates aligned with values
        values: Dense value series

    Returns:
        {"2022": {"1": 3.21, "2": -1.05, ...}, ...} in percent, rounded.
        Years and months ascending; keys are unpadded strings.

    Example:
        calculate_monthly_returns(
            ["2024-01-30", "2024-01-31", "2024-02-01"], [100, 110, 99]
        )
        # {"2024": {"1": 10.0, "2": -10.0}}
    """
    if len(dates) < 2:
        return {}

    index = pd.DatetimeIndex(pd.to_datetime(list(dates[1:])))
    returns = pd.Series(calculate_daily_returns(values), index=index, dtype="float64")

    # A NaN day (0/0 after a wipe-out) poisons its month instead of being skipped
    compounded = (1 + returns).groupby([index.year, index.month]).agg(lambda s: s.prod(skipna=False))

    monthly: MonthlyReturns = {}
    for (year, month), growth in compounded.items():
        monthly.setdefault(str(year), {})[str(month)] = round_half_away((growth - 1) * 100)

    return monthly


def flatten_monthly_returns(monthly_returns: MonthlyReturns) -> Series:
    """All non-null monthly values across every year, in year/month order."""
    return [
        value
        for months in monthly_returns.values()
        for value in months.values()
        if value is not None
    ]
