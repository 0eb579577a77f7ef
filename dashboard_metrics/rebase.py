"""
Rebase Engine
=============

Rebuild a dashboard dataset as if the strategy had been started fresh on
January 1st of a chosen year with the base capital.

Truncating the precomputed fields is not enough: drawdown, Sharpe/Sortino
and compounding all depend on the path from the new start. When a user
picks e.g. 2022 we:
    1. Slice every date-aligned series from the first date >= 2022-01-01
    2. Scale portfolio_value, btc_benchmark and step_chart to start at 10,000
    3. Recompute the three drawdown series from the scaled values
    4. Recompute monthly returns from the scaled portfolio value
    5. Keep the trades that started inside the window and renumber them
    6. Recompute the summary statistics
    7. Slice the rolling Sharpe from the start date

Usage:
    from dashboard_metrics import load_dashboard_data, rebase_dashboard_data

    data = load_dashboard_data("public/data/dashboard.json")
    rebased = rebase_dashboard_data(data, 2022)
"""
import dataclasses
import logging
from typing import Dict, List, Optional, Sequence

from .config import DEFAULT_SETTINGS, RebaseSettings
from .metrics import (
    MonthlyReturns,
    NullableSeries,
    Series,
    calculate_cagr,
    calculate_daily_returns,
    calculate_drawdown_series,
    calculate_max_drawdown,
    calculate_monthly_returns,
    calculate_nullable_drawdown_series,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_total_return,
    flatten_monthly_returns,
    round_half_away,
    round_series,
    to_float_series,
    to_nullable_list,
)
from .models import (
    DashboardData,
    Drawdown,
    EquityCurve,
    PerTradeReturn,
    RollingSharpe,
    Statistics,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Date Index Locator
# =============================================================================

def find_start_index(dates: Sequence[str], target: str) -> int:
    """
    Index of the first date >= target in an ascending ISO date list.

    Returns len(dates) when every date is before target.
    """
    for i, date in enumerate(dates):
        if date >= target:
            return i
    return len(dates)


# =============================================================================
# Series Rescaler
# =============================================================================

def scale_values(values: Sequence[float], base_capital: float = DEFAULT_SETTINGS.base_capital) -> Series:
    """
    Scale a dense series so that values[0] == base_capital.

    Every value is multiplied by base_capital / values[0] and rounded to
    2 decimals. A zero first value has no valid factor and the input is
    returned unchanged.

    Example:
        scale_values([200, 220, 180])
        # [10000.0, 11000.0, 9000.0]
    """
    if len(values) == 0:
        return []
    if values[0] == 0:
        logger.debug("First value is zero, series left unscaled")
        return list(values)

    factor = base_capital / values[0]
    return to_nullable_list(round_series(to_float_series(values) * factor))


def scale_nullable_values(
    values: Sequence[Optional[float]],
    base_capital: float = DEFAULT_SETTINGS.base_capital
) -> NullableSeries:
    """
    Scale a sparse series so its first non-null, non-zero value == base_capital.

    Null rule: None passes through unchanged. Without any usable anchor the
    input is returned unchanged.
    """
    if len(values) == 0:
        return []

    anchor = next((v for v in values if v is not None and v != 0), None)
    if anchor is None:
        return list(values)

    factor = base_capital / anchor
    return to_nullable_list(round_series(to_float_series(values) * factor))


# =============================================================================
# Trade Window Filter
# =============================================================================

def filter_trades(
    trades: Sequence[PerTradeReturn],
    boundary_value: float,
    tolerance: float = DEFAULT_SETTINGS.trade_window_tolerance
) -> List[PerTradeReturn]:
    """
    Keep the trades that started inside the rebased window.

    Trades carry no dates, so a trade counts as inside the window when its
    opening capital is at least `tolerance` times the unscaled portfolio
    value on the first rebased date. This is an approximation and can
    misclassify trades opened right at the boundary.

    Args:
        trades: Full-history trades in original order
        boundary_value: Original (pre-scaling) portfolio value at the start index
        tolerance: Fraction of boundary_value a trade's cv_start must reach

    Returns:
        New PerTradeReturn objects, trade_id renumbered 0..n-1 in original order
    """
    threshold = boundary_value * tolerance
    kept = [t for t in trades if t.cv_start >= threshold]
    return [dataclasses.replace(t, trade_id=i) for i, t in enumerate(kept)]


# =============================================================================
# Statistics Aggregator
# =============================================================================

def compute_statistics(
    equity_curve: EquityCurve,
    drawdown: Drawdown,
    monthly_returns: MonthlyReturns,
    trades: Sequence[PerTradeReturn],
    settings: RebaseSettings = DEFAULT_SETTINGS
) -> Statistics:
    """
    Assemble summary statistics from an already rebased record.

    Args:
        equity_curve: Rebased curve; portfolio_value[0] is the base capital
        drawdown: Drawdowns recomputed from the rebased curve
        monthly_returns: Monthly returns recomputed from the rebased curve
        trades: Filtered, renumbered trades
        settings: Base capital and annualization factor

    Returns:
        Statistics for the window. Ratios need at least two points and
        are None otherwise.
    """
    values = equity_curve.portfolio_value
    base = settings.base_capital
    final_capital = values[-1]

    total_return_pct = round_half_away((final_capital / base - 1) * 100)

    daily_returns = calculate_daily_returns(values)

    # Benchmark: first value present to the last element
    btc = equity_curve.btc_benchmark
    btc_start = next((v for v in btc if v is not None), None)
    btc_end = btc[-1] if btc else None
    btc_return_pct = calculate_total_return(btc_start, btc_end)
    strategy_vs_btc = (
        round_half_away(total_return_pct - btc_return_pct)
        if btc_return_pct is not None
        else None
    )

    trade_returns = [t.return_pct for t in trades]
    months = flatten_monthly_returns(monthly_returns)

    return Statistics(
        total_return_pct=total_return_pct,
        annualized_return_pct=calculate_cagr(
            base, final_capital, equity_curve.dates[0], equity_curve.dates[-1],
            periods=settings.periods_per_year,
        ),
        sharpe_ratio=calculate_sharpe_ratio(daily_returns, periods=settings.periods_per_year),
        sortino_ratio=calculate_sortino_ratio(daily_returns, periods=settings.periods_per_year),
        max_drawdown_pct=calculate_max_drawdown(drawdown.drawdown_pct),
        max_realised_drawdown_pct=calculate_max_drawdown(drawdown.trade_only_drawdown_pct),
        max_trade_drawdown_pct=round_half_away(min(trade_returns)) if trade_returns else None,
        best_trade_pct=round_half_away(max(trade_returns)) if trade_returns else None,
        num_trades=len(trades),
        strategy_vs_btc_pct=strategy_vs_btc,
        best_month_pct=max(months) if months else None,
        worst_month_pct=min(months) if months else None,
        winning_months=sum(1 for m in months if m > 0),
        losing_months=sum(1 for m in months if m < 0),
        starting_capital=base,
        final_capital=round_half_away(final_capital),
    )


# =============================================================================
# Rebase Orchestrator
# =============================================================================

def rebase_dashboard_data(
    data: DashboardData,
    start_year: Optional[int],
    settings: Optional[RebaseSettings] = None
) -> DashboardData:
    """
    Rebase all dashboard data assuming investment starts on Jan 1 of start_year.

    Returns `data` itself (not a copy) when start_year is None, when the
    year resolves to the first date, when it is after the last date, or
    when the portfolio value on the new start date is zero. Otherwise returns a new DashboardData; the input is never modified.

    Args:
        data: Full-history dataset
        start_year: Calendar year to start from, or None for all history
        settings: Numeric conventions (defaults: 10,000 base, 365 days, 95%)

    Returns:
        The original dataset or a self-consistent rebased copy
    """
    if start_year is None:
        return data

    settings = settings or DEFAULT_SETTINGS
    target = f"{start_year}-01-01"
    dates = data.equity_curve.dates
    idx = find_start_index(dates, target)

    if idx == 0 or idx >= len(dates):
        logger.debug(f"Start year {start_year} resolves to index {idx} of {len(dates)}, returning original data")
        return data

    curve = data.equity_curve
    sliced_dates = dates[idx:]
    sliced_values = curve.portfolio_value[idx:]
    if sliced_values[0] == 0:
        logger.debug(f"Portfolio value is zero on {sliced_dates[0]}, no scale factor; returning original data")
        return data

    equity_curve = EquityCurve(
        dates=sliced_dates,
        portfolio_value=scale_values(sliced_values, settings.base_capital),
        btc_benchmark=scale_nullable_values(curve.btc_benchmark[idx:], settings.base_capital),
        step_chart=scale_nullable_values(curve.step_chart[idx:], settings.base_capital),
    )

    drawdown = Drawdown(
        dates=list(sliced_dates),
        drawdown_pct=calculate_drawdown_series(equity_curve.portfolio_value),
        trade_only_drawdown_pct=calculate_nullable_drawdown_series(equity_curve.step_chart),
        btc_drawdown_pct=calculate_nullable_drawdown_series(equity_curve.btc_benchmark),
    )

    sharpe_idx = find_start_index(data.rolling_sharpe.dates, target)
    rolling_sharpe = RollingSharpe(
        dates=data.rolling_sharpe.dates[sharpe_idx:],
        sharpe_90d=data.rolling_sharpe.sharpe_90d[sharpe_idx:],
    )

    monthly_returns = calculate_monthly_returns(sliced_dates, equity_curve.portfolio_value)

    trades = filter_trades(
        data.per_trade_returns,
        boundary_value=sliced_values[0],
        tolerance=settings.trade_window_tolerance,
    )

    statistics = compute_statistics(equity_curve, drawdown, monthly_returns, trades, settings)

    logger.info(
        f"Rebased to {sliced_dates[0]}: {len(sliced_dates)} days, "
        f"{len(trades)}/{len(data.per_trade_returns)} trades, "
        f"total return {statistics.total_return_pct}%"
    )

    return dataclasses.replace(
        data,
        metadata=dataclasses.replace(data.metadata, start_date=sliced_dates[0]),
        equity_curve=equity_curve,
        drawdown=drawdown,
        monthly_returns=monthly_returns,
        rolling_sharpe=rolling_sharpe,
        statistics=statistics,
        per_trade_returns=trades,
    )


# =============================================================================
# Memoization
# =============================================================================

class RebaseCache:
    """
    Memoize rebase results per (dataset, start year).

    The cache holds a reference to the dataset it was filled from. Passing a
    different dataset object drops every entry, so results never outlive the
    data they were computed from.

    Example:
        cache = RebaseCache()
        view = cache.get(data, 2022)      # computed
        view = cache.get(data, 2022)      # cached
        view = cache.get(new_data, 2022)  # cache cleared, recomputed
    """

    def __init__(self, settings: Optional[RebaseSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self._source: Optional[DashboardData] = None
        self._entries: Dict[Optional[int], DashboardData] = {}

    def get(self, data: DashboardData, start_year: Optional[int]) -> DashboardData:
        if data is not self._source:
            self.invalidate()
            self._source = data

        if start_year in self._entries:
            logger.debug(f"Rebase cache hit for start year {start_year}")
            return self._entries[start_year]

        result = rebase_dashboard_data(data, start_year, self.settings)
        self._entries[start_year] = result
        return result

    def invalidate(self):
        """Drop every cached result and forget the source dataset."""
        self._source = None
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
