"""
Dashboard Metrics - Rebasing and statistics for backtest dashboards
===================================================================

Rebuilds a backtested strategy's performance record from a chosen start
year: rescaled equity, recomputed drawdowns, monthly returns, risk ratios
and trade statistics.

Usage:
    from dashboard_metrics import load_dashboard_data, rebase_dashboard_data

    data = load_dashboard_data("public/data/dashboard.json")
    rebased = rebase_dashboard_data(data, 2022)

    # Or memoized per start year
    from dashboard_metrics import RebaseCache
    cache = RebaseCache()
    rebased = cache.get(data, 2022)
"""

from . import metrics
from . import rebase
from . import loader

from .config import (
    BASE_CAPITAL,
    PERIODS_PER_YEAR,
    TRADE_WINDOW_TOLERANCE,
    RebaseSettings,
    DEFAULT_SETTINGS,
)

# Errors - raised for unusable documents, never for numeric edge cases
from .errors import InsufficientDataError, InvalidDataError

from .metrics import (
    # Rounding
    round_half_away,

    # Core metric calculations
    calculate_drawdown_series,
    calculate_nullable_drawdown_series,
    calculate_max_drawdown,
    calculate_daily_returns,
    calculate_total_return,
    calculate_cagr,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_monthly_returns,
    flatten_monthly_returns,
)

from .models import (
    DashboardData,
    Metadata,
    EquityCurve,
    Drawdown,
    RollingSharpe,
    Statistics,
    PerTradeReturn,
    CurrentPosition,
)

from .rebase import (
    find_start_index,
    scale_values,
    scale_nullable_values,
    filter_trades,
    compute_statistics,
    rebase_dashboard_data,
    RebaseCache,
)

from .loader import (
    load_dashboard_data,
    parse_dashboard_data,
    validate_dashboard_data,
    get_available_years,
)

__version__ = "0.1.0"
__all__ = [
    # Errors
    "InsufficientDataError",
    "InvalidDataError",
    # Modules
    "metrics",
    "rebase",
    "loader",
    # Settings
    "BASE_CAPITAL",
    "PERIODS_PER_YEAR",
    "TRADE_WINDOW_TOLERANCE",
    "RebaseSettings",
    "DEFAULT_SETTINGS",
    # Calculations
    "round_half_away",
    "calculate_drawdown_series",
    "calculate_nullable_drawdown_series",
    "calculate_max_drawdown",
    "calculate_daily_returns",
    "calculate_total_return",
    "calculate_cagr",
    "calculate_sharpe_ratio",
    "calculate_sortino_ratio",
    "calculate_monthly_returns",
    "flatten_monthly_returns",
    # Data model
    "DashboardData",
    "Metadata",
    "EquityCurve",
    "Drawdown",
    "RollingSharpe",
    "Statistics",
    "PerTradeReturn",
    "CurrentPosition",
    # Rebase
    "find_start_index",
    "scale_values",
    "scale_nullable_values",
    "filter_trades",
    "compute_statistics",
    "rebase_dashboard_data",
    "RebaseCache",
    # Loading
    "load_dashboard_data",
    "parse_dashboard_data",
    "validate_dashboard_data",
    "get_available_years",
]
