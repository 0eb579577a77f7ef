"""
Dashboard Data Loader

Read the exported dashboard JSON, fill in sections that older exports lack,
and check that the series are aligned before anything is rebased.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import pandas as pd

from .errors import InsufficientDataError, InvalidDataError
from .models import DashboardData

logger = logging.getLogger(__name__)


def load_dashboard_data(path: Union[str, Path]) -> DashboardData:
    """
    Load, default and validate a dashboard JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidDataError: If the file is not valid JSON or not a usable document
        InsufficientDataError: If the equity curve has no dates
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dashboard data file '{path}' does not exist")

    with path.open("r", encoding="utf-8") as fh:
        try:
            raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise InvalidDataError(f"Dashboard data file '{path}' is not valid JSON: {exc}") from exc

    data = parse_dashboard_data(raw)
    logger.debug(f"Loaded {len(data.equity_curve.dates)} days and {len(data.per_trade_returns)} trades from {path}")
    return data


def parse_dashboard_data(raw: Dict[str, Any]) -> DashboardData:
    """
    Build a validated DashboardData from a parsed JSON document.

    Missing optional sections default as follows: step_chart,
    trade_only_drawdown_pct, btc_drawdown_pct and per_trade_returns to [];
    current_position to a closed position with null fields;
    statistics.max_trade_drawdown_pct and strategy_vs_btc_pct to None.
    """
    if not isinstance(raw, dict):
        raise InvalidDataError(f"Dashboard document must be a JSON object, got {type(raw).__name__}")
    if not isinstance(raw.get('equity_curve'), dict):
        raise InvalidDataError("Dashboard document has no 'equity_curve' section")

    try:
        data = DashboardData.from_dict(raw)
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidDataError(f"Malformed dashboard document: {exc}") from exc

    validate_dashboard_data(data)
    return data


def _check_aligned(name: str, values: Sequence, dates: Sequence[str], sparse: bool = False):
    if sparse and len(values) == 0:
        return
    if len(values) != len(dates):
        raise InvalidDataError(f"{name} has {len(values)} values but {len(dates)} dates")


def _check_ascending(name: str, dates: Sequence[str]):
    for prev, curr in zip(dates, dates[1:]):
        if curr <= prev:
            raise InvalidDataError(f"{name} must be strictly ascending, found {prev} then {curr}")


def validate_dashboard_data(data: DashboardData):
    """
    Check the invariants the rebase engine relies on.

    Raises:
        InsufficientDataError: If the equity curve has no dates
        InvalidDataError: If series and dates are misaligned or dates are unordered
    """
    curve = data.equity_curve
    if len(curve.dates) == 0:
        raise InsufficientDataError("equity_curve.dates is empty - nothing to display")

    _check_ascending("equity_curve.dates", curve.dates)
    _check_aligned("equity_curve.portfolio_value", curve.portfolio_value, curve.dates)
    _check_aligned("equity_curve.btc_benchmark", curve.btc_benchmark, curve.dates, sparse=True)
    _check_aligned("equity_curve.step_chart", curve.step_chart, curve.dates, sparse=True)

    dd = data.drawdown
    _check_aligned("drawdown.drawdown_pct", dd.drawdown_pct, dd.dates)
    _check_aligned("drawdown.trade_only_drawdown_pct", dd.trade_only_drawdown_pct, dd.dates, sparse=True)
    _check_aligned("drawdown.btc_drawdown_pct", dd.btc_drawdown_pct, dd.dates, sparse=True)

    rs = data.rolling_sharpe
    _check_ascending("rolling_sharpe.dates", rs.dates)
    _check_aligned("rolling_sharpe.sharpe_90d", rs.sharpe_90d, rs.dates)


def get_available_years(dates: Sequence[str]) -> List[int]:
    """
    Calendar years a user can pick as a start year.

    Returns:
        Every year from the first to the last date, inclusive ([] if no dates)
    """
    if len(dates) == 0:
        return []
    start_year = pd.Timestamp(dates[0]).year
    end_year = pd.Timestamp(dates[-1]).year
    return list(range(start_year, end_year + 1))
