"""
Shared fixtures: a small dashboard document spanning a year boundary.

Rebasing it to 2022 starts at index 2 (portfolio value 20,000), so every
scaled value is exactly half the original.
"""
import copy
import json

import pytest


DASHBOARD_DOCUMENT = {
    "metadata": {
        "strategy_name": "Trend Follower",
        "asset": "BTCUSDT",
        "exchange": "binance",
        "start_date": "2021-12-30",
        "end_date": "2022-02-01",
        "last_updated": "2022-02-02",
        "starting_capital": 10000,
        "timeframe": "1d",
    },
    "equity_curve": {
        "dates": ["2021-12-30", "2021-12-31", "2022-01-01", "2022-01-02", "2022-01-03", "2022-02-01"],
        "portfolio_value": [18000, 19000, 20000, 22000, 19800, 23760],
        "btc_benchmark": [None, None, None, 40000, 44000, 36000],
        "step_chart": [18000, None, 20000, None, 19800, 23760],
    },
    "drawdown": {
        "dates": ["2021-12-30", "2021-12-31", "2022-01-01", "2022-01-02", "2022-01-03", "2022-02-01"],
        "drawdown_pct": [0.0, 0.0, 0.0, 0.0, -10.0, 0.0],
        "trade_only_drawdown_pct": [0.0, None, 0.0, None, -1.0, 0.0],
        "btc_drawdown_pct": [None, None, None, 0.0, 0.0, -18.18],
    },
    "monthly_returns": {
        "2021": {"12": 5.56},
        "2022": {"1": -1.0, "2": 20.0},
    },
    "rolling_sharpe": {
        "dates": ["2021-12-31", "2022-01-02", "2022-02-01"],
        "sharpe_90d": [None, 1.5, 2.0],
    },
    "statistics": {
        "total_return_pct": 32.0,
        "sharpe_ratio": 7.1,
        "sortino_ratio": None,
        "max_drawdown_pct": -10.0,
        "max_realised_drawdown_pct": -1.0,
        "max_trade_drawdown_pct": -5.0,
        "best_trade_pct": 10.0,
        "num_trades": 4,
        "strategy_vs_btc_pct": 42.0,
        "best_month_pct": 20.0,
        "worst_month_pct": -1.0,
        "winning_months": 2,
        "losing_months": 1,
        "starting_capital": 10000,
        "final_capital": 13200,
    },
    "per_trade_returns": [
        {"trade_id": 0, "side": "long", "status": "closed", "return_pct": -5.0, "cv_start": 15000, "cv_exit": 14250},
        {"trade_id": 1, "side": "short", "status": "closed", "return_pct": 3.3, "cv_start": 18500, "cv_exit": 19110},
        {"trade_id": 2, "side": "long", "status": "closed", "return_pct": 10.0, "cv_start": 19000, "cv_exit": 20900},
        {"trade_id": 3, "side": "long", "status": "open", "return_pct": -2.5, "cv_start": 21000, "cv_exit": 20475},
    ],
    "current_position": {
        "is_open": True,
        "side": "long",
        "entry_capital": 21000,
        "current_capital": 23760,
        "unrealized_pnl_usdt": 2760,
        "unrealized_pnl_pct": 13.14,
    },
}


@pytest.fixture
def dashboard_dict():
    """Raw dashboard document (a fresh deep copy per test)."""
    return copy.deepcopy(DASHBOARD_DOCUMENT)


@pytest.fixture
def dashboard_data(dashboard_dict):
    """Parsed DashboardData for the sample document."""
    from dashboard_metrics import DashboardData

    return DashboardData.from_dict(dashboard_dict)


@pytest.fixture
def dashboard_file(tmp_path, dashboard_dict):
    """Sample document written to a temporary JSON file."""
    path = tmp_path / "dashboard.json"
    path.write_text(json.dumps(dashboard_dict), encoding="utf-8")
    return path
