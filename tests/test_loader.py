"""
Tests for the Dashboard Data Loader
===================================

Run with: pytest tests/test_loader.py -v
"""
import json

import pytest


class TestLoadDashboardData:
    """Tests for load_dashboard_data function."""

    def test_loads_document(self, dashboard_file):
        from dashboard_metrics import load_dashboard_data

        data = load_dashboard_data(dashboard_file)

        assert data.metadata.strategy_name == "Trend Follower"
        assert len(data.equity_curve.dates) == 6
        assert data.equity_curve.btc_benchmark[:3] == [None, None, None]
        assert data.per_trade_returns[2].cv_start == 19000.0
        assert data.current_position.is_open is True

    def test_missing_file(self, tmp_path):
        from dashboard_metrics import load_dashboard_data

        with pytest.raises(FileNotFoundError):
            load_dashboard_data(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        from dashboard_metrics import InvalidDataError, load_dashboard_data

        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidDataError):
            load_dashboard_data(path)


class TestParseDashboardData:
    """Defaults for older exports and structural checks."""

    def test_defaults_for_missing_optional_fields(self, dashboard_dict):
        from dashboard_metrics import parse_dashboard_data

        del dashboard_dict["equity_curve"]["step_chart"]
        del dashboard_dict["drawdown"]["trade_only_drawdown_pct"]
        del dashboard_dict["drawdown"]["btc_drawdown_pct"]
        del dashboard_dict["per_trade_returns"]
        del dashboard_dict["current_position"]
        del dashboard_dict["statistics"]["max_trade_drawdown_pct"]
        del dashboard_dict["statistics"]["strategy_vs_btc_pct"]

        data = parse_dashboard_data(dashboard_dict)

        assert data.equity_curve.step_chart == []
        assert data.drawdown.trade_only_drawdown_pct == []
        assert data.drawdown.btc_drawdown_pct == []
        assert data.per_trade_returns == []
        assert data.current_position.to_dict() == {
            "is_open": False,
            "side": None,
            "entry_capital": None,
            "current_capital": None,
            "unrealized_pnl_usdt": None,
            "unrealized_pnl_pct": None,
        }
        assert data.statistics.max_trade_drawdown_pct is None
        assert data.statistics.strategy_vs_btc_pct is None

    def test_not_an_object(self):
        from dashboard_metrics import InvalidDataError, parse_dashboard_data

        with pytest.raises(InvalidDataError):
            parse_dashboard_data([1, 2, 3])

    def test_missing_equity_curve(self, dashboard_dict):
        from dashboard_metrics import InvalidDataError, parse_dashboard_data

        del dashboard_dict["equity_curve"]

        with pytest.raises(InvalidDataError):
            parse_dashboard_data(dashboard_dict)

    def test_malformed_trade(self, dashboard_dict):
        from dashboard_metrics import InvalidDataError, parse_dashboard_data

        del dashboard_dict["per_trade_returns"][0]["cv_start"]

        with pytest.raises(InvalidDataError):
            parse_dashboard_data(dashboard_dict)

    def test_misaligned_dense_series(self, dashboard_dict):
        from dashboard_metrics import InvalidDataError, parse_dashboard_data

        dashboard_dict["equity_curve"]["portfolio_value"].pop()

        with pytest.raises(InvalidDataError, match="portfolio_value"):
            parse_dashboard_data(dashboard_dict)

    def test_misaligned_sparse_series(self, dashboard_dict):
        from dashboard_metrics import InvalidDataError, parse_dashboard_data

        dashboard_dict["equity_curve"]["step_chart"] = [1.0, None]

        with pytest.raises(InvalidDataError, match="step_chart"):
            parse_dashboard_data(dashboard_dict)

    def test_unordered_dates(self, dashboard_dict):
        from dashboard_metrics import InvalidDataError, parse_dashboard_data

        dates = dashboard_dict["equity_curve"]["dates"]
        dates[1], dates[2] = dates[2], dates[1]

        with pytest.raises(InvalidDataError, match="ascending"):
            parse_dashboard_data(dashboard_dict)

    def test_empty_equity_curve(self, dashboard_dict):
        from dashboard_metrics import InsufficientDataError, parse_dashboard_data

        dashboard_dict["equity_curve"] = {"dates": [], "portfolio_value": [], "btc_benchmark": []}

        with pytest.raises(InsufficientDataError):
            parse_dashboard_data(dashboard_dict)


class TestSerialization:
    """DashboardData.to_dict keeps the document shape."""

    def test_top_level_sections(self, dashboard_data):
        result = dashboard_data.to_dict()

        assert set(result) == {
            "metadata", "equity_curve", "drawdown", "monthly_returns",
            "rolling_sharpe", "statistics", "per_trade_returns", "current_position",
        }

    def test_metadata_extra_fields_preserved(self, dashboard_data):
        metadata = dashboard_data.to_dict()["metadata"]

        assert metadata["timeframe"] == "1d"
        assert metadata["start_date"] == "2021-12-30"

    def test_metadata_keeps_source_keys_and_order(self, dashboard_dict, dashboard_data):
        metadata = dashboard_data.to_dict()["metadata"]

        assert list(metadata) == list(dashboard_dict["metadata"])

    def test_metadata_does_not_add_absent_keys(self):
        from dashboard_metrics import Metadata

        metadata = Metadata.from_dict({"strategy_name": "Trend Follower", "start_date": "2021-12-30"})

        assert metadata.to_dict() == {"strategy_name": "Trend Follower", "start_date": "2021-12-30"}

    def test_metadata_absent_keys_stay_absent_after_rebase(self, dashboard_dict):
        from dashboard_metrics import DashboardData, rebase_dashboard_data

        dashboard_dict["metadata"] = {"strategy_name": "Trend Follower", "start_date": "2021-12-30"}
        rebased = rebase_dashboard_data(DashboardData.from_dict(dashboard_dict), 2022)

        assert rebased.to_dict()["metadata"] == {"strategy_name": "Trend Follower", "start_date": "2022-01-01"}

    def test_metadata_null_values_kept(self):
        from dashboard_metrics import Metadata

        assert Metadata.from_dict({"asset": None}).to_dict() == {"asset": None}

    def test_json_serializable(self, dashboard_data):
        from dashboard_metrics import rebase_dashboard_data

        text = json.dumps(rebase_dashboard_data(dashboard_data, 2022).to_dict())
        assert '"portfolio_value": [10000.0, 11000.0, 9900.0, 11880.0]' in text

    def test_series_round_trip(self, dashboard_dict, dashboard_data):
        result = dashboard_data.to_dict()

        assert result["equity_curve"]["btc_benchmark"] == dashboard_dict["equity_curve"]["btc_benchmark"]
        assert result["monthly_returns"] == dashboard_dict["monthly_returns"]
        assert result["per_trade_returns"] == dashboard_dict["per_trade_returns"]


class TestGetAvailableYears:
    """Tests for get_available_years function."""

    def test_inclusive_range(self):
        from dashboard_metrics import get_available_years

        assert get_available_years(["2020-05-01", "2021-01-01", "2023-01-02"]) == [2020, 2021, 2022, 2023]

    def test_single_year(self):
        from dashboard_metrics import get_available_years

        assert get_available_years(["2024-03-01", "2024-09-01"]) == [2024]

    def test_empty(self):
        from dashboard_metrics import get_available_years

        assert get_available_years([]) == []
