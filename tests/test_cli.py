import json

from dashboard_metrics import cli


def test_main_prints_rebased_document(dashboard_file, capsys):
    exit_code = cli.main(["--data", str(dashboard_file), "--start-year", "2022"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["metadata"]["start_date"] == "2022-01-01"
    assert payload["equity_curve"]["portfolio_value"][0] == 10000.0


def test_main_without_start_year_keeps_original(dashboard_file, dashboard_dict, capsys):
    exit_code = cli.main(["--data", str(dashboard_file)])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["equity_curve"]["dates"] == dashboard_dict["equity_curve"]["dates"]
    assert payload["statistics"]["total_return_pct"] == 32.0


def test_main_summary_only(dashboard_file, capsys):
    exit_code = cli.main(["--data", str(dashboard_file), "--start-year", "2022", "--summary"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["num_trades"] == 2
    assert payload["final_capital"] == 11880.0
    assert "equity_curve" not in payload


def test_main_lists_years(dashboard_file, capsys):
    exit_code = cli.main(["--data", str(dashboard_file), "--list-years"])

    assert exit_code == 0
    assert capsys.readouterr().out.split() == ["2021", "2022"]


def test_main_writes_output_file(dashboard_file, tmp_path):
    output = tmp_path / "rebased.json"

    exit_code = cli.main(["--data", str(dashboard_file), "--start-year", "2022", "--output", str(output)])

    assert exit_code == 0
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["per_trade_returns"][0]["trade_id"] == 0


def test_main_missing_file_returns_error(tmp_path, capsys):
    exit_code = cli.main(["--data", str(tmp_path / "missing.json")])

    assert exit_code == 1
    assert capsys.readouterr().out == ""
