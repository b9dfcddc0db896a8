"""Tests for CLI commands.

**Feature: crypto-chart**
"""

from unittest.mock import patch

from click.testing import CliRunner

from cryptochart.chart.session import ChartSession
from cryptochart.cli.main import cli
from cryptochart.config import Settings
from cryptochart.errors import NetworkFailure

from conftest import make_candles
from test_session import FakeExchange


class TestWatchCommands:
    """Watchlist edits persist through the store."""

    def test_add_list_remove(self, temp_dir):
        runner = CliRunner()

        with patch("cryptochart.config.DB_PATH", temp_dir / "test.db"), \
                patch("cryptochart.cli.watchlist._get_settings", return_value=Settings()):
            added = runner.invoke(cli, ["watch", "add", "solusdt"])
            again = runner.invoke(cli, ["watch", "add", "SOLUSDT"])
            removed = runner.invoke(cli, ["watch", "remove", "ETHUSDT"])
            listed = runner.invoke(cli, ["watch", "list"])

        assert added.exit_code == 0
        assert "Added SOLUSDT" in added.output
        assert "already in watchlist" in again.output
        assert "Removed ETHUSDT" in removed.output
        assert "BTCUSDT" in listed.output
        assert "SOLUSDT" in listed.output
        assert "ETHUSDT" not in listed.output


class TestChartCommands:
    """Chart and trendline commands render from a chart session."""

    def _session(self, *args, **kwargs):
        return ChartSession(FakeExchange({"BTCUSDT": make_candles(30)}), "BTCUSDT", sample_rate=10)

    def test_chart_renders_display(self):
        runner = CliRunner()

        with patch("cryptochart.cli.chart._get_session", side_effect=self._session):
            result = runner.invoke(cli, ["chart", "BTCUSDT"])

        assert result.exit_code == 0
        assert "3 shown of 30" in result.output

    def test_scroll_unzoomed_shows_notice(self):
        runner = CliRunner()

        with patch("cryptochart.cli.chart._get_session", side_effect=self._session):
            result = runner.invoke(cli, ["chart", "BTCUSDT", "--scroll", "50"])

        assert result.exit_code == 0
        assert "zoom in first" in result.output

    def test_network_failure_exits(self):
        runner = CliRunner()
        exchange = FakeExchange({}, errors={"BTCUSDT": NetworkFailure("fetch klines for BTCUSDT", "down")})

        with patch(
            "cryptochart.cli.chart._get_session",
            return_value=ChartSession(exchange, "BTCUSDT"),
        ):
            result = runner.invoke(cli, ["chart", "BTCUSDT"])

        assert result.exit_code == 1
        assert "down" in result.output

    def test_trendline_details(self):
        runner = CliRunner()

        with patch("cryptochart.cli.chart._get_session", side_effect=self._session):
            result = runner.invoke(cli, ["trendline", "BTCUSDT", "--at", "0", "--at", "2"])

        assert result.exit_code == 0
        assert "Starting Point" in result.output
        assert "$100.50" in result.output
        assert "$120.50" in result.output
