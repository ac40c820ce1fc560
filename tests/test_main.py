"""Tests for the CLI demo and configuration."""

from sealed_orders import main
from sealed_orders.config import Settings
from sealed_orders.sample_data import create_ledger, create_sample_ledger, place_order


def run_session(monkeypatch, commands):
    feed = iter(commands)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(feed))
    main.run_demo()


class TestDemoShell:
    def test_create_list_and_stats(self, monkeypatch, capsys):
        run_session(monkeypatch, [
            "help",
            "create 100 25 Corporate Offset",
            "list corporate",
            "mine",
            "stats",
            "status",
            "quit",
        ])
        out = capsys.readouterr().out

        assert "Commands:" in out
        assert "Created: TradeOrder(" in out
        assert "Corporate Offset" in out
        assert "Total orders:   1" in out
        assert "Verified:       0/1" in out
        assert "Ledger is available" in out
        assert "Goodbye!" in out

    def test_errors_name_the_failing_step(self, monkeypatch, capsys):
        run_session(monkeypatch, [
            "show missing-id",
            "verify missing-id",
            "create lots 25 Bad",
            "bogus",
            "quit",
        ])
        out = capsys.readouterr().out

        assert "Error [lookup]: Order missing-id does not exist" in out
        assert "Error: invalid literal" in out
        assert "Invalid command" in out

    def test_end_of_input_exits(self, monkeypatch, capsys):
        def eof(prompt=""):
            raise EOFError

        monkeypatch.setattr("builtins.input", eof)
        main.run_demo()
        assert "Goodbye!" in capsys.readouterr().out


class TestRunVerification:
    def test_reports_fresh_and_repeated_verification(self, capsys):
        ledger, coordinator = create_ledger(Settings())
        order = place_order(ledger, "Offset", 100, 25, "0xalice", order_id="A")

        main.run_verification(coordinator, order.order_id)
        main.run_verification(coordinator, order.order_id)
        out = capsys.readouterr().out

        assert "Verified: 100 @ 25" in out
        assert "Already verified: 100 @ 25" in out

    def test_print_order(self, capsys):
        ledger, _ = create_sample_ledger(Settings())
        main.print_order(ledger.get_order("carbon-1001"))
        main.print_order(ledger.get_order("carbon-1002"))
        out = capsys.readouterr().out

        assert "120 (verified)" in out
        assert "<FHE encrypted>" in out


class TestSettings:
    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SEALED_ORDERS_PORT", "9001")
        monkeypatch.setenv("SEALED_ORDERS_SEED_SAMPLE_DATA", "false")
        monkeypatch.setenv("SEALED_ORDERS_LEDGER_ADDRESS", "0xfeed")

        config = Settings()

        assert config.PORT == 9001
        assert config.SEED_SAMPLE_DATA is False
        assert config.LEDGER_ADDRESS == "0xfeed"

    def test_ledger_uses_configured_address(self, monkeypatch):
        monkeypatch.setenv("SEALED_ORDERS_LEDGER_ADDRESS", "0xfeed")
        ledger, _ = create_ledger(Settings())
        assert ledger.address == "0xfeed"
