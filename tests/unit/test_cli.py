"""Unit tests for CLI argument parsing and table output."""
from __future__ import annotations

import pytest

from mergecalc.cli import build_parser, format_table, main
from mergecalc.config import AppConfig
from mergecalc.models import MarketBundle
from mergecalc.services import AllocationView
from mergecalc.web.render import snapshot


class TestBuildParser:
    def test_serve_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["serve"])
        assert args.command == "serve"
        assert args.host is None
        assert args.port is None

    def test_serve_overrides(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["serve", "--host", "0.0.0.0", "--port", "9001"])
        assert args.host == "0.0.0.0"
        assert args.port == 9001

    def test_snapshot_command_default_amount(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["snapshot"])
        assert args.command == "snapshot"
        assert args.amount is None

    def test_snapshot_command_custom_amount(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["snapshot", "--amount", "2500"])
        assert args.amount == "2500"

    def test_config_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--config", "/tmp/c.yaml", "serve"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--log-level", "DEBUG", "snapshot"])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args([])
        assert args.command is None


class TestMain:
    def test_no_command_exits(self) -> None:
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1


class TestFormatTable:
    def test_contains_rows_and_allocations(
        self, sample_app_config: AppConfig, sample_bundle: MarketBundle
    ) -> None:
        view = AllocationView(sample_app_config, sample_bundle)
        text = format_table(snapshot(view))
        lines = text.splitlines()

        assert lines[0].startswith("Token")
        assert set(lines[1]) <= {"-", " "}
        assert any(line.startswith("AERO") and "$1.0000" in line for line in lines)
        assert any(line.startswith("VELO") for line in lines)
        assert "AERO Allocation: 1,890,000,000 tokens (94.5%)" in lines
        assert "VELO Allocation: 110,000,000 tokens (5.5%)" in lines
