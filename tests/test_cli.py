"""Tests for CLI interface.

Test Coverage:
    - Argument parsing
    - Command routing
    - Exit codes per error kind
    - Menu command with a mocked pipeline
    - Cache maintenance commands against real stores
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from liondine.cli import cmd_menu, create_parser, format_menu, main
from liondine.errors import StructuringFailed, UpstreamFetchFailed
from liondine.pipeline import AcquireResult


class TestParserCreation:
    """Test CLI parser creation."""

    def test_parser_help(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--help"])

    def test_parser_prog_name(self):
        assert create_parser().prog == "liondine"


class TestMenuParsing:
    """Test menu command parsing."""

    def test_menu_requires_meal(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["menu"])

    def test_menu_defaults(self):
        args = create_parser().parse_args(["menu", "lunch"])
        assert args.command == "menu"
        assert args.meal == "lunch"
        assert args.refresh is False
        assert args.format == "text"
        assert args.backend is None
        assert args.cache_dir is None

    def test_menu_options(self):
        args = create_parser().parse_args(
            ["menu", "dinner", "--refresh", "--format", "json", "--backend", "parquet"]
        )
        assert args.refresh is True
        assert args.format == "json"
        assert args.backend == "parquet"

    def test_invalid_backend(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["menu", "lunch", "--backend", "redis"])

    def test_cache_subcommands(self):
        args = create_parser().parse_args(["cache", "stats", "--backend", "memory"])
        assert args.command == "cache"
        assert args.cache_command == "stats"


class TestMenuCommand:
    """Test menu command execution."""

    @pytest.fixture
    def mock_pipeline(self, lunch_record):
        orchestrator = MagicMock()
        orchestrator.acquire = AsyncMock(
            return_value=AcquireResult(record=lunch_record, cache_hit=False)
        )
        with patch("liondine.cli.build_cache_store") as build_cache, patch(
            "liondine.cli.build_orchestrator", return_value=orchestrator
        ):
            yield orchestrator, build_cache

    def test_text_output(self, mock_pipeline, capsys):
        args = create_parser().parse_args(["menu", "lunch"])

        assert cmd_menu(args) == 0

        out = capsys.readouterr().out
        assert "Lunch menu" in out
        assert "cache MISS" in out
        assert "John Jay [open] 11:00 AM to 2:30 PM" in out
        assert "    - Grilled Chicken" in out

    def test_json_output(self, mock_pipeline, capsys):
        orchestrator, _ = mock_pipeline
        args = create_parser().parse_args(["menu", "LUNCH", "--refresh", "--format", "json"])

        assert cmd_menu(args) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["cache"] == "MISS"
        assert data["mealType"] == "lunch"
        assert len(data["diningHalls"]) == 3
        assert orchestrator.acquire.call_args.kwargs["bypass_cache"] is True

    def test_backend_override(self, mock_pipeline, tmp_path):
        _, build_cache = mock_pipeline
        args = create_parser().parse_args(
            ["menu", "lunch", "--backend", "parquet", "--cache-dir", str(tmp_path)]
        )

        cmd_menu(args)

        cfg = build_cache.call_args.args[0]
        assert cfg.cache_backend == "parquet"
        assert cfg.cache_dir == str(tmp_path)

    def test_invalid_meal_exit_code(self, mock_pipeline, capsys):
        orchestrator, _ = mock_pipeline
        args = create_parser().parse_args(["menu", "brunch"])

        assert cmd_menu(args) == 2
        assert "Invalid meal type" in capsys.readouterr().err
        orchestrator.acquire.assert_not_called()

    def test_pipeline_error_exit_code(self, mock_pipeline, capsys):
        orchestrator, _ = mock_pipeline
        orchestrator.acquire.side_effect = UpstreamFetchFailed("site down")
        args = create_parser().parse_args(["menu", "dinner"])

        assert cmd_menu(args) == 1
        assert "upstream_fetch_failed" in capsys.readouterr().err

    def test_missing_api_key(self, capsys):
        args = create_parser().parse_args(["menu", "dinner", "--backend", "memory"])
        with patch(
            "liondine.cli.build_orchestrator",
            side_effect=StructuringFailed("openai API key not configured"),
        ):
            assert cmd_menu(args) == 1
        assert "API key not configured" in capsys.readouterr().err


class TestFormatMenu:
    """Plain-text rendering."""

    def test_closed_hall_has_no_stations(self, lunch_record):
        text = format_menu(lunch_record, cache_hit=True)
        lines = text.splitlines()

        ferris = lines.index("Ferris [closed]")
        assert lines[ferris + 1] == "JJ's [open] 12:00 PM to 10:00 AM"
        assert "cache HIT" in lines[0]


class TestCacheCommands:
    """Cache maintenance against a real Parquet store."""

    def test_stats_empty(self, tmp_path, capsys):
        code = main(["cache", "stats", "--backend", "parquet", "--cache-dir", str(tmp_path)])

        assert code == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats["entries"] == 0
        assert stats["keys"] == []

    def test_clear_and_sweep(self, tmp_path, capsys):
        opts = ["--backend", "parquet", "--cache-dir", str(tmp_path)]

        assert main(["cache", "clear", *opts]) == 0
        assert "Cache cleared successfully" in capsys.readouterr().out

        assert main(["cache", "sweep", *opts]) == 0
        assert "Removed 0 expired entries" in capsys.readouterr().out

    def test_missing_subcommand(self):
        assert main(["cache"]) == 2


class TestMainRouting:
    """Test main() command routing."""

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert "Lion Dine Menu API v1.0.0" in capsys.readouterr().out

    def test_health(self, capsys):
        assert main(["health", "--backend", "memory"]) == 0
        health = json.loads(capsys.readouterr().out)
        assert health["status"] == "ok"
        assert health["cacheBackend"] == "memory"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: liondine" in capsys.readouterr().out
