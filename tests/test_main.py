"""
Tests for the command line entry point and logging setup.
"""

import json
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog
from structlog.testing import capture_logs

from nftrek import main as main_module
from nftrek.core.models import MintResult, PipelineStatus, StatusUpdate
from nftrek.exceptions import LocationError, LocationErrorKind
from nftrek.utils.logging_config import (
    ColoredFormatter,
    PipelineMetricsLogger,
    StructuredFormatter,
    metrics_processors,
    setup_logging,
)
from tests.test_utils import OWNER


class TestParser:

    def test_mint_command(self):
        args = main_module.build_parser().parse_args([
            "mint", "--image", "trek.jpg", "--owner", OWNER, "--lat", "37.7749", "--lon", "-122.4194",
        ])
        assert args.command == "mint"
        assert args.image == "trek.jpg"
        assert args.lat == 37.7749
        assert args.lon == -122.4194

    def test_serve_command_defaults(self):
        args = main_module.build_parser().parse_args(["serve", "--port", "9000"])
        assert args.command == "serve"
        assert args.port == 9000

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main_module.build_parser().parse_args([])


class TestRunMint:

    def _orchestrator(self, run_effect=None):
        orchestrator = MagicMock()
        orchestrator.run = AsyncMock(return_value=MintResult(asset_id="abc123"), side_effect=run_effect)
        orchestrator.last_attempt.warnings = ["Asset not found yet"]
        return orchestrator

    @pytest.mark.asyncio
    async def test_success_prints_asset(self, tmp_path, capsys):
        image = tmp_path / "trek.jpg"
        image.write_bytes(b"jpeg bytes")
        orchestrator = self._orchestrator()

        with patch.object(main_module.MintOrchestrator, "from_config", return_value=orchestrator):
            code = await main_module.run_mint(str(image), OWNER, 37.7749, -122.4194)

        assert code == 0
        output = capsys.readouterr().out
        assert "Asset ID: abc123" in output
        assert "Warning: Asset not found yet" in output
        orchestrator.dispose.assert_called_once()
        image_arg, owner_arg = orchestrator.run.call_args.args
        assert image_arg.startswith("data:image/jpeg;base64,")
        assert owner_arg == OWNER

    @pytest.mark.asyncio
    async def test_pipeline_error_prints_user_message(self, tmp_path, capsys):
        image = tmp_path / "trek.jpg"
        image.write_bytes(b"jpeg bytes")
        orchestrator = self._orchestrator(LocationError(LocationErrorKind.TIMEOUT))

        with patch.object(main_module.MintOrchestrator, "from_config", return_value=orchestrator):
            code = await main_module.run_mint(str(image), OWNER, 1.0, 2.0)

        assert code == 1
        assert "took too long" in capsys.readouterr().out
        orchestrator.dispose.assert_called_once()

    def test_print_status(self, capsys):
        main_module.print_status(StatusUpdate(PipelineStatus.MINTING, "Minting your NFT...", "cli"))
        assert capsys.readouterr().out.strip() == "[minting] Minting your NFT..."


class TestLogging:

    def test_structured_formatter_adds_service_fields(self):
        formatter = StructuredFormatter('%(asctime)s %(name)s %(levelname)s %(message)s')
        record = logging.LogRecord("nftrek.test", logging.INFO, __file__, 1, "minted", None, None)
        record.session_id = "tab-1"

        data = json.loads(formatter.format(record))

        assert data["message"] == "minted"
        assert data["service"] == "nftrek"
        assert data["session_id"] == "tab-1"
        assert "timestamp" in data

    def test_colored_formatter_leaves_record_untouched(self):
        formatter = ColoredFormatter('%(levelname)s - %(message)s')
        record = logging.LogRecord("nftrek.test", logging.WARNING, __file__, 1, "careful", None, None)

        output = formatter.format(record)

        assert "careful" in output
        assert "\033[33m" in output
        assert record.levelname == "WARNING"

    def test_setup_logging_writes_json_file(self, tmp_path):
        log_file = tmp_path / "logs" / "nftrek.log"
        root = logging.getLogger()
        previous_handlers, previous_level = root.handlers[:], root.level
        try:
            setup_logging("DEBUG", "json", str(log_file))
            assert root.level == logging.DEBUG
            logging.getLogger("nftrek.test").info("hello")
            for handler in root.handlers:
                handler.flush()
            assert log_file.exists()
            assert json.loads(log_file.read_text().strip().splitlines()[-1])["message"] == "hello"
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = previous_handlers
            root.setLevel(previous_level)

    def test_metrics_processors_end_in_selected_renderer(self):
        json_chain = metrics_processors("json")
        text_chain = metrics_processors("text")

        assert isinstance(json_chain[-1], structlog.processors.JSONRenderer)
        assert isinstance(text_chain[-1], structlog.dev.ConsoleRenderer)
        assert json_chain[:-1] == [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ]

    def test_stage_metric_fields(self):
        with capture_logs() as logs:
            PipelineMetricsLogger().log_stage("minting", 12.345, "ok", "tab-1")

        assert logs == [{
            "event": "pipeline_stage",
            "log_level": "debug",
            "stage": "minting",
            "duration_ms": 12.3,
            "outcome": "ok",
            "session_id": "tab-1",
            "metric_type": "pipeline_performance",
        }]
