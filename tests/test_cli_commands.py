"""
Unit Tests for CLI Commands

Tests the CLI entry points against the bundled sample collections and
temporary vector files.

STAFF ENGINEER PATTERNS:
------------------------
1. Dispatch tested with patched handlers
2. Real commands run end to end on small inputs
3. Verify exit codes
"""

import json
from unittest.mock import patch

import numpy as np
import pytest

from audit_rag.cli import commands
from audit_rag.config import reset_config


@pytest.fixture(autouse=True)
def clean_env():
    """Use bundled samples and default logging for every test."""
    with patch.dict("os.environ", {}, clear=True):
        reset_config()
        yield
    reset_config()


@pytest.fixture
def float_file(tmp_path):
    rng = np.random.default_rng(3)
    path = tmp_path / "vectors.json"
    path.write_text(
        json.dumps({"vectors": [{"id": str(i), "vector": rng.uniform(-1, 1, 64).tolist()} for i in range(4)]}),
        encoding="utf-8",
    )
    return path


class TestLoadEnv:
    def test_load_env_does_not_raise(self):
        commands._load_env()


class TestMainCliDispatch:
    """main() dispatches to the right handler."""

    @pytest.mark.parametrize(
        "command, handler",
        [
            ("search", "run_search_cli"),
            ("quantize", "run_quantize_cli"),
            ("verify", "run_verify_cli"),
        ],
    )
    def test_dispatch(self, command, handler):
        with patch.object(commands, handler, return_value=0) as mock_handler:
            result = commands.main([command, "a", "--flag"])

        mock_handler.assert_called_once_with(["a", "--flag"])
        assert result == 0

    def test_keyboard_interrupt_returns_130(self):
        with patch.object(commands, "run_search_cli", side_effect=KeyboardInterrupt):
            assert commands.main(["search", "q"]) == 130

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit):
            commands.main(["index"])


class TestSearchCli:
    def test_prints_context(self, capsys):
        result = commands.run_search_cli(["KSA 200 관련 질문입니다"])

        out = capsys.readouterr().out
        assert result == 0
        assert "관련 회계감사기준서" in out
        assert "KSA 200" in out

    def test_json_output(self, capsys):
        result = commands.run_search_cli(["영업권 손상평가", "-k", "할인율", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert result == 0
        assert "할인율" in data["keywords"]
        assert data["procedures"]

    def test_no_results(self, capsys):
        commands.run_search_cli(["zzzz"])

        assert "No matching documents." in capsys.readouterr().out

    def test_unreachable_data_dir_fails(self, tmp_path, capsys):
        result = commands.run_search_cli(["감사", "--data-dir", str(tmp_path / "missing")])

        assert result == 1
        assert "RAG initialization failed" in capsys.readouterr().err


class TestVectorFileCli:
    def test_quantize_then_verify(self, float_file, tmp_path, capsys):
        out = tmp_path / "vectors.int8.json"

        assert commands.run_quantize_cli([str(float_file), str(out)]) == 0
        assert commands.run_verify_cli([str(float_file), str(out)]) == 0
        assert "ACCURACY GATE: PASSED" in capsys.readouterr().out

    def test_quantize_missing_input(self, tmp_path, capsys):
        result = commands.run_quantize_cli([str(tmp_path / "none.json"), str(tmp_path / "out.json")])

        assert result == 1
        assert "Error" in capsys.readouterr().err

    def test_verify_unknown_scheme_fails_cleanly(self, float_file, tmp_path, capsys):
        quantized = tmp_path / "pq.json"
        quantized.write_text(
            json.dumps(
                {
                    "metadata": {"quantization": "int8", "quantization_scheme": "pq"},
                    "vectors": [{"id": str(i), "vector": [0] * 64} for i in range(4)],
                }
            ),
            encoding="utf-8",
        )

        result = commands.main(["verify", str(float_file), str(quantized)])

        assert result == 1
        assert "Unsupported quantization scheme" in capsys.readouterr().err


class TestSearchCliCleanup:
    def test_service_closed_after_search(self, capsys):
        with patch("audit_rag.service.RagService.close") as close:
            assert commands.run_search_cli(["KSA 200"]) == 0

        close.assert_called_once()

    def test_service_closed_after_failure(self, tmp_path, capsys):
        with patch("audit_rag.service.RagService.close") as close:
            assert commands.run_search_cli(["감사", "--data-dir", str(tmp_path / "missing")]) == 1

        close.assert_called_once()
