"""
Tests for run configuration resolution (CLI > environment > default).
"""

from pathlib import Path

import pytest

from common.env_loader import load_dotenv_file
from common.processor_config import resolve_config


class TestResolveConfig:
    def test_defaults(self):
        config = resolve_config()

        assert config.manifest_path == Path("./json/memories_history.json")
        assert config.prefix == "memories"
        assert config.overlay_mode == "ignore"
        assert config.workers == 1
        assert config.extract_archives is False
        assert config.tool_timeout is None

    def test_environment_overrides_default(self, monkeypatch):
        monkeypatch.setenv("SNAPBACK_WORKERS", "3")
        monkeypatch.setenv("SNAPBACK_OVERLAY_MODE", "Copy")
        monkeypatch.setenv("SNAPBACK_EXTRACT", "yes")
        monkeypatch.setenv("SNAPBACK_TOOL_TIMEOUT", "30")

        config = resolve_config()

        assert config.workers == 3
        assert config.overlay_mode == "copy"
        assert config.extract_archives is True
        assert config.tool_timeout == 30.0

    def test_cli_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("SNAPBACK_WORKERS", "3")
        monkeypatch.setenv("SNAPBACK_OUTPUT", "/env/out")

        config = resolve_config(workers=5, output_dir="cli_out")

        assert config.workers == 5
        assert config.output_dir == Path("cli_out")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"overlay_mode": "blend"},
            {"workers": 0},
            {"workers": "many"},
            {"tool_timeout": -1},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            resolve_config(**kwargs)


class TestDotenv:
    def test_dotenv_does_not_override_environment(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("SNAPBACK_PREFIX=fromfile\nSNAPBACK_WORKERS=7\n")
        monkeypatch.setenv("SNAPBACK_WORKERS", "2")

        assert load_dotenv_file(str(env_file))
        config = resolve_config()

        assert config.prefix == "fromfile"
        assert config.workers == 2

    def test_missing_dotenv(self, tmp_path):
        assert load_dotenv_file(str(tmp_path / "absent.env")) is False
