"""
Tests for the main entry point and CLI commands.
"""

import json
import os
from pathlib import Path
from typing import Any, List
from unittest.mock import Mock, patch

import pytest
import yaml
from typer.testing import CliRunner

from dockyard.application.bootstrap import create_context
from dockyard.infrastructure.config.loader import ConfigLoader
from dockyard.main import cli


class TestMainCLI:
    """Test cases for the typer CLI."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
              engine, timeline: List[str]) -> None:
        for key in list(os.environ):
            if key.startswith("DOCKYARD_"):
                monkeypatch.delenv(key)

        self.runner = CliRunner()
        self.timeline = timeline
        self.engine = engine

        self.project = tmp_path / "site"
        self.project.mkdir()
        (self.project / ".dockyard.yml").write_text(
            "name: My Site\nservices:\n  web:\n    image: nginx\n", encoding="utf-8")

        self.config_file = tmp_path / "config.yaml"
        self.config_file.write_text(yaml.safe_dump({
            "user_conf_root": str(tmp_path / "conf"),
            "plugins": {"enabled": False},
        }), encoding="utf-8")

    def invoke(self, *args: str, **kwargs: Any):
        def with_engine(config, messenger=None):
            return create_context(config, engine=self.engine, messenger=messenger)

        with patch('dockyard.main.setup_logging') as mock_setup_logging, \
                patch('dockyard.main.create_context', side_effect=with_engine):
            result = self.runner.invoke(cli, [*args, "--config", str(self.config_file),
                                              "--dir", str(self.project)], **kwargs)
        self.mock_setup_logging: Mock = mock_setup_logging
        return result

    def test_cli_help_command(self) -> None:
        result = self.runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Docker Compose" in result.output

    def test_start(self) -> None:
        result = self.invoke("start")

        assert result.exit_code == 0, result.output
        assert self.engine.calls == [("start", "my-site", {})]
        assert "Starting app my-site" in result.output
        assert "App my-site started" in result.output
        self.mock_setup_logging.assert_called_once()

    def test_debug_flag(self) -> None:
        result = self.invoke("stop", "--debug")

        assert result.exit_code == 0, result.output
        logging_config = self.mock_setup_logging.call_args.args[0]
        assert logging_config.level == "DEBUG"

    def test_restart(self) -> None:
        result = self.invoke("restart")

        assert result.exit_code == 0, result.output
        assert self.timeline == ["engine:stop", "engine:start"]

    def test_rebuild(self) -> None:
        result = self.invoke("rebuild")

        assert result.exit_code == 0, result.output
        assert self.timeline == ["engine:stop", "engine:destroy", "engine:build", "engine:start"]

    def test_destroy_with_confirmation_flag(self) -> None:
        result = self.invoke("destroy", "--yes")

        assert result.exit_code == 0, result.output
        assert self.engine.calls[-1] == ("destroy", "my-site", {"purge": True})

    def test_destroy_aborted(self) -> None:
        result = self.invoke("destroy", input="n\n")

        assert result.exit_code == 0
        assert "Destroy aborted" in result.output
        assert self.engine.calls == []

    def test_info(self) -> None:
        result = self.invoke("info")

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output[result.output.index("["):])
        assert payload[0]["service"] == "web"
        assert self.engine.calls == []

    def test_engine_failure_exits_with_error(self) -> None:
        self.engine.failures["start"] = RuntimeError("daemon not running")

        result = self.invoke("start")

        assert result.exit_code == 1
        assert "daemon not running" in result.output

    def test_missing_project(self, tmp_path: Path) -> None:
        (self.project / ".dockyard.yml").unlink()
        self.config_file.write_text(yaml.safe_dump({
            "user_conf_root": str(tmp_path / "conf"),
            "project_file": ".dockyard-absent-for-tests.yml",
            "plugins": {"enabled": False},
        }), encoding="utf-8")

        result = self.invoke("start")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_init_config(self, tmp_path: Path) -> None:
        output = tmp_path / "generated.yaml"

        result = self.runner.invoke(cli, ["init-config", "--output", str(output)])

        assert result.exit_code == 0
        assert output.exists()
        assert ConfigLoader().load_config(str(output)).compose_version == "3.6"

    def test_init_config_bad_format(self, tmp_path: Path) -> None:
        result = self.runner.invoke(cli, ["init-config", "--output", str(tmp_path / "x.ini"),
                                          "--format", "ini"])

        assert result.exit_code == 1
