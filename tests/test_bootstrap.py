"""
Tests for the runtime context and application bootstrap.
"""

from pathlib import Path

import pytest

from dockyard.application.bootstrap import create_context, load_app, plugin_directory
from dockyard.application.context import AppContext
from dockyard.core.domain.errors import ConfigError
from dockyard.infrastructure.config.models import ApplicationConfig, PluginConfig
from dockyard.infrastructure.engine.compose import ComposeEngine
from dockyard.infrastructure.reporting import LogMessenger, LogMetricsReporter
from dockyard.plugins.registry import PluginRegistry


class TestAppContext:

    def test_default_collaborators(self) -> None:
        context = AppContext()

        assert isinstance(context.engine, ComposeEngine)
        assert isinstance(context.metrics, LogMetricsReporter)
        assert isinstance(context.messenger, LogMessenger)
        assert len(context.plugins) == 0

    def test_on_global(self) -> None:
        context = AppContext()

        context.on_global("pre-start", lambda app: None, weight=1)

        assert context.events.count("pre-start") == 1
        assert context.events.handlers_for("pre-start")[0].weight == 1


class TestCreateContext:

    def test_plugin_directory_relative_to_conf_root(self, tmp_path: Path) -> None:
        config = ApplicationConfig(user_conf_root=str(tmp_path))
        assert plugin_directory(config) == tmp_path / "plugins"

    def test_plugin_directory_absolute(self, tmp_path: Path) -> None:
        config = ApplicationConfig(plugins=PluginConfig(plugin_directory=str(tmp_path / "mine")))
        assert plugin_directory(config) == tmp_path / "mine"

    def test_discovers_plugins(self, tmp_path: Path) -> None:
        plugin_dir = tmp_path / "plugins"
        plugin_dir.mkdir()
        (plugin_dir / "php.py").write_text(
            "def app_loader(config, app, context):\n"
            "    return {'env': {'PHP': config.get('version')}}\n",
            encoding="utf-8",
        )
        config = ApplicationConfig(
            user_conf_root=str(tmp_path),
            plugins=PluginConfig(settings={"php": {"version": "8.2"}}),
        )

        context = create_context(config)

        assert context.plugins.names == ["php"]
        assert context.plugins.get("php").config == {"version": "8.2"}
        assert context.config is config

    def test_discovery_disabled(self, tmp_path: Path) -> None:
        (tmp_path / "plugins").mkdir()
        (tmp_path / "plugins" / "php.py").write_text("def app_loader(c, a, x):\n    return None\n")
        registry = PluginRegistry()
        config = ApplicationConfig(user_conf_root=str(tmp_path), plugins=PluginConfig(enabled=False))

        context = create_context(config, registry=registry)

        assert context.plugins is registry
        assert len(registry) == 0


class TestLoadApp:

    @pytest.fixture
    def context(self, tmp_path: Path) -> AppContext:
        config = ApplicationConfig(user_conf_root=str(tmp_path / "conf"),
                                   plugins=PluginConfig(enabled=False))
        return create_context(config)

    def test_load_from_subdirectory(self, context: AppContext, tmp_path: Path) -> None:
        project = tmp_path / "site"
        (project / "web" / "themes").mkdir(parents=True)
        (project / ".dockyard.yml").write_text(
            "name: My Site\nservices:\n  web:\n    image: nginx\n", encoding="utf-8")

        app = load_app(context, project / "web" / "themes")

        assert app.name == "my-site"
        assert app.config_file == str((project / ".dockyard.yml").resolve())
        assert app.config["services"] == {"web": {"image": "nginx"}}
        assert app.context is context

    def test_missing_project_file(self, context: AppContext, tmp_path: Path) -> None:
        context.config.project_file = ".dockyard-absent-for-tests.yml"

        with pytest.raises(ConfigError):
            load_app(context, tmp_path)
