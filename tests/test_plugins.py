"""
Tests for the plugin registry, discovery and loader.
"""

import textwrap
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from dockyard.core.domain.errors import ConfigError, PluginLoadError
from dockyard.core.domain.fragments import Extension, Fragment
from dockyard.plugins.base import BasePlugin
from dockyard.plugins.loader import PluginLoader
from dockyard.plugins.registry import PluginDescriptor, PluginRegistry


class FakeApp:
    """Just enough of an orchestrator for the loader."""

    def __init__(self) -> None:
        self.name = "my-site"
        self.config: Dict[str, Any] = {"name": "My Site"}
        self.env: Dict[str, Any] = {"DOCKYARD": "ON"}
        self.labels: Dict[str, Any] = {}
        self.fragments: List[Fragment] = []

    def add(self, fragment: Fragment, front: bool = False) -> None:
        self.fragments.append(fragment)


class CachePlugin(BasePlugin):
    name = "cache"
    default_config = {"image": "redis:7"}

    async def load_app(self, config: Dict[str, Any], app: Any, context: Any) -> Optional[Extension]:
        return Extension(
            fragments=[self.fragment({"services": {"cache": {"image": config["image"]}}})],
            env={"CACHE_HOST": "cache"},
        )


def write_plugin(directory: Path, filename: str, source: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / filename).write_text(textwrap.dedent(source), encoding="utf-8")


class TestPluginRegistry:

    def test_register_preserves_order(self) -> None:
        registry = PluginRegistry()
        registry.register_loader("b", lambda c, a, x: None)
        registry.register_loader("a", lambda c, a, x: None)
        registry.register(PluginDescriptor(name="tooling"))

        assert registry.names == ["b", "a", "tooling"]
        assert len(registry) == 3
        assert [d.name for d in registry.app_plugins()] == ["b", "a"]
        assert registry.get("tooling").is_app_plugin is False
        assert registry.get("unknown") is None

    def test_duplicate_names_rejected(self) -> None:
        registry = PluginRegistry([PluginDescriptor(name="php")])

        with pytest.raises(ConfigError):
            registry.register(PluginDescriptor(name="php"))

    def test_discover_missing_directory(self, tmp_path: Path) -> None:
        registry = PluginRegistry()
        assert registry.discover(str(tmp_path / "nothing")) == []

    def test_discover(self, tmp_path: Path) -> None:
        plugin_dir = tmp_path / "plugins"
        write_plugin(plugin_dir, "a_php.py", """
            def app_loader(config, app, context):
                return {"env": {"PHP_VERSION": config.get("version", "8.2")}}
        """)
        write_plugin(plugin_dir, "b_proxy.py", """
            from dockyard.plugins import PluginDescriptor

            def _load(config, app, context):
                return {"labels": {"proxy": "on"}}

            PLUGIN = PluginDescriptor(name="proxy", app_loader=_load, config={"port": 80})
        """)
        write_plugin(plugin_dir, "c_cache.py", """
            from dockyard.plugins import BasePlugin

            class Cache(BasePlugin):
                name = "cache"

                async def load_app(self, config, app, context):
                    return None
        """)
        write_plugin(plugin_dir, "_helpers.py", "raise RuntimeError('never imported')\n")
        write_plugin(plugin_dir, "d_empty.py", "VALUE = 1\n")

        registry = PluginRegistry()
        names = registry.discover(str(plugin_dir), {"a_php": {"version": "7.4"}, "proxy": {"port": 8080}})

        assert names == ["a_php", "proxy", "cache"]
        assert registry.get("a_php").config == {"version": "7.4"}
        assert registry.get("proxy").config == {"port": 8080}
        assert registry.get("cache").source == str(plugin_dir / "c_cache.py")

    def test_discover_import_error(self, tmp_path: Path) -> None:
        write_plugin(tmp_path, "broken.py", "import not_a_real_module_anywhere\n")

        with pytest.raises(ConfigError, match="broken.py"):
            PluginRegistry().discover(str(tmp_path))

    def test_discover_bad_descriptor(self, tmp_path: Path) -> None:
        write_plugin(tmp_path, "wrong.py", "PLUGIN = {'name': 'wrong'}\n")

        with pytest.raises(ConfigError):
            PluginRegistry().discover(str(tmp_path))


class TestPluginLoader:

    @pytest.mark.asyncio
    async def test_loads_in_registry_order(self) -> None:
        order: List[str] = []
        registry = PluginRegistry()

        def first(config, app, context):
            order.append("first")
            return {"env": {"SHARED": "first"}}

        async def second(config, app, context):
            order.append("second")
            return {"env": {"SHARED": "second"}, "config": {"via": "second"}}

        registry.register_loader("first", first)
        registry.register_loader("second", second)
        registry.register(PluginDescriptor(name="global-only"))
        app = FakeApp()

        applied = await PluginLoader(registry).load(app)

        assert applied == ["first", "second"]
        assert order == ["first", "second"]
        assert app.env == {"DOCKYARD": "ON", "SHARED": "second"}
        assert app.config == {"name": "My Site", "via": "second"}

    @pytest.mark.asyncio
    async def test_loader_arguments(self) -> None:
        received: Dict[str, Any] = {}
        context = object()

        def loader(config, app, ctx):
            received.update(config=config, app=app, context=ctx)
            config["mutated"] = True

        registry = PluginRegistry()
        descriptor = registry.register_loader("spy", loader, {"key": "value"})
        app = FakeApp()

        await PluginLoader(registry, context).load(app)

        assert received["app"] is app
        assert received["context"] is context
        assert received["config"]["key"] == "value"
        assert descriptor.config == {"key": "value"}

    @pytest.mark.asyncio
    async def test_failure_keeps_earlier_plugins(self) -> None:
        registry = PluginRegistry()
        registry.register_loader("ok", lambda c, a, x: {"labels": {"ok": "yes"}})

        async def broken(config, app, context):
            raise OSError("disk full")

        registry.register_loader("broken", broken)
        app = FakeApp()

        with pytest.raises(PluginLoadError) as exc_info:
            await PluginLoader(registry).load(app)

        assert exc_info.value.plugin == "broken"
        assert isinstance(exc_info.value.__cause__, OSError)
        assert app.labels == {"ok": "yes"}

    @pytest.mark.asyncio
    async def test_malformed_result(self) -> None:
        registry = PluginRegistry()
        registry.register_loader("odd", lambda c, a, x: "not a mapping")

        with pytest.raises(ConfigError):
            await PluginLoader(registry).load(FakeApp())

    @pytest.mark.asyncio
    async def test_fragments_are_added(self) -> None:
        registry = PluginRegistry()
        registry.register(CachePlugin({"image": "redis:6"}).as_descriptor())
        app = FakeApp()

        await PluginLoader(registry).load(app)

        assert [fragment.name for fragment in app.fragments] == ["cache"]
        assert app.fragments[0].documents == [{"services": {"cache": {"image": "redis:6"}}}]
        assert app.env["CACHE_HOST"] == "cache"


class TestBasePlugin:

    def test_defaults(self) -> None:
        plugin = CachePlugin()

        assert plugin.config == {"image": "redis:7"}
        assert plugin.fragment({}, "extra").name == "cache-extra"

    def test_name_defaults_to_class_name(self) -> None:
        class Mailhog(BasePlugin):
            async def load_app(self, config, app, context):
                return None

        assert Mailhog().name == "mailhog"
        assert Mailhog().as_descriptor().is_app_plugin is True
