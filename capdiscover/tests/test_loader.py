import textwrap

import pytest

from capdiscover.config import DiscoveryConfig
from capdiscover.errors import ConfigError
from capdiscover.extensions import ExtensionTable
from capdiscover.loader import ENTRY_POINT_GROUP, ExtensionLoader
from capdiscover.runtime import DiscoveryRuntime
from capdiscover.versions import StaticVersionOracle

EXTENSION_SOURCE = textwrap.dedent(
    """
    from capdiscover.candidates import Candidate
    from capdiscover.extensions import Extension


    class MemoryCache(dict):
        pass


    def candidates():
        return [Candidate("acme-cache", "^1.0", MemoryCache)]


    def register(table):
        table.register(Extension("cache", "acme-cache-extension", candidates))
    """
)


@pytest.fixture
def extension_module(tmp_path, monkeypatch):
    (tmp_path / "capdiscover_acme_ext.py").write_text(EXTENSION_SOURCE, encoding="utf-8")
    (tmp_path / "capdiscover_not_an_ext.py").write_text("VALUE = 1\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    return "capdiscover_acme_ext"


def test_load_module_registers_extension(extension_module):
    table = ExtensionTable()
    loader = ExtensionLoader(table)
    loader.load_module(extension_module)
    loader.load_module(extension_module)
    assert loader.loaded == [extension_module]
    assert [e.package for e in table.get("cache")] == ["acme-cache-extension"]


def test_load_module_errors(extension_module):
    loader = ExtensionLoader(ExtensionTable())
    with pytest.raises(ConfigError):
        loader.load_module("capdiscover_missing_ext")
    with pytest.raises(ConfigError):
        loader.load_module("capdiscover_not_an_ext")


def test_config_extensions_feed_runtime(extension_module):
    config = DiscoveryConfig(extensions=[extension_module], entry_points=False, builtin=False)
    rt = DiscoveryRuntime.from_config(config, StaticVersionOracle({"acme-cache": "1.3.0"}))
    cache = rt.resolve("cache", singleton=True)
    assert type(cache).__name__ == "MemoryCache"


class FakeEntryPoint:
    def __init__(self, name, target):
        self.name = name
        self.value = f"fake:{name}"
        self._target = target

    def load(self):
        if isinstance(self._target, Exception):
            raise self._target
        return self._target


def test_entry_points_loaded_and_broken_ones_skipped(monkeypatch):
    registered = []
    points = [
        FakeEntryPoint("good", lambda table: registered.append(table)),
        FakeEntryPoint("broken", ImportError("missing dependency")),
    ]

    def fake_entry_points(group):
        assert group == ENTRY_POINT_GROUP
        return points

    monkeypatch.setattr("capdiscover.loader.metadata.entry_points", fake_entry_points)
    table = ExtensionTable()
    loader = ExtensionLoader(table)
    assert loader.load_entry_points() == ["good"]
    assert registered == [table]
    assert loader.load_entry_points() == []
