"""Tests for the persisted configuration store."""
import json

import pytest

from weather_cli.store import ConfigStore, StoreError


def test_missing_file_gives_empty_store(tmp_path):
    store = ConfigStore.load(tmp_path / "config.json")
    assert store.is_empty()
    assert store.active is None
    assert store.sections() == {}
    assert store.modified is False


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "dir" / "config.json"
    store = ConfigStore.load(path)
    store.set_section("openweather", {"apikey": "XYZ"})
    store.active = "openweather"
    assert store.modified

    store.save()

    assert store.modified is False
    assert json.loads(path.read_text()) == {
        "current": "openweather",
        "providers": {"openweather": {"apikey": "XYZ"}},
    }
    loaded = ConfigStore.load(path)
    assert loaded.active == "openweather"
    assert loaded.section("openweather") == {"apikey": "XYZ"}


def test_save_leaves_no_temp_files(tmp_path):
    path = tmp_path / "config.json"
    store = ConfigStore(path)
    store.set_section("a", {"k": "v"})
    store.save()
    store.set_section("b", {"k": "v"})
    store.save()

    assert [p.name for p in tmp_path.iterdir()] == ["config.json"]


def test_section_returns_copy(tmp_path):
    store = ConfigStore(tmp_path / "c.json", {"a": {"k": "v"}})
    store.section("a")["k"] = "changed"
    assert store.section("a") == {"k": "v"}
    assert store.section("missing") is None


def test_remove_absent_section_is_noop(tmp_path):
    store = ConfigStore(tmp_path / "c.json", {"a": {"k": "v"}})

    assert store.remove_section("a") is True
    assert store.remove_section("a") is False
    assert store.remove_section("never") is False
    assert not store.has_section("a")


def test_setting_same_active_does_not_modify(tmp_path):
    store = ConfigStore(tmp_path / "c.json", active="a")
    store.active = "a"
    assert store.modified is False


def test_keys_are_case_sensitive(tmp_path):
    path = tmp_path / "config.json"
    store = ConfigStore(path)
    store.set_section("p", {"ApiKey": "1", "apikey": "2"})
    store.save()

    assert ConfigStore.load(path).section("p") == {"ApiKey": "1", "apikey": "2"}


def test_directory_path_is_rejected(tmp_path):
    with pytest.raises(StoreError, match="points not to file"):
        ConfigStore.load(tmp_path)


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    with pytest.raises(StoreError, match="When parsing config file"):
        ConfigStore.load(path)


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"current": 1},
        {"providers": []},
        {"providers": {"p": {"apikey": 5}}},
        {"providers": {"p": "flat"}},
    ],
)
def test_invalid_shape(tmp_path, document):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(document))

    with pytest.raises(StoreError, match="Invalid config file"):
        ConfigStore.load(path)
