import pytest

from clusterlens.config import Config


def test_set_and_get_round_trip():
    config = Config()
    config.set("active_filters", ["Pod", "Service"])
    assert config.get("active_filters") == ["Pod", "Service"]


def test_keys_are_case_insensitive():
    config = Config()
    config.set("Cache", {"region": "eu"})
    assert config.get("cache") == {"region": "eu"}
    assert config.get("CACHE") == {"region": "eu"}


def test_get_returns_default_when_missing():
    config = Config()
    assert config.get("missing", 42) == 42
    assert config.get("missing") is None


def test_get_returns_a_copy():
    config = Config()
    config.set("cache", {"region": "eu"})
    value = config.get("cache")
    value["region"] = "us"
    assert config.get("cache") == {"region": "eu"}


def test_get_string_list_variants():
    config = Config(data={"items": ["a", "b"], "words": "a b  c", "number": 3})
    assert config.get_string_list("items") == ["a", "b"]
    assert config.get_string_list("words") == ["a", "b", "c"]
    assert config.get_string_list("number") == ["3"]
    assert config.get_string_list("nothing") == []


def test_write_and_reload(tmp_path):
    path = tmp_path / "sub" / "config.yaml"
    config = Config(path)
    config.set("active_filters", ["Pod"])
    config.set("cache", {"bucketname": "b", "region": "r"})
    config.write()
    reloaded = Config(path)
    assert reloaded.get_string_list("active_filters") == ["Pod"]
    assert reloaded.get("cache") == {"bucketname": "b", "region": "r"}


def test_write_without_path_raises():
    with pytest.raises(ValueError):
        Config().write()


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        Config(path)


def test_empty_file_loads_as_empty(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert Config(path).get("anything", "fallback") == "fallback"