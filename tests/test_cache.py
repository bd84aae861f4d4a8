import pytest

from clusterlens.cache import (
    CacheError,
    CacheProvider,
    CacheType,
    FileBasedCache,
    add_remote_cache,
    new_cache,
    remote_cache_enabled,
    remove_remote_cache,
)
from clusterlens.config import Config


def test_store_and_load_round_trip(tmp_path):
    cache = FileBasedCache(directory=tmp_path)
    cache.store("key1", "some answer")
    assert cache.load("key1") == "some answer"


def test_exists_before_and_after_store(tmp_path):
    cache = FileBasedCache(directory=tmp_path / "cache")
    assert cache.exists("key1") is False
    cache.store("key1", "data")
    assert cache.exists("key1") is True


def test_list_is_sorted(tmp_path):
    cache = FileBasedCache(directory=tmp_path)
    for key in ("b", "a", "c"):
        cache.store(key, key)
    assert cache.list() == ["a", "b", "c"]


def test_load_missing_key_raises(tmp_path):
    cache = FileBasedCache(directory=tmp_path)
    with pytest.raises(FileNotFoundError):
        cache.load("missing")


def test_is_cache_disabled(tmp_path):
    assert FileBasedCache(no_cache=True, directory=tmp_path).is_cache_disabled() is True
    assert FileBasedCache(directory=tmp_path).is_cache_disabled() is False


def test_new_cache_file_and_unknown_types(tmp_path):
    cache = new_cache(True, CacheType.FILE, tmp_path)
    assert cache.is_cache_disabled() is True
    assert cache.directory == tmp_path
    fallback = new_cache(False, "unknown", tmp_path)
    assert fallback.is_cache_disabled() is False


@pytest.mark.parametrize("kind", [CacheType.AZURE, CacheType.S3, "s3"])
def test_new_cache_remote_types_raise(kind, tmp_path):
    with pytest.raises(CacheError):
        new_cache(False, kind, tmp_path)


def test_remote_cache_enabled_variants():
    assert remote_cache_enabled(Config()) is CacheType.FILE
    s3 = Config(data={"cache": {"bucketname": "b", "region": "r"}})
    assert remote_cache_enabled(s3) is CacheType.S3
    azure = Config(data={"cache": {"storageaccount": "acct", "container": "c"}})
    assert remote_cache_enabled(azure) is CacheType.AZURE
    partial = Config(data={"cache": {"bucketname": "b"}})
    assert remote_cache_enabled(partial) is CacheType.FILE


def test_remote_cache_enabled_rejects_bad_settings():
    with pytest.raises(CacheError):
        remote_cache_enabled(Config(data={"cache": "nonsense"}))


def test_provider_round_trip():
    provider = CacheProvider("b", "r", "acct", "c")
    assert CacheProvider.from_mapping(provider.to_dict()) == provider
    assert CacheProvider().to_dict() == {}


def test_add_remote_cache_writes_config(tmp_path):
    path = tmp_path / "config.yaml"
    config = Config(path)
    add_remote_cache(config, CacheProvider(bucket_name="b", region="r"))
    reloaded = Config(path)
    assert remote_cache_enabled(reloaded) is CacheType.S3
    assert CacheProvider.from_mapping(reloaded.get("cache")) == CacheProvider(
        bucket_name="b", region="r"
    )


def test_remove_remote_cache_without_one_raises(tmp_path):
    with pytest.raises(CacheError, match="no remote cache configured"):
        remove_remote_cache(Config(tmp_path / "config.yaml"))


def test_remove_remote_cache_clears_settings(tmp_path):
    path = tmp_path / "config.yaml"
    config = Config(path)
    add_remote_cache(config, CacheProvider(storage_account="acct", container_name="c"))
    remove_remote_cache(config)
    reloaded = Config(path)
    assert reloaded.get("cache") == {}
    assert remote_cache_enabled(reloaded) is CacheType.FILE


def test_remove_remote_cache_write_failure_raises():
    config = Config(data={"cache": {"bucketname": "b", "region": "r"}})
    with pytest.raises(CacheError, match="unable to write config"):
        remove_remote_cache(config)