import sqlite3
from pathlib import Path

import pytest

from ajaxreplay import FileStore, InMemoryStore, RedisStore, SQLiteStore, StoreCapacityExceeded


def is_redis_down() -> bool:
    redis = pytest.importorskip("redis")

    connection = redis.Redis()
    try:
        return not connection.ping()
    except BaseException:  # pragma: no cover
        return True


def test_inmemorystore():
    store = InMemoryStore()

    store.set("ajaxreplayGET/a", "one")
    store.set("ajaxreplayGET/a", "two")
    store.set("other", "three")

    assert store.get("ajaxreplayGET/a") == "two"
    assert store.get("missing") is None
    assert "other" in store
    assert store.keys() == ["ajaxreplayGET/a", "other"]
    assert store.keys(prefix="ajaxreplay") == ["ajaxreplayGET/a"]

    store.delete("other")
    store.delete("missing")

    assert store.keys() == ["ajaxreplayGET/a"]
    assert store.size == len("ajaxreplayGET/a") + len("two")


def test_inmemorystore_quota():
    store = InMemoryStore(quota=20)

    store.set("k", "a" * 10)

    with pytest.raises(StoreCapacityExceeded):
        store.set("k2", "b" * 10)

    assert store.keys() == ["k"]
    assert store.size == 11

    store.set("k", "a" * 19)
    assert store.size == 20


def test_inmemorystore_invalid_quota():
    with pytest.raises(ValueError, match="Quota must be positive"):
        InMemoryStore(quota=0)


def test_filestore(tmp_path: Path):
    store = FileStore(base_path=tmp_path / "cache")

    store.set("ajaxreplayPOST/itemsa=1", "one")
    store.set("ajaxreplayPOST/itemsa=1", "uno")
    store.set("other", "two")

    assert (tmp_path / "cache" / ".gitignore").is_file()
    assert store.get("ajaxreplayPOST/itemsa=1") == "uno"
    assert store.get("missing") is None
    assert sorted(store.keys()) == ["ajaxreplayPOST/itemsa=1", "other"]
    assert store.keys(prefix="ajaxreplay") == ["ajaxreplayPOST/itemsa=1"]

    store.delete("ajaxreplayPOST/itemsa=1")

    assert store.get("ajaxreplayPOST/itemsa=1") is None
    assert store.keys() == ["other"]


def test_filestore_default_path(use_temp_dir):
    store = FileStore()

    store.set("ajaxreplayGET/a", "one")

    assert Path(".cache/ajaxreplay/.gitignore").is_file()
    assert FileStore().get("ajaxreplayGET/a") == "one"


def test_sqlitestore():
    store = SQLiteStore(connection=sqlite3.connect(":memory:"))

    store.set("ajaxreplayGET/a", "one")
    store.set("ajaxreplayGET/a", "two")
    store.set("other", "three")

    assert store.get("ajaxreplayGET/a") == "two"
    assert store.get("missing") is None
    assert store.keys() == ["ajaxreplayGET/a", "other"]
    assert store.keys(prefix="ajaxreplay") == ["ajaxreplayGET/a"]

    store.delete("ajaxreplayGET/a")

    assert store.keys() == ["other"]


def test_sqlitestore_quota():
    store = SQLiteStore(connection=sqlite3.connect(":memory:"), quota=20)

    store.set("k", "a" * 10)

    with pytest.raises(StoreCapacityExceeded):
        store.set("k2", "b" * 10)

    assert store.keys() == ["k"]

    store.set("k", "a" * 19)
    assert store.get("k") == "a" * 19


def test_redisstore():
    if is_redis_down():  # pragma: no cover
        pytest.skip("Redis server was not found")
    store = RedisStore()
    store.set("ajaxreplayGET/redis", "one")
    store.set("ajaxreplay-unrelated[1]", "two")

    assert store.get("ajaxreplayGET/redis") == "one"
    assert "ajaxreplayGET/redis" in store.keys(prefix="ajaxreplayGET")
    assert "ajaxreplay-unrelated[1]" not in store.keys(prefix="ajaxreplayGET")

    store.delete("ajaxreplayGET/redis")
    store.delete("ajaxreplay-unrelated[1]")

    assert store.get("ajaxreplayGET/redis") is None
