from __future__ import annotations

import json
import logging
import re
import typing as tp
from pathlib import Path
from threading import Lock

try:
    import sqlite3
except ImportError:  # pragma: no cover
    sqlite3 = None  # type: ignore

try:
    import redis
except ImportError:  # pragma: no cover
    redis = None  # type: ignore

from ._exceptions import StoreCapacityExceeded
from ._utils import ensure_cache_dict, entry_size, hash_key

logger = logging.getLogger("ajaxreplay.storages")

__all__ = (
    "BaseStore",
    "InMemoryStore",
    "FileStore",
    "SQLiteStore",
    "RedisStore",
)


class BaseStore:
    """
    A synchronous string-keyed mapping that outlives a single request.

    Stores know nothing about namespaces or requests; keys and values are opaque
    strings. A store may refuse a write with `StoreCapacityExceeded`.
    """

    def get(self, key: str) -> tp.Optional[str]:
        raise NotImplementedError()

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError()

    def delete(self, key: str) -> None:
        raise NotImplementedError()

    def keys(self, prefix: tp.Optional[str] = None) -> tp.List[str]:
        raise NotImplementedError()

    def close(self) -> None:
        return

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class InMemoryStore(BaseStore):
    """
    A simple in-memory store.

    :param quota: The maximum number of characters (keys plus values) the store may hold, defaults to None
    :type quota: tp.Optional[int], optional
    """

    def __init__(self, quota: tp.Optional[int] = None) -> None:
        if quota is not None and quota <= 0:
            raise ValueError("Quota must be positive")

        self._quota = quota
        self._data: tp.Dict[str, str] = {}
        self._size = 0
        self._lock = Lock()

    def get(self, key: str) -> tp.Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        """
        Stores the value, replacing any previous one.

        :param key: The cache key
        :type key: str
        :param value: The response body
        :type value: str
        :raises StoreCapacityExceeded: when the write would grow the store past its quota
        """

        with self._lock:
            old_value = self._data.get(key)
            released = entry_size(key, old_value) if old_value is not None else 0
            new_size = self._size - released + entry_size(key, value)

            if self._quota is not None and new_size > self._quota:
                raise StoreCapacityExceeded(
                    f"Storing {key!r} needs {new_size} characters, the quota is {self._quota}"
                )

            self._data[key] = value
            self._size = new_size

    def delete(self, key: str) -> None:
        with self._lock:
            value = self._data.pop(key, None)
            if value is not None:
                self._size -= entry_size(key, value)

    def keys(self, prefix: tp.Optional[str] = None) -> tp.List[str]:
        with self._lock:
            return [key for key in self._data if prefix is None or key.startswith(prefix)]

    @property
    def size(self) -> int:
        return self._size


class FileStore(BaseStore):
    """
    A simple file store, one JSON document per entry.

    File names are hashes of the keys, the original key is kept inside the file
    so that the store can still be enumerated.

    :param base_path: A directory where the entries should be saved, defaults to None
    :type base_path: tp.Optional[Path], optional
    """

    def __init__(self, base_path: tp.Optional[tp.Union[str, Path]] = None) -> None:
        self._base_path = ensure_cache_dict(Path(base_path) if base_path is not None else None)
        self._lock = Lock()

    def _path_for(self, key: str) -> Path:
        return self._base_path / hash_key(key)

    def _read(self, path: Path) -> tp.Optional[tp.Dict[str, str]]:
        if not path.is_file():
            return None
        with open(path, encoding="utf-8") as f:
            content = f.read()
        if not content:
            return None
        return tp.cast(tp.Dict[str, str], json.loads(content))

    def get(self, key: str) -> tp.Optional[str]:
        with self._lock:
            document = self._read(self._path_for(key))
        if document is None:
            return None
        return document["value"]

    def set(self, key: str, value: str) -> None:
        with self._lock:
            with open(self._path_for(key), "w", encoding="utf-8") as f:
                json.dump({"key": key, "value": value}, f)

    def delete(self, key: str) -> None:
        path = self._path_for(key)

        with self._lock:
            if path.exists():
                path.unlink()

    def keys(self, prefix: tp.Optional[str] = None) -> tp.List[str]:
        found = []
        with self._lock:
            for path in sorted(self._base_path.iterdir()):
                if path.name.startswith("."):
                    continue
                document = self._read(path)
                if document is None:  # pragma: no cover
                    continue
                if prefix is None or document["key"].startswith(prefix):
                    found.append(document["key"])
        return found


class SQLiteStore(BaseStore):
    """
    A simple sqlite3 store.

    :param connection: A connection for sqlite, defaults to None
    :type connection: tp.Optional[sqlite3.Connection], optional
    :param database_path: Database file name, relative to the cache directory, used when no connection is given
    :type database_path: str
    :param quota: The maximum number of characters (keys plus values) the store may hold, defaults to None
    :type quota: tp.Optional[int], optional
    """

    def __init__(
        self,
        connection: tp.Optional[sqlite3.Connection] = None,
        database_path: str = "ajaxreplay.db",
        quota: tp.Optional[int] = None,
    ) -> None:
        if sqlite3 is None:  # pragma: no cover
            raise RuntimeError(
                f"The `{type(self).__name__}` was used, but the `sqlite3` module is not available "
                "in this Python build."
            )
        if quota is not None and quota <= 0:
            raise ValueError("Quota must be positive")

        self._connection: tp.Optional[sqlite3.Connection] = connection
        self._database_path = database_path
        self._quota = quota
        self._setup_lock = Lock()
        self._setup_completed: bool = False
        self._lock = Lock()

    def _setup(self) -> sqlite3.Connection:
        with self._setup_lock:
            if not self._setup_completed:
                if self._connection is None:  # pragma: no cover
                    path = ensure_cache_dict() / self._database_path
                    self._connection = sqlite3.connect(str(path), check_same_thread=False)
                self._connection.execute("CREATE TABLE IF NOT EXISTS entries(key TEXT PRIMARY KEY, value TEXT)")
                self._connection.commit()
                self._setup_completed = True
        assert self._connection
        return self._connection

    def get(self, key: str) -> tp.Optional[str]:
        connection = self._setup()

        with self._lock:
            cursor = connection.execute("SELECT value FROM entries WHERE key = ?", [key])
            row = cursor.fetchone()
        if row is None:
            return None
        return tp.cast(str, row[0])

    def set(self, key: str, value: str) -> None:
        """
        Stores the value, replacing any previous one.

        :param key: The cache key
        :type key: str
        :param value: The response body
        :type value: str
        :raises StoreCapacityExceeded: when the write would grow the store past its quota
        """

        connection = self._setup()

        with self._lock:
            if self._quota is not None:
                cursor = connection.execute(
                    "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) FROM entries WHERE key != ?", [key]
                )
                new_size = cursor.fetchone()[0] + entry_size(key, value)
                if new_size > self._quota:
                    raise StoreCapacityExceeded(
                        f"Storing {key!r} needs {new_size} characters, the quota is {self._quota}"
                    )
            connection.execute("INSERT OR REPLACE INTO entries(key, value) VALUES(?, ?)", [key, value])
            connection.commit()

    def delete(self, key: str) -> None:
        connection = self._setup()

        with self._lock:
            connection.execute("DELETE FROM entries WHERE key = ?", [key])
            connection.commit()

    def keys(self, prefix: tp.Optional[str] = None) -> tp.List[str]:
        connection = self._setup()

        with self._lock:
            cursor = connection.execute("SELECT key FROM entries ORDER BY key")
            rows = cursor.fetchall()
        return [row[0] for row in rows if prefix is None or row[0].startswith(prefix)]

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()


class RedisStore(BaseStore):
    """
    A simple redis store.

    :param client: A client for redis, defaults to None
    :type client: tp.Optional["redis.Redis"], optional
    """

    def __init__(self, client: tp.Optional[redis.Redis] = None) -> None:  # type: ignore
        if redis is None:  # pragma: no cover
            raise RuntimeError(
                f"The `{type(self).__name__}` was used, but the required packages were not found. "
                "Check that you have `ajaxreplay` installed with the `redis` extension as shown.\n"
                "```pip install ajaxreplay[redis]```"
            )

        if client is None:
            self._client = redis.Redis()  # type: ignore
        else:  # pragma: no cover
            self._client = client

    @staticmethod
    def _decode(value: tp.Union[str, bytes]) -> str:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def get(self, key: str) -> tp.Optional[str]:
        value = self._client.get(key)
        if value is None:
            return None
        return self._decode(value)

    def set(self, key: str, value: str) -> None:
        # Redis reports its memory ceiling as an OOM error.
        try:
            self._client.set(key, value)
        except redis.exceptions.ResponseError as exc:  # type: ignore
            if str(exc).startswith("OOM"):
                raise StoreCapacityExceeded(str(exc)) from exc
            raise

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def keys(self, prefix: tp.Optional[str] = None) -> tp.List[str]:
        pattern = "*" if prefix is None else re.sub(r"([*?\[\]\\])", r"\\\1", prefix) + "*"
        return sorted(self._decode(key) for key in self._client.scan_iter(match=pattern))

    def close(self) -> None:  # pragma: no cover
        self._client.close()
