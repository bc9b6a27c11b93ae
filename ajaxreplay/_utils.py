from __future__ import annotations

import hashlib
from pathlib import Path

DEFAULT_CACHE_DIR = Path(".cache/ajaxreplay")


def ensure_cache_dict(base_path: Path | None = None) -> Path:
    _base_path = base_path if base_path is not None else DEFAULT_CACHE_DIR
    _gitignore_file = _base_path / ".gitignore"

    _base_path.mkdir(parents=True, exist_ok=True)

    if not _gitignore_file.is_file():
        with open(_gitignore_file, "w", encoding="utf-8") as f:
            f.write("# Automatically created by ajaxreplay\n*")
    return _base_path


def hash_key(key: str) -> str:
    """
    Map an arbitrary cache key to a name that is safe to use as a file name.

    Example:
    ```python
        >>> len(hash_key("ajaxreplayGET/users"))
        64
    ```
    """
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def entry_size(key: str, value: str) -> int:
    return len(key) + len(value)
