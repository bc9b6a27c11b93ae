from __future__ import annotations

import logging
import typing as tp

from ._config import ReplayOptions
from ._models import NAMESPACE
from ._storages import BaseStore

logger = logging.getLogger("ajaxreplay.cache")

__all__ = ("ResponseCache",)


class ResponseCache:
    """
    Response bodies stored under ajaxreplay keys.

    The cache shares the underlying store with anything else that uses it, so it
    only ever enumerates or removes keys carrying the namespace tag.

    Args:
        store: The durable key-value store holding the bodies.
        options: Options holding the ``no_cache`` switch, shared with the proxies.
    """

    def __init__(self, store: BaseStore, options: tp.Optional[ReplayOptions] = None) -> None:
        self.store = store
        self.options = options if options is not None else ReplayOptions()

    @property
    def enabled(self) -> bool:
        return not self.options.no_cache

    def enable(self) -> None:
        self.options.no_cache = False

    def disable(self) -> None:
        # Only a bypass, existing entries survive.
        self.options.no_cache = True

    def get(self, key: str) -> tp.Optional[str]:
        return self.store.get(key)

    def set(self, key: str, value: str) -> None:
        logger.debug(f"Storing {len(value)} characters under {key!r}")
        self.store.set(key, value)

    def keys(self) -> tp.List[str]:
        return self.store.keys(prefix=NAMESPACE)

    def clear_all(self) -> None:
        keys = self.keys()
        for key in keys:
            self.store.delete(key)
        logger.debug(f"Cleared {len(keys)} cached responses")
