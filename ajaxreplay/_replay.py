from __future__ import annotations

import types
import typing as tp

from ._cache import ResponseCache
from ._config import ReplayOptions
from ._proxy import RequestProxy
from ._storages import BaseStore, SQLiteStore
from ._transports import HTTPXTransport, TransportFactory

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

__all__ = ("AjaxReplay",)


class AjaxReplay:
    """
    Creates `RequestProxy` objects sharing one cache and one set of options.

    Code that used to create its request primitive from `transport_factory`
    takes `replay.request` (or the instance itself, which is callable) instead
    and keeps working unchanged.

    :param transport_factory: Creates the real transport for a request, defaults to `HTTPXTransport`
    :type transport_factory: TransportFactory
    :param store: Store holding the cached bodies, defaults to a `SQLiteStore` in `.cache/ajaxreplay`
    :type store: tp.Optional[BaseStore], optional
    :param options: Behaviour switches, defaults to `ReplayOptions()`
    :type options: tp.Optional[ReplayOptions], optional
    """

    def __init__(
        self,
        transport_factory: TransportFactory = HTTPXTransport,
        store: tp.Optional[BaseStore] = None,
        options: tp.Optional[ReplayOptions] = None,
    ) -> None:
        self._transport_factory = transport_factory
        self.options = options if options is not None else ReplayOptions()
        self.cache = ResponseCache(store if store is not None else SQLiteStore(), self.options)

    @property
    def original_transport(self) -> TransportFactory:
        """The factory of the real transport, for requests that must skip the cache entirely."""
        return self._transport_factory

    @property
    def no_cache(self) -> bool:
        return self.options.no_cache

    @no_cache.setter
    def no_cache(self, value: bool) -> None:
        self.options.no_cache = value

    @property
    def refresh(self) -> bool:
        return self.options.refresh

    @refresh.setter
    def refresh(self, value: bool) -> None:
        self.options.refresh = value

    def request(self) -> RequestProxy:
        return RequestProxy(self.cache, self._transport_factory, self.options)

    __call__ = request

    def clear_cache(self) -> None:
        self.cache.clear_all()

    def reset(self) -> None:
        """Restores the default options. Stored entries are kept."""
        self.options.reset()

    def close(self) -> None:
        self.cache.store.close()

    def __enter__(self) -> "Self":
        return self

    def __exit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        self.close()
