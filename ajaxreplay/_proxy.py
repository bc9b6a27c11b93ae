from __future__ import annotations

import logging
import typing as tp

from ._cache import ResponseCache
from ._config import ReplayOptions
from ._exceptions import ProxyStateError
from ._keygen import Body, generate_key
from ._models import SUCCESS_STATUS, DispatchState, Header, ReadyState, RequestIdentity
from ._transports import BaseTransport, TransportFactory

logger = logging.getLogger("ajaxreplay.proxy")

__all__ = ("RequestProxy",)


class RequestProxy:
    """
    A stand-in for a request primitive that answers from a `ResponseCache`.

    The proxy has the same surface as the transports it replaces: `setup`,
    `add_header`, `dispatch`, the `on_ready_state_change` slot and the
    `ready_state`, `status` and `response_text` attributes. Unlike a transport it
    calls `on_ready_state_change` once per dispatch, when the request is done.

    A dispatch goes through these steps:

    1. If caching is enabled and the cache holds the request key, the proxy
       becomes ``DONE`` with status 200 and the stored body, and notifies the
       caller right away.
    2. Unless step 1 answered and refresh is off, a new transport from
       `transport_factory` sends the request. Its progress is mirrored into the
       proxy; when it is done the caller is notified, unless step 1 already did
       so, and a 200 response body is written to the cache.

    Args:
        cache: Cache the responses are read from and written to.
        transport_factory: Callable creating the real transport for a request.
        options: Options shared with the cache and the other proxies.
    """

    def __init__(
        self,
        cache: ResponseCache,
        transport_factory: TransportFactory,
        options: tp.Optional[ReplayOptions] = None,
    ) -> None:
        self.cache = cache
        self.transport_factory = transport_factory
        self.options = options if options is not None else cache.options

        self.on_ready_state_change: tp.Optional[tp.Callable[["RequestProxy"], None]] = None
        self.identity: tp.Optional[RequestIdentity] = None
        self.headers: tp.List[Header] = []
        self.cache_key: tp.Optional[str] = None
        self.transport: tp.Optional[BaseTransport] = None
        self._reset_state(ReadyState.UNSENT)

    def _reset_state(self, ready_state: ReadyState) -> None:
        self.ready_state = ready_state
        self.status = 0
        self.response_text = ""
        self.error: tp.Optional[BaseException] = None
        self.from_cache = False
        self.dispatch_state = DispatchState.NOT_STARTED

    def setup(
        self,
        method: str,
        url: str,
        is_async: bool = True,
        user: tp.Optional[str] = None,
        password: tp.Optional[str] = None,
    ) -> None:
        self.identity = RequestIdentity(method, url, is_async, user, password)
        self.headers = []
        self.cache_key = generate_key(self.identity)
        self.transport = None
        self._reset_state(ReadyState.OPENED)

    def add_header(self, name: str, value: str) -> None:
        if self.identity is None:
            raise ProxyStateError("`setup` must be called before `add_header`")
        self.headers.append(Header(name, value))

    def dispatch(self, body: Body = None) -> None:
        if self.identity is None:
            raise ProxyStateError("`setup` must be called before `dispatch`")
        if self.dispatch_state is not DispatchState.NOT_STARTED:
            raise ProxyStateError("The request was already dispatched, call `setup` to send another one")

        if body:
            self.cache_key = generate_key(self.identity, body)

        if self._serve_from_cache():
            if not self.options.refresh:
                self.dispatch_state = DispatchState.DONE
                return
            logger.debug(f"Refreshing {self.cache_key!r} in the background")
        else:
            self.dispatch_state = DispatchState.NETWORK_PENDING

        self._send(body)

    def _serve_from_cache(self) -> bool:
        assert self.cache_key is not None

        if not self.cache.enabled:
            return False

        stored = self.cache.get(self.cache_key)
        if stored is None:
            logger.debug(f"Cache miss for {self.cache_key!r}")
            return False

        logger.debug(f"Cache hit for {self.cache_key!r}")
        self.ready_state = ReadyState.DONE
        self.status = SUCCESS_STATUS
        self.response_text = stored
        self.error = None
        self.from_cache = True
        self.dispatch_state = DispatchState.CACHE_SERVED
        self._notify()
        return True

    def _send(self, body: Body) -> None:
        assert self.identity is not None

        transport = self.transport_factory()
        transport.setup(
            self.identity.method,
            self.identity.url,
            self.identity.is_async,
            self.identity.user,
            self.identity.password,
        )
        for header in self.headers:
            transport.add_header(header.name, header.value)
        transport.on_ready_state_change = self._handle_transport_state
        self.transport = transport
        transport.dispatch(body)

    def _handle_transport_state(self, transport: BaseTransport) -> None:
        if transport is not self.transport:
            logger.debug("Ignoring a transport left over from a previous setup")
            return

        self.ready_state = transport.ready_state
        if transport.ready_state != ReadyState.DONE:
            return

        self.status = transport.status
        self.response_text = transport.response_text
        self.error = transport.error
        self.from_cache = False

        if self.dispatch_state is DispatchState.NETWORK_PENDING:
            self.dispatch_state = DispatchState.DONE
            self._notify()
        else:
            logger.debug(f"Not notifying for {self.cache_key!r}, the caller was answered from the cache")
            self.dispatch_state = DispatchState.DONE

        if self.cache.enabled and self.status == SUCCESS_STATUS:
            assert self.cache_key is not None
            self.cache.set(self.cache_key, self.response_text)

    def _notify(self) -> None:
        if self.on_ready_state_change is not None:
            self.on_ready_state_change(self)

    def __repr__(self) -> str:
        if self.identity is None:
            return f"<{type(self).__name__} [{self.dispatch_state.value}]>"
        return f"<{type(self).__name__} {self.identity.method} {self.identity.url} [{self.dispatch_state.value}]>"
