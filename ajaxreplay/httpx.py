from __future__ import annotations

import asyncio
import functools
import logging
import types
import typing as tp
from dataclasses import dataclass

import httpx

from ._config import ReplayOptions
from ._proxy import RequestProxy
from ._replay import AjaxReplay
from ._storages import BaseStore
from ._transports import HTTPXTransport

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

__all__ = ("ReplayTransport", "AsyncReplayTransport")

logger = logging.getLogger("ajaxreplay.integrations")


@dataclass(frozen=True)
class _Answer:
    status: int
    text: str
    from_cache: bool
    error: tp.Optional[BaseException]

    @classmethod
    def of(cls, proxy: RequestProxy) -> "_Answer":
        return cls(proxy.status, proxy.response_text, proxy.from_cache, proxy.error)

    def to_response(self) -> httpx.Response:
        if self.error is not None:
            raise self.error
        return httpx.Response(
            status_code=self.status,
            content=self.text.encode("utf-8"),
            extensions={"from_cache": self.from_cache},
        )


def _prepare_proxy(proxy: RequestProxy, request: httpx.Request, is_async: bool) -> None:
    proxy.setup(request.method, str(request.url), is_async)
    for name, value in request.headers.multi_items():
        proxy.add_header(name, value)


class ReplayTransport(httpx.BaseTransport):
    """
    An HTTPX transport that replays stored response bodies.

    Every request goes through a `RequestProxy`; the real requests are sent
    with `transport`. Responses carry `extensions["from_cache"]`.

    Only the status code and the body text are replayed, stored responses have
    no headers.

    :param transport: Transport the real requests are sent with, defaults to `httpx.HTTPTransport()`
    :type transport: tp.Optional[httpx.BaseTransport], optional
    :param store: Store holding the cached bodies, defaults to None
    :type store: tp.Optional[BaseStore], optional
    :param options: Behaviour switches, defaults to None
    :type options: tp.Optional[ReplayOptions], optional
    """

    def __init__(
        self,
        transport: tp.Optional[httpx.BaseTransport] = None,
        store: tp.Optional[BaseStore] = None,
        options: tp.Optional[ReplayOptions] = None,
    ) -> None:
        self._client = httpx.Client(transport=transport if transport is not None else httpx.HTTPTransport())
        self.replay = AjaxReplay(
            transport_factory=functools.partial(HTTPXTransport, client=self._client),
            store=store,
            options=options,
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        body = request.read()
        proxy = self.replay.request()
        answers: tp.List[_Answer] = []
        proxy.on_ready_state_change = lambda done: answers.append(_Answer.of(done))

        _prepare_proxy(proxy, request, is_async=False)
        proxy.dispatch(body)

        # Synchronous transports always finish inside `dispatch`.
        assert answers, "The request finished without notifying"
        logger.debug(f"{request.method} {request.url} answered, from cache: {answers[0].from_cache}")
        return answers[0].to_response()

    def close(self) -> None:
        self._client.close()
        self.replay.close()

    def __enter__(self) -> "Self":
        return self

    def __exit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        self.close()


class AsyncReplayTransport(httpx.AsyncBaseTransport):
    """
    An async HTTPX transport that replays stored response bodies.

    A request answered from the store returns right away. If refresh is on the
    real request keeps running in the background; `aclose` waits for it.

    :param transport: Transport the real requests are sent with, defaults to `httpx.AsyncHTTPTransport()`
    :type transport: tp.Optional[httpx.AsyncBaseTransport], optional
    :param store: Store holding the cached bodies, defaults to None
    :type store: tp.Optional[BaseStore], optional
    :param options: Behaviour switches, defaults to None
    :type options: tp.Optional[ReplayOptions], optional
    """

    def __init__(
        self,
        transport: tp.Optional[httpx.AsyncBaseTransport] = None,
        store: tp.Optional[BaseStore] = None,
        options: tp.Optional[ReplayOptions] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            transport=transport if transport is not None else httpx.AsyncHTTPTransport()
        )
        self.replay = AjaxReplay(
            transport_factory=functools.partial(HTTPXTransport, async_client=self._client),
            store=store,
            options=options,
        )
        self._background: tp.Set[asyncio.Task[None]] = set()
        self._background_errors: tp.List[BaseException] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        proxy = self.replay.request()
        answer: asyncio.Future[_Answer] = asyncio.get_running_loop().create_future()

        def on_done(done: RequestProxy) -> None:
            if not answer.done():
                answer.set_result(_Answer.of(done))

        proxy.on_ready_state_change = on_done
        _prepare_proxy(proxy, request, is_async=True)
        proxy.dispatch(body)

        task = proxy.transport.task if isinstance(proxy.transport, HTTPXTransport) else None
        if not answer.done():
            assert task is not None
            # A miss: the caller waits for the whole request, store errors included.
            await task
        elif task is not None:
            self._background.add(task)
            task.add_done_callback(self._finish_background)

        logger.debug(f"{request.method} {request.url} answered, from cache: {answer.result().from_cache}")
        return answer.result().to_response()

    def _finish_background(self, task: asyncio.Task[None]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"Background refresh failed: {error!r}")
            self._background_errors.append(error)

    async def aclose(self) -> None:
        """
        Waits for the background refreshes, then closes the client.

        The first error a refresh ended with, if any, is raised here.
        """
        try:
            if self._background:
                await asyncio.gather(*self._background, return_exceptions=True)
            if self._background_errors:
                error = self._background_errors[0]
                self._background_errors.clear()
                raise error
        finally:
            await self._client.aclose()
            self.replay.close()
