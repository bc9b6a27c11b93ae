from __future__ import annotations

import asyncio
import logging
import typing as tp

import httpx

from ._keygen import Body
from ._models import Header, ReadyState, RequestIdentity

logger = logging.getLogger("ajaxreplay.transports")

__all__ = ("BaseTransport", "HTTPXTransport", "TransportFactory")


class BaseTransport:
    """
    The request primitive that `RequestProxy` stands in for.

    A transport is used for exactly one request: it is set up, given headers,
    dispatched, and reports progress by calling `on_ready_state_change` with
    itself every time `ready_state` changes. `status`, `response_text` and
    `error` are final once `ready_state` is `ReadyState.DONE`.
    """

    def __init__(self) -> None:
        self.on_ready_state_change: tp.Optional[tp.Callable[["BaseTransport"], None]] = None
        self.ready_state = ReadyState.UNSENT
        self.status = 0
        self.response_text = ""
        self.error: tp.Optional[BaseException] = None
        self.identity: tp.Optional[RequestIdentity] = None
        self.headers: tp.List[Header] = []

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
        self._change_state(ReadyState.OPENED)

    def add_header(self, name: str, value: str) -> None:
        self.headers.append(Header(name, value))

    def dispatch(self, body: Body = None) -> None:
        raise NotImplementedError()

    def _change_state(self, ready_state: ReadyState) -> None:
        self.ready_state = ready_state
        if self.on_ready_state_change is not None:
            self.on_ready_state_change(self)

    def _complete(self, status: int, response_text: str, error: tp.Optional[BaseException] = None) -> None:
        self.status = status
        self.response_text = response_text
        self.error = error
        self._change_state(ReadyState.DONE)


TransportFactory = tp.Callable[[], BaseTransport]


class HTTPXTransport(BaseTransport):
    """
    A request primitive backed by HTTPX.

    Synchronous requests are sent with an `httpx.Client` and complete before
    `dispatch` returns. Asynchronous requests are sent with an
    `httpx.AsyncClient` from a task on the running event loop, so `dispatch`
    returns right away.

    :param client: Client used for synchronous requests, defaults to None
    :type client: tp.Optional[httpx.Client], optional
    :param async_client: Client used for asynchronous requests, defaults to None
    :type async_client: tp.Optional[httpx.AsyncClient], optional
    """

    def __init__(
        self,
        client: tp.Optional[httpx.Client] = None,
        async_client: tp.Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__()
        self._client = client
        self._async_client = async_client
        self.task: tp.Optional[asyncio.Task[None]] = None

    def _build_request(self, client: tp.Union[httpx.Client, httpx.AsyncClient], body: Body) -> httpx.Request:
        assert self.identity is not None
        return client.build_request(
            self.identity.method,
            self.identity.url,
            headers=[(header.name, header.value) for header in self.headers],
            content=body or None,
        )

    def _auth(self) -> tp.Any:
        assert self.identity is not None
        credentials = self.identity.credentials
        return credentials if credentials is not None else httpx.USE_CLIENT_DEFAULT

    def dispatch(self, body: Body = None) -> None:
        if self.identity is None:
            raise RuntimeError("`setup` must be called before `dispatch`")

        if self.identity.is_async:
            loop = asyncio.get_running_loop()
            self.task = loop.create_task(self._send_async(body))
        else:
            self._send(body)

    def _send(self, body: Body) -> None:
        client = self._client if self._client is not None else httpx.Client()
        try:
            request = self._build_request(client, body)
            logger.debug(f"Sending {request.method} {request.url}")
            try:
                response = client.send(request, auth=self._auth(), stream=True)
            except httpx.RequestError as exc:
                logger.debug(f"Request to {request.url} failed: {exc!r}")
                self._complete(0, "", exc)
                return
            self._change_state(ReadyState.HEADERS_RECEIVED)
            self._change_state(ReadyState.LOADING)
            try:
                response.read()
            except httpx.RequestError as exc:
                self._complete(0, "", exc)
                return
            finally:
                response.close()
            self._complete(response.status_code, response.text)
        finally:
            if self._client is None:
                client.close()

    async def _send_async(self, body: Body) -> None:
        client = self._async_client if self._async_client is not None else httpx.AsyncClient()
        try:
            request = self._build_request(client, body)
            logger.debug(f"Sending {request.method} {request.url}")
            try:
                response = await client.send(request, auth=self._auth(), stream=True)
            except httpx.RequestError as exc:
                logger.debug(f"Request to {request.url} failed: {exc!r}")
                self._complete(0, "", exc)
                return
            self._change_state(ReadyState.HEADERS_RECEIVED)
            self._change_state(ReadyState.LOADING)
            try:
                await response.aread()
            except httpx.RequestError as exc:
                self._complete(0, "", exc)
                return
            finally:
                await response.aclose()
            self._complete(response.status_code, response.text)
        finally:
            if self._async_client is None:
                await client.aclose()
