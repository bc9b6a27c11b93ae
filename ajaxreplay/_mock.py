from __future__ import annotations

import typing as tp
from dataclasses import dataclass

from ._keygen import Body
from ._models import ReadyState
from ._transports import BaseTransport

__all__ = ("MockResponse", "MockNetwork", "MockTransport")


@dataclass
class MockResponse:
    status: int = 200
    text: str = ""
    error: tp.Optional[BaseException] = None


class MockTransport(BaseTransport):
    """
    A transport answering from the responses queued on its `MockNetwork`.

    Synchronous requests are answered inside `dispatch`. Asynchronous ones wait
    until `MockNetwork.flush` is called.
    """

    def __init__(self, network: MockNetwork) -> None:
        super().__init__()
        self.network = network
        self.body: Body = None

    def dispatch(self, body: Body = None) -> None:
        assert self.identity is not None
        self.body = body
        self.network.requests.append(self)

        if self.identity.is_async:
            self.network.pending.append(self)
        else:
            self.respond()

    def respond(self) -> None:
        response = self.network.mocked_responses.pop(0)
        if response.error is not None:
            self._complete(0, "", response.error)
            return
        self._change_state(ReadyState.HEADERS_RECEIVED)
        self._change_state(ReadyState.LOADING)
        self._complete(response.status, response.text)


class MockNetwork:
    """
    A transport factory recording every request sent through it.

    Example:
    ```python
        network = MockNetwork()
        network.add_responses([MockResponse(200, "[1,2,3]")])
        replay = AjaxReplay(transport_factory=network, store=InMemoryStore())
    ```
    """

    def __init__(self) -> None:
        self.mocked_responses: tp.List[MockResponse] = []
        self.requests: tp.List[MockTransport] = []
        self.pending: tp.List[MockTransport] = []

    def __call__(self) -> MockTransport:
        return MockTransport(self)

    def add_responses(self, responses: tp.List[MockResponse]) -> None:
        self.mocked_responses.extend(responses)

    def flush(self) -> None:
        while self.pending:
            self.pending.pop(0).respond()

    @property
    def call_count(self) -> int:
        return len(self.requests)
