from __future__ import annotations

import enum
import typing as tp
from dataclasses import dataclass

__all__ = (
    "NAMESPACE",
    "SUCCESS_STATUS",
    "ReadyState",
    "DispatchState",
    "RequestIdentity",
    "Header",
)

NAMESPACE = "ajaxreplay"
"""Prefix of every key written by ajaxreplay, used to tell its entries apart in a shared store."""

SUCCESS_STATUS = 200


class ReadyState(enum.IntEnum):
    UNSENT = 0
    OPENED = 1
    HEADERS_RECEIVED = 2
    LOADING = 3
    DONE = 4


class DispatchState(enum.Enum):
    """
    Where a single dispatch of a `RequestProxy` stands.

    - ``NOT_STARTED``: set up, not dispatched yet.
    - ``CACHE_SERVED``: the caller was answered from the store. A refresh request
      may still be in flight; its completion must not notify the caller again.
    - ``NETWORK_PENDING``: nothing was served from the store, the caller waits
      for the real transport.
    - ``DONE``: the caller was notified and no completion is expected anymore.
    """

    NOT_STARTED = "not_started"
    CACHE_SERVED = "cache_served"
    NETWORK_PENDING = "network_pending"
    DONE = "done"


@dataclass(frozen=True)
class RequestIdentity:
    method: str
    url: str
    is_async: bool = True
    user: tp.Optional[str] = None
    password: tp.Optional[str] = None

    @property
    def credentials(self) -> tp.Optional[tp.Tuple[str, str]]:
        if self.user is None:
            return None
        return self.user, self.password or ""


@dataclass(frozen=True)
class Header:
    name: str
    value: str
