from ajaxreplay._cache import ResponseCache as ResponseCache
from ajaxreplay._config import ReplayOptions as ReplayOptions
from ajaxreplay._exceptions import (
    ProxyStateError as ProxyStateError,
    ReplayError as ReplayError,
    StoreCapacityExceeded as StoreCapacityExceeded,
)
from ajaxreplay._keygen import generate_key as generate_key
from ajaxreplay._mock import MockNetwork as MockNetwork, MockResponse as MockResponse, MockTransport as MockTransport
from ajaxreplay._models import (
    NAMESPACE as NAMESPACE,
    SUCCESS_STATUS as SUCCESS_STATUS,
    DispatchState as DispatchState,
    Header as Header,
    ReadyState as ReadyState,
    RequestIdentity as RequestIdentity,
)
from ajaxreplay._proxy import RequestProxy as RequestProxy
from ajaxreplay._replay import AjaxReplay as AjaxReplay
from ajaxreplay._storages import (
    BaseStore as BaseStore,
    FileStore as FileStore,
    InMemoryStore as InMemoryStore,
    RedisStore as RedisStore,
    SQLiteStore as SQLiteStore,
)
from ajaxreplay._transports import BaseTransport as BaseTransport, HTTPXTransport as HTTPXTransport

__all__ = (
    # Proxy
    "AjaxReplay",
    "RequestProxy",
    "ReplayOptions",
    ## Models
    "NAMESPACE",
    "SUCCESS_STATUS",
    "DispatchState",
    "Header",
    "ReadyState",
    "RequestIdentity",
    "generate_key",
    # Cache
    "ResponseCache",
    ## Stores
    "BaseStore",
    "InMemoryStore",
    "FileStore",
    "SQLiteStore",
    "RedisStore",
    # Transports
    "BaseTransport",
    "HTTPXTransport",
    "MockNetwork",
    "MockResponse",
    "MockTransport",
    # Exceptions
    "ReplayError",
    "StoreCapacityExceeded",
    "ProxyStateError",
)

__version__ = "1.1.1"
