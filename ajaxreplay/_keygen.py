from __future__ import annotations

import typing as tp

from ._models import NAMESPACE, RequestIdentity

Body = tp.Union[str, bytes, None]


def body_to_text(body: Body) -> str:
    """
    Render a request body the way it takes part in a cache key.

    Bytes are decoded as UTF-8. Undecodable bytes are kept as backslash escapes,
    so two different payloads never render to the same text.
    """
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="backslashreplace")
    return body


def generate_key(identity: RequestIdentity, body: Body = None) -> str:
    """
    Build the cache key of a request.

    The key is the namespace tag followed by the method, the url and, when it is
    not empty, the body. Headers and credentials never take part, so requests
    that differ only by them share an entry.

    Example:
    ```python
        >>> generate_key(RequestIdentity("POST", "/items"), "a=1")
        'ajaxreplayPOST/itemsa=1'
    ```
    """
    return NAMESPACE + identity.method + identity.url + body_to_text(body)
