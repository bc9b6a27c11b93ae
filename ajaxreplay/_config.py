from __future__ import annotations

from dataclasses import dataclass, fields

__all__ = ("ReplayOptions",)


@dataclass
class ReplayOptions:
    """
    Behaviour switches shared by every proxy created from one `AjaxReplay`.

    Attributes:
    ----------
    no_cache : bool
        When True the store is neither read nor written. Stored entries are left
        alone, so turning the switch back off serves them again.

        Default: False

    refresh : bool
        When True a request answered from the store is still sent to the real
        transport, and its successful response overwrites the stored body. The
        caller is only notified once, with the stored body.

        Default: True

        Examples:
        --------
        >>> # Never let a request leave the process once it is cached
        >>> options = ReplayOptions(refresh=False)
    """

    no_cache: bool = False
    """Bypass the store for reads and writes."""

    refresh: bool = True
    """Re-send requests served from the store to keep it current."""

    def reset(self) -> None:
        for field_ in fields(self):
            setattr(self, field_.name, field_.default)
