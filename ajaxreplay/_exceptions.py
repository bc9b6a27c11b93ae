__all__ = ("ReplayError", "StoreCapacityExceeded", "ProxyStateError")


class ReplayError(Exception): ...


class StoreCapacityExceeded(ReplayError): ...


class ProxyStateError(ReplayError): ...
