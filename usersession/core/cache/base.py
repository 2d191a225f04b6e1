from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from usersession.core.errors import ConfigurationError


@runtime_checkable
class CacheDriver(Protocol):
    """
    Opaque key/value store a User persists its document through.

    Stored values must come back unchanged from get().
    """

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


def validate_cache_driver(driver: Any) -> Any:
    if driver is None:
        raise ConfigurationError("A cache driver is required.")
    missing = [m for m in ("get", "set", "remove") if not callable(getattr(driver, m, None))]
    if missing:
        raise ConfigurationError("Cache driver is missing required methods.", driver=type(driver).__name__, missing=missing)
    return driver
