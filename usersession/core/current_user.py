from __future__ import annotations

"""
Process-scoped slot for the active User.

Set it once at startup, read it where injection is impractical, and reset it
between tests.
"""

import threading
from typing import Any, Optional

from usersession.core.errors import ConfigurationError

_lock = threading.Lock()
_current: Optional[Any] = None


def set_current_user(user: Any) -> None:
    global _current
    if user is None:
        raise ValueError("user required; use reset_current_user() to clear")
    with _lock:
        _current = user


def get_current_user() -> Any:
    with _lock:
        user = _current
    if user is None:
        raise ConfigurationError("No current user has been set.")
    return user


def has_current_user() -> bool:
    with _lock:
        return _current is not None


def reset_current_user() -> None:
    global _current
    with _lock:
        _current = None
