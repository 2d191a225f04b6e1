from __future__ import annotations

from typing import Any, Dict


REDACT_KEYS = {
    "accesstoken",
    "access_token",
    "refreshtoken",
    "refresh_token",
    "token",
    "password",
    "passphrase",
    "secret",
    "api_key",
    "authorization",
}

MASK = "***REDACTED***"


def _redact(obj: Any, extra: frozenset) -> Any:
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            name = str(k).lower()
            if name in REDACT_KEYS or name in extra:
                out[k] = MASK
            else:
                out[k] = _redact(v, extra)
        return out
    if isinstance(obj, (list, tuple)):
        return [_redact(x, extra) for x in obj]
    return obj


def redact(obj: Any, *, extra_keys: Any = ()) -> Any:
    """
    Return a copy of `obj` with credential-looking keys masked.

    `extra_keys` lets callers mask a custom token field name as well
    (e.g. a User configured with access_token_key="jwt").
    """
    return _redact(obj, frozenset(str(k).lower() for k in (extra_keys or ())))
