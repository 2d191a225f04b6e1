from __future__ import annotations

import json
import os
import threading
import time
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Optional

from usersession.core.errors import ObserverError, UserStateError
from usersession.core.redaction import redact


@dataclass
class ErrorReporterConfig:
    include_tracebacks: bool = False


class ErrorReporter:
    """
    Appends one redacted JSON line per listener failure.
    """

    def __init__(self, *, path: str = os.path.join("logs", "errors.jsonl"), cfg: Optional[ErrorReporterConfig] = None):
        self.path = path
        self.cfg = cfg or ErrorReporterConfig()
        self._lock = threading.Lock()
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)

    def report_exception(self, exc: BaseException, *, topic: str, context: Optional[Dict[str, Any]] = None) -> UserStateError:
        err = normalize_exception(exc, topic=topic, context=context or {})
        self.write_error(err, topic=topic, internal_exc=exc)
        return err

    def write_error(self, err: UserStateError, *, topic: str, internal_exc: Optional[BaseException] = None) -> None:
        entry: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "topic": topic,
            "error_code": err.code,
            "severity": err.severity.value,
            "recoverable": bool(err.recoverable),
            "user_message": err.user_message,
            "safe_context": redact(err.context or {}),
        }
        if self.cfg.include_tracebacks and internal_exc is not None:
            entry["internal_context"] = {"traceback": "".join(traceback.format_exception(type(internal_exc), internal_exc, internal_exc.__traceback__, limit=30))}
        line = json.dumps(entry, ensure_ascii=False, default=str)
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")


def normalize_exception(exc: BaseException, *, topic: str, context: Dict[str, Any]) -> UserStateError:
    if isinstance(exc, UserStateError):
        return exc
    ctx = dict(context)
    ctx.update({"topic": topic, "exc_type": type(exc).__name__, "detail": str(exc)[:500]})
    return ObserverError(**ctx)
