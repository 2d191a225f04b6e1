from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from usersession.core.redaction import redact


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class UserStateError(Exception):
    code: str
    user_message: str
    severity: Severity = Severity.ERROR
    recoverable: bool = True
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.code)

    def __str__(self) -> str:
        return f"{self.code}: {self.user_message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "recoverable": bool(self.recoverable),
            "context": redact(self.context or {}),
        }


# ---- Core types ----
class ConfigurationError(UserStateError):
    def __init__(self, user_message: str = "Configuration error.", **ctx: Any):
        super().__init__("configuration_error", user_message, severity=Severity.CRITICAL, recoverable=False, context=ctx)


class BackendError(UserStateError):
    def __init__(self, user_message: str = "Cache backend error.", **ctx: Any):
        super().__init__("backend_error", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)


class ObserverError(UserStateError):
    def __init__(self, user_message: str = "An event listener failed.", **ctx: Any):
        super().__init__("observer_error", user_message, severity=Severity.WARN, recoverable=True, context=ctx)
