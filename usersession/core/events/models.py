from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UserEventName(str, Enum):
    boot = "boot"
    login = "login"
    change = "change"
    key_change = "keyChange"
    logout = "logout"


@dataclass(frozen=True)
class Topic:
    """
    One (namespace, event) pair on the bus.

    `key` narrows keyChange topics to a single key path.
    """

    namespace: str
    event: UserEventName
    key: Optional[str] = None

    def __post_init__(self) -> None:
        if not str(self.namespace or "").strip():
            raise ValueError("topic namespace required")
        if not isinstance(self.event, UserEventName):
            object.__setattr__(self, "event", UserEventName(self.event))
        if self.key is not None and self.event != UserEventName.key_change:
            raise ValueError("only keyChange topics can be narrowed by key")

    def for_key(self, key: str) -> "Topic":
        return Topic(namespace=self.namespace, event=self.event, key=str(key))

    def __str__(self) -> str:
        base = f"{self.namespace}.{self.event.value}"
        return base if self.key is None else f"{base}.{self.key}"
