"""
Per-user lifecycle notifications.

A notifier owns one namespace (the user's events base name, falling back to
its cache key) and maps the five lifecycle events onto bus topics:

    boot(document, user)
    login(payload, user)
    change(new_document, old_document, user)
    keyChange(key, new_value, old_value, user)
    logout(user)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from usersession.core.events.bus import EventBus, Subscription, get_default_bus
from usersession.core.events.models import Topic, UserEventName
from usersession.core.logger import get_logger


class UserEventsNotifier:
    def __init__(self, name: str, *, bus: Optional[EventBus] = None, logger: Optional[logging.Logger] = None):
        name = str(name or "").strip()
        if not name:
            raise ValueError("events name required")
        self.name = name
        self.bus = bus if bus is not None else get_default_bus()
        self.logger = logger or get_logger("events")

    @property
    def enabled(self) -> bool:
        return True

    def topic(self, event: UserEventName, key: Optional[str] = None) -> Topic:
        return Topic(namespace=self.name, event=UserEventName(event), key=key)

    # ---- subscribe ----
    def on(self, event: UserEventName, callback: Callable[..., Any]) -> Subscription:
        return self.bus.subscribe(self.topic(event), callback)

    def on_boot(self, callback: Callable[[Any, Any], Any]) -> Subscription:
        return self.on(UserEventName.boot, callback)

    def on_login(self, callback: Callable[[Any, Any], Any]) -> Subscription:
        return self.on(UserEventName.login, callback)

    def on_logout(self, callback: Callable[[Any], Any]) -> Subscription:
        return self.on(UserEventName.logout, callback)

    def on_change(self, callback: Callable[[Any, Any, Any], Any]) -> Subscription:
        return self.on(UserEventName.change, callback)

    def on_key_change(self, callback: Callable[[str, Any, Any, Any], Any], *, key: Optional[str] = None) -> Subscription:
        """
        Listen to key changes. With `key`, only changes of that exact key path are delivered.

        User.update reports top-level keys only, so a nested `key` such as
        "address.city" hears User.set("address.city", ...) but not an update
        that replaces "address" as a whole; listen on "address" for that.
        """
        if key is None:
            return self.on(UserEventName.key_change, callback)
        return self.bus.subscribe(self.topic(UserEventName.key_change, key=str(key)), callback)

    # ---- trigger ----
    def trigger(self, event: UserEventName, *args: Any) -> int:
        topic = self.topic(event)
        self.logger.debug("trigger %s", topic)
        return self.bus.trigger(topic, *args)

    def trigger_boot(self, init_data: Any, user: Any) -> None:
        self.trigger(UserEventName.boot, init_data, user)

    def trigger_login(self, user_data: Any, user: Any) -> None:
        self.trigger(UserEventName.login, user_data, user)

    def trigger_logout(self, user: Any) -> None:
        self.trigger(UserEventName.logout, user)

    def trigger_change(self, new_data: Any, old_data: Any, user: Any) -> None:
        self.trigger(UserEventName.change, new_data, old_data, user)

    def trigger_key_change(self, key: str, new_value: Any, old_value: Any, user: Any) -> None:
        self.trigger(UserEventName.key_change, key, new_value, old_value, user)
        keyed = self.topic(UserEventName.key_change, key=str(key))
        if self.bus.has_subscribers(keyed):
            self.bus.trigger(keyed, key, new_value, old_value, user)


class NullUserEvents:
    """
    Stand-in used when events are disabled: triggers do nothing and
    subscriptions come back already cancelled.
    """

    def __init__(self, name: str, *, logger: Optional[logging.Logger] = None):
        self.name = str(name or "")
        self.logger = logger or get_logger("events")

    @property
    def enabled(self) -> bool:
        return False

    def on(self, event: UserEventName, callback: Callable[..., Any]) -> Subscription:
        if not callable(callback):
            raise ValueError("callback must be callable")
        self.logger.warning("events are disabled for %r; %s listener ignored", self.name, UserEventName(event).value)
        sub = Subscription(topic=Topic(namespace=self.name or "disabled", event=UserEventName(event)), callback=callback)
        sub.cancel()
        return sub

    def on_boot(self, callback: Callable[..., Any]) -> Subscription:
        return self.on(UserEventName.boot, callback)

    def on_login(self, callback: Callable[..., Any]) -> Subscription:
        return self.on(UserEventName.login, callback)

    def on_logout(self, callback: Callable[..., Any]) -> Subscription:
        return self.on(UserEventName.logout, callback)

    def on_change(self, callback: Callable[..., Any]) -> Subscription:
        return self.on(UserEventName.change, callback)

    def on_key_change(self, callback: Callable[..., Any], *, key: Optional[str] = None) -> Subscription:
        return self.on(UserEventName.key_change, callback)

    def trigger(self, event: UserEventName, *args: Any) -> int:
        return 0

    def trigger_boot(self, init_data: Any, user: Any) -> None:
        return

    def trigger_login(self, user_data: Any, user: Any) -> None:
        return

    def trigger_logout(self, user: Any) -> None:
        return

    def trigger_change(self, new_data: Any, old_data: Any, user: Any) -> None:
        return

    def trigger_key_change(self, key: str, new_value: Any, old_value: Any, user: Any) -> None:
        return
