from __future__ import annotations

"""
User: the currently authenticated actor, persisted through a cache driver.

Every mutation runs in the same order: update the in-memory document,
write it through the cache driver, then notify listeners. Driver
exceptions are never caught here.
"""

import logging
from typing import Any, Dict, Optional, Union

from usersession.core.cache.base import validate_cache_driver
from usersession.core.error_reporter import ErrorReporter
from usersession.core.events.bus import EventBus
from usersession.core.events.notifier import NullUserEvents, UserEventsNotifier
from usersession.core.logger import get_logger
from usersession.core.paths import get_path, has_path, set_path, values_equal
from usersession.core.redaction import redact
from usersession.core.user.models import UserConfig, build_user_config


class User:
    def __init__(
        self,
        cache_driver: Any = None,
        *,
        cfg: Optional[UserConfig] = None,
        bus: Optional[EventBus] = None,
        logger: Optional[logging.Logger] = None,
        error_reporter: Optional[ErrorReporter] = None,
        **options: Any,
    ):
        """
        `options` are UserConfig fields (cache_key, access_token_key,
        enable_events, events_base_name) and override `cfg`.

        With `error_reporter` and no `bus`, the user gets its own bus that
        reports listener failures; a given bus without a reporter adopts it.
        """
        if cfg is not None and options:
            cfg = build_user_config({**cfg.model_dump(), **options})
        self.cfg = cfg if cfg is not None else build_user_config(options)
        self.cache_driver = cache_driver
        if error_reporter is not None:
            if bus is None:
                bus = EventBus(error_reporter=error_reporter)
            elif bus.error_reporter is None:
                bus.error_reporter = error_reporter
        self.error_reporter = error_reporter
        self.bus = bus
        self.logger = logger or get_logger("user")
        self.permissions: Dict[str, Any] = {}
        self.user_data: Dict[str, Any] = {}
        self.events: Union[UserEventsNotifier, NullUserEvents] = NullUserEvents(self.cfg.events_name, logger=self.logger)
        self.boot()

    # ---- lifecycle ----
    def boot(self) -> "User":
        """
        Hydrate the document from the cache driver and fire boot.

        Calling it again re-reads the driver (manual refresh).
        """
        validate_cache_driver(self.cache_driver)
        if self.cfg.enable_events:
            self.events = UserEventsNotifier(self.cfg.events_name, bus=self.bus, logger=self.logger)
        else:
            self.events = NullUserEvents(self.cfg.events_name, logger=self.logger)

        data = self.cache_driver.get(self.cfg.cache_key, {})
        self.user_data = data if data is not None else {}
        self.logger.debug("user %r booted with %s", self.cfg.cache_key, redact(self.user_data, extra_keys=[self.cfg.access_token_key]))

        self.events.trigger_boot(self.user_data, self)
        return self

    def get_cache_key(self) -> str:
        return self.cfg.cache_key

    def get_access_token_key(self) -> str:
        return self.cfg.access_token_key

    def set_access_token_key(self, access_token_key: str) -> "User":
        self.cfg = build_user_config({**self.cfg.model_dump(), "access_token_key": access_token_key})
        return self

    # ---- session ----
    def is_logged_in(self) -> bool:
        token = self.get_access_token()
        return isinstance(token, str) and len(token) > 0

    def is_not_logged_in(self) -> bool:
        return not self.is_logged_in()

    def login(self, user_data: Dict[str, Any]) -> "User":
        """
        Store the given user data; no network call is made.

        Listeners of `login` receive the payload exactly as passed in.
        """
        self.events.trigger_login(user_data, self)
        self.update(user_data)
        self.logger.info("user %r logged in", self.cfg.cache_key)
        return self

    def logout(self) -> None:
        self.user_data = {}
        self.cache_driver.remove(self.cfg.cache_key)
        self.logger.info("user %r logged out", self.cfg.cache_key)
        self.events.trigger_logout(self)

    # ---- document ----
    def get(self, key: str, default: Any = None) -> Any:
        return get_path(self.user_data, key, default)

    def has(self, key: str) -> bool:
        return has_path(self.user_data, key)

    def set(self, key: str, value: Any) -> None:
        old_value = self.get(key)
        if values_equal(value, old_value):
            return
        set_path(self.user_data, key, value)
        self._persist()
        self.events.trigger_key_change(key, value, old_value, self)

    def update(self, user_data: Dict[str, Any]) -> None:
        """
        Replace the whole document, keeping the current access token when the
        new data has none.

        keyChange fires for every top-level key of the new document, whether
        its value changed or not; change fires once at the end.
        """
        data = dict(user_data)
        token_key = self.cfg.access_token_key
        if not get_path(data, token_key):
            set_path(data, token_key, self.get_access_token(), copy_intermediates=True)

        old_data = dict(self.user_data)
        self.user_data = data
        self._persist()

        for key, value in data.items():
            self.events.trigger_key_change(key, value, old_data.get(key), self)
        self.events.trigger_change(self.user_data, old_data, self)

    def all(self) -> Dict[str, Any]:
        return self.user_data

    # ---- token ----
    def get_access_token(self) -> str:
        return self.get(self.cfg.access_token_key, "")

    def set_access_token(self, access_token: str) -> None:
        self.set(self.cfg.access_token_key, access_token)

    def refresh_token(self, access_token: str) -> None:
        return self.set_access_token(access_token)

    # ---- permissions ----
    def set_permissions(self, permissions: Dict[str, Any]) -> None:
        self.permissions = permissions if permissions is not None else {}

    def can(self, permission: str) -> bool:
        return bool(get_path(self.permissions, permission))

    # ---- internals ----
    def _persist(self) -> None:
        self.cache_driver.set(self.cfg.cache_key, self.user_data)

    def __repr__(self) -> str:
        return f"User(cache_key={self.cfg.cache_key!r}, logged_in={self.is_logged_in()})"
