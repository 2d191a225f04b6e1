from __future__ import annotations

import collections
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from usersession.core.events.models import Topic
from usersession.core.events.stats import TopicStats
from usersession.core.logger import get_logger


class EventBusConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Re-raise the first handler failure after fan-out completes (debugging aid).
    raise_handler_errors: bool = False
    keep_recent: int = Field(default=200, ge=0, le=10_000)


@dataclass(eq=False)
class Subscription:
    """
    Cancellable handle for one callback on one topic.
    """

    topic: Topic
    callback: Callable[..., Any]
    _bus: Optional["EventBus"] = field(default=None, repr=False)
    _active: bool = field(default=True, repr=False)

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> bool:
        """Stop delivery. Returns False when already cancelled."""
        if not self._active:
            return False
        self._active = False
        if self._bus is not None:
            self._bus._detach(self)
            self._bus = None
        return True

    # alias kept for callers used to the unsubscribe wording
    unsubscribe = cancel


class EventBus:
    """
    In-process synchronous pub/sub keyed by `Topic`.

    - trigger runs every live callback of the topic on the calling thread,
      in registration order
    - handler failures are isolated (caught), logged and reported
    """

    def __init__(self, *, cfg: Optional[EventBusConfig] = None, logger: Optional[logging.Logger] = None, error_reporter: Any = None):
        self.cfg = cfg or EventBusConfig()
        self.logger = logger or get_logger("events")
        self.error_reporter = error_reporter

        self._lock = threading.Lock()
        self._subs: Dict[Topic, List[Subscription]] = {}
        self._stats = TopicStats()
        self._recent: Deque[Dict[str, Any]] = collections.deque(maxlen=max(1, int(self.cfg.keep_recent)))

    def subscribe(self, topic: Topic, callback: Callable[..., Any]) -> Subscription:
        if not callable(callback):
            raise ValueError("callback must be callable")
        if not isinstance(topic, Topic):
            raise TypeError("topic must be a Topic")
        sub = Subscription(topic=topic, callback=callback, _bus=self)
        with self._lock:
            self._subs.setdefault(topic, []).append(sub)
        return sub

    def unsubscribe(self, callback: Callable[..., Any], topic: Optional[Topic] = None) -> int:
        with self._lock:
            victims = [s for t, subs in self._subs.items() if topic is None or t == topic for s in subs if s.callback is callback]
        for s in victims:
            s.cancel()
        return len(victims)

    def trigger(self, topic: Topic, *args: Any) -> int:
        with self._lock:
            subs = list(self._subs.get(topic, ()))
        name = str(topic)
        if self.cfg.keep_recent:
            self._recent.appendleft({"ts": time.time(), "topic": name, "subscribers": len(subs)})

        delivered = 0
        errors = 0
        first_error: Optional[BaseException] = None
        for s in subs:
            if not s.active:
                continue
            delivered += 1
            err = self._safe_call(s, args)
            if err is not None:
                errors += 1
                if first_error is None:
                    first_error = err
        self._stats.record(name, delivered=delivered, errors=errors)
        if first_error is not None and self.cfg.raise_handler_errors:
            raise first_error
        return delivered

    def has_subscribers(self, topic: Topic) -> bool:
        with self._lock:
            return any(s.active for s in self._subs.get(topic, ()))

    def list_subscribers(self) -> List[Dict[str, Any]]:
        with self._lock:
            subs = [s for lst in self._subs.values() for s in lst]
        return [{"topic": str(s.topic), "callback": getattr(s.callback, "__name__", "callback")} for s in subs]

    def get_stats(self) -> Dict[str, Any]:
        out = self._stats.report()
        with self._lock:
            out["subscribers"] = self._count_locked()
        return out

    def get_topic_stats(self, topic: Topic) -> Dict[str, int]:
        c = self._stats.for_topic(str(topic))
        return {"triggered": c.triggered, "delivered": c.delivered, "errors": c.errors}

    def dump_recent(self, n: int = 50) -> List[Dict[str, Any]]:
        return list(self._recent)[: max(1, int(n))]

    def clear(self) -> None:
        with self._lock:
            subs = [s for lst in self._subs.values() for s in lst]
        for s in subs:
            s.cancel()

    # ---- internals ----
    def _count_locked(self) -> int:
        return sum(len(v) for v in self._subs.values())

    def _detach(self, sub: Subscription) -> None:
        with self._lock:
            lst = self._subs.get(sub.topic)
            if not lst:
                return
            keep = [s for s in lst if s is not sub]
            if keep:
                self._subs[sub.topic] = keep
            else:
                del self._subs[sub.topic]

    def _safe_call(self, sub: Subscription, args: tuple) -> Optional[BaseException]:
        try:
            sub.callback(*args)
            return None
        except Exception as e:  # noqa: BLE001
            handler = getattr(sub.callback, "__name__", "callback")
            self.logger.exception("event listener %s failed on %s", handler, sub.topic)
            if self.error_reporter is not None:
                try:
                    self.error_reporter.report_exception(e, topic=str(sub.topic), context={"handler": handler})
                except Exception:  # noqa: BLE001
                    self.logger.warning("error reporter failed while reporting %s", sub.topic)
            return e


_default_bus: Optional[EventBus] = None
_default_lock = threading.Lock()


def get_default_bus() -> EventBus:
    global _default_bus
    with _default_lock:
        if _default_bus is None:
            _default_bus = EventBus()
        return _default_bus


def reset_default_bus() -> None:
    """Drop every subscription on the default bus and forget it."""
    global _default_bus
    with _default_lock:
        bus, _default_bus = _default_bus, None
    if bus is not None:
        bus.clear()
