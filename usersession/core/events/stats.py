from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class TopicCounters:
    triggered: int = 0
    delivered: int = 0
    errors: int = 0


class TopicStats:
    """
    Per-topic trigger/delivery/error counts; totals are summed on read.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_topic: Dict[str, TopicCounters] = {}

    def record(self, topic: str, *, delivered: int, errors: int) -> None:
        with self._lock:
            c = self._by_topic.setdefault(topic, TopicCounters())
            c.triggered += 1
            c.delivered += delivered
            c.errors += errors

    def for_topic(self, topic: str) -> TopicCounters:
        with self._lock:
            c = self._by_topic.get(topic)
            return TopicCounters(**asdict(c)) if c else TopicCounters()

    def report(self) -> Dict[str, Any]:
        with self._lock:
            per_topic = {t: asdict(c) for t, c in self._by_topic.items()}
        return {
            "triggered_total": sum(c["triggered"] for c in per_topic.values()),
            "delivered_total": sum(c["delivered"] for c in per_topic.values()),
            "handler_errors_total": sum(c["errors"] for c in per_topic.values()),
            "per_topic": per_topic,
        }
