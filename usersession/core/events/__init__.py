"""
User lifecycle events: synchronous bus, topics and the per-user notifier.
"""

from usersession.core.events.bus import EventBus, EventBusConfig, Subscription, get_default_bus, reset_default_bus
from usersession.core.events.models import Topic, UserEventName
from usersession.core.events.notifier import NullUserEvents, UserEventsNotifier

__all__ = [
    "EventBus",
    "EventBusConfig",
    "Subscription",
    "get_default_bus",
    "reset_default_bus",
    "Topic",
    "UserEventName",
    "NullUserEvents",
    "UserEventsNotifier",
]
