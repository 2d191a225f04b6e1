from __future__ import annotations

import pytest


def _topic(ns="user", event="login"):
    from usersession.core.events.models import Topic, UserEventName

    return Topic(namespace=ns, event=UserEventName(event))


def test_trigger_fans_out_in_registration_order(bus):
    seen = []
    bus.subscribe(_topic(), lambda *a: seen.append(("first", a)))
    bus.subscribe(_topic(), lambda *a: seen.append(("second", a)))

    n = bus.trigger(_topic(), {"x": 1}, "who")
    assert n == 2
    assert seen == [("first", ({"x": 1}, "who")), ("second", ({"x": 1}, "who"))]


def test_topics_are_isolated(bus):
    seen = []
    bus.subscribe(_topic("user", "login"), lambda *a: seen.append("user.login"))
    bus.subscribe(_topic("admin", "login"), lambda *a: seen.append("admin.login"))
    bus.subscribe(_topic("user", "logout"), lambda *a: seen.append("user.logout"))

    bus.trigger(_topic("user", "login"))
    assert seen == ["user.login"]


def test_cancelled_subscription_receives_nothing(bus):
    seen = []
    sub = bus.subscribe(_topic(), lambda *a: seen.append(a))
    assert sub.active is True
    assert sub.cancel() is True
    assert sub.cancel() is False
    assert bus.trigger(_topic(), 1) == 0
    assert seen == []
    assert bus.get_stats()["subscribers"] == 0


def test_cancel_during_fan_out_skips_later_listener(bus):
    seen = []
    holder = {}

    def first(*_a):  # noqa: ANN001
        seen.append("first")
        holder["second"].cancel()

    bus.subscribe(_topic(), first)
    holder["second"] = bus.subscribe(_topic(), lambda *a: seen.append("second"))
    bus.trigger(_topic())
    assert seen == ["first"]


def test_handler_exception_isolated(bus):
    ok = {"n": 0}

    def bad(*_a):  # noqa: ANN001
        raise RuntimeError("boom")

    def good(*_a):  # noqa: ANN001
        ok["n"] += 1

    bus.subscribe(_topic(), bad)
    bus.subscribe(_topic(), good)
    assert bus.trigger(_topic()) == 2
    assert ok["n"] == 1
    st = bus.get_stats()
    assert st["handler_errors_total"] == 1
    assert st["delivered_total"] == 2
    assert bus.get_topic_stats(_topic()) == {"triggered": 1, "delivered": 2, "errors": 1}
    assert bus.get_topic_stats(_topic("admin", "login")) == {"triggered": 0, "delivered": 0, "errors": 0}


def test_raise_handler_errors_after_fan_out():
    from usersession.core.events.bus import EventBus, EventBusConfig

    bus = EventBus(cfg=EventBusConfig(raise_handler_errors=True))
    ok = {"n": 0}

    def bad(*_a):  # noqa: ANN001
        raise RuntimeError("boom")

    bus.subscribe(_topic(), bad)
    bus.subscribe(_topic(), lambda *a: ok.__setitem__("n", ok["n"] + 1))
    with pytest.raises(RuntimeError, match="boom"):
        bus.trigger(_topic())
    assert ok["n"] == 1


def test_error_reporter_receives_failures(bus, tmp_path):
    import json

    from usersession.core.error_reporter import ErrorReporter
    from usersession.core.events.bus import EventBus

    path = tmp_path / "logs" / "errors.jsonl"
    bus = EventBus(error_reporter=ErrorReporter(path=str(path)))

    def bad(*_a):  # noqa: ANN001
        raise ValueError("token=abc leaked?")

    bus.subscribe(_topic(), bad)
    bus.trigger(_topic())
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["error_code"] == "observer_error"
    assert entry["topic"] == "user.login"
    assert entry["safe_context"]["handler"] == "bad"
    assert entry["safe_context"]["exc_type"] == "ValueError"


def test_unsubscribe_by_callback(bus):
    seen = []

    def cb(*a):  # noqa: ANN001
        seen.append(a)

    bus.subscribe(_topic("user", "login"), cb)
    bus.subscribe(_topic("user", "logout"), cb)
    assert bus.unsubscribe(cb, topic=_topic("user", "login")) == 1
    bus.trigger(_topic("user", "login"))
    bus.trigger(_topic("user", "logout"), "u")
    assert seen == [("u",)]
    assert bus.unsubscribe(cb) == 1
    assert bus.list_subscribers() == []


def test_subscribe_rejects_bad_input(bus):
    with pytest.raises(ValueError):
        bus.subscribe(_topic(), "not callable")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        bus.subscribe("user.login", lambda: None)  # type: ignore[arg-type]


def test_stats_and_recent(bus):
    bus.subscribe(_topic(), lambda *a: None)
    bus.trigger(_topic())
    bus.trigger(_topic("user", "logout"))
    st = bus.get_stats()
    assert st["triggered_total"] == 2
    assert st["per_topic"] == {
        "user.login": {"triggered": 1, "delivered": 1, "errors": 0},
        "user.logout": {"triggered": 1, "delivered": 0, "errors": 0},
    }
    assert st["subscribers"] == 1
    recent = bus.dump_recent()
    assert [r["topic"] for r in recent] == ["user.logout", "user.login"]
    assert bus.list_subscribers()[0]["topic"] == "user.login"


def test_default_bus_reset():
    from usersession.core.events.bus import get_default_bus, reset_default_bus

    b1 = get_default_bus()
    assert get_default_bus() is b1
    sub = b1.subscribe(_topic(), lambda *a: None)
    reset_default_bus()
    assert sub.active is False
    assert get_default_bus() is not b1


def test_topic_rendering_and_validation():
    from usersession.core.events.models import Topic, UserEventName

    t = Topic(namespace="user", event=UserEventName.key_change)
    assert str(t) == "user.keyChange"
    assert str(t.for_key("address.city")) == "user.keyChange.address.city"
    assert Topic(namespace="user", event="keyChange") == t
    with pytest.raises(ValueError):
        Topic(namespace="", event=UserEventName.boot)
    with pytest.raises(ValueError):
        Topic(namespace="user", event=UserEventName.login, key="x")
