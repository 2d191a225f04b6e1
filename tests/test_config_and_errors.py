from __future__ import annotations

import json
import logging

import pytest


def test_user_config_defaults():
    from usersession.core.user.models import UserConfig

    cfg = UserConfig()
    assert cfg.cache_key == "user"
    assert cfg.access_token_key == "accessToken"
    assert cfg.enable_events is False
    assert cfg.events_base_name is None
    assert cfg.events_name == "user"
    assert UserConfig(events_base_name="  ").events_name == "user"
    assert UserConfig(events_base_name="me").events_name == "me"


def test_load_user_config(tmp_path):
    from usersession.core.errors import ConfigurationError
    from usersession.core.user.models import load_user_config

    assert load_user_config(str(tmp_path / "missing.json")).cache_key == "user"

    p = tmp_path / "user.json"
    p.write_text(json.dumps({"cache_key": "session", "enable_events": True}), encoding="utf-8")
    cfg = load_user_config(str(p))
    assert cfg.cache_key == "session"
    assert cfg.enable_events is True

    p.write_text(json.dumps({"cacheKey": "session"}), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_user_config(str(p))

    p.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_user_config(str(p))


def test_error_to_dict_redacts_context():
    from usersession.core.errors import BackendError, ConfigurationError, Severity

    err = BackendError(path="x.json", token="secret-value")
    d = err.to_dict()
    assert d["code"] == "backend_error"
    assert d["context"]["token"] == "***REDACTED***"
    assert d["context"]["path"] == "x.json"
    assert ConfigurationError().severity == Severity.CRITICAL
    assert ConfigurationError().recoverable is False
    assert "configuration_error" in str(ConfigurationError())


def test_redact_masks_token_fields():
    from usersession.core.redaction import redact

    doc = {"accessToken": "T", "profile": {"password": "p", "name": "A"}, "jwt": "J"}
    out = redact(doc, extra_keys=["jwt"])
    assert out == {"accessToken": "***REDACTED***", "profile": {"password": "***REDACTED***", "name": "A"}, "jwt": "***REDACTED***"}
    assert doc["accessToken"] == "T"


def test_token_never_logged(driver, bus, caplog):
    from usersession.core.user.manager import User

    driver.data["user"] = {"accessToken": "SHOULD_NOT_APPEAR", "name": "A"}
    with caplog.at_level(logging.DEBUG, logger="usersession"):
        u = User(driver, bus=bus)
        u.login({"accessToken": "ALSO_HIDDEN"})
        u.logout()
    assert "SHOULD_NOT_APPEAR" not in caplog.text
    assert "ALSO_HIDDEN" not in caplog.text
    assert "booted" in caplog.text


def test_setup_logging_adds_handlers_once(tmp_path):
    from logging.handlers import RotatingFileHandler

    from usersession.core.logger import setup_logging

    logger = setup_logging(str(tmp_path / "logs"))
    try:
        setup_logging(str(tmp_path / "logs"))
        assert sum(isinstance(h, RotatingFileHandler) for h in logger.handlers) == 1
        assert (tmp_path / "logs" / "usersession.log").exists()
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
