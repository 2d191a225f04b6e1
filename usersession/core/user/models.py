from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from usersession.core.errors import ConfigurationError


class UserConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    cache_key: str = "user"
    access_token_key: str = "accessToken"
    enable_events: bool = False
    # Namespace for event topics; cache_key is used when unset.
    events_base_name: Optional[str] = None

    @field_validator("cache_key", "access_token_key")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = str(v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("events_base_name")
    @classmethod
    def _blank_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def events_name(self) -> str:
        return self.events_base_name or self.cache_key


def build_user_config(options: Dict[str, Any]) -> UserConfig:
    try:
        return UserConfig(**options)
    except ValidationError as e:
        raise ConfigurationError("Invalid user configuration.", errors=[str(x.get("loc")) + ": " + str(x.get("msg")) for x in e.errors()]) from e


def load_user_config(path: str) -> UserConfig:
    """
    Read a JSON object file into a UserConfig. A missing file yields defaults.
    """
    if not os.path.exists(path):
        return UserConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError("User configuration file could not be read.", path=path, detail=str(e)) from e
    if not isinstance(raw, dict):
        raise ConfigurationError("User configuration must be a JSON object.", path=path)
    return build_user_config(raw)
