from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Dict

from usersession.core.errors import BackendError


def read_json_object(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except json.JSONDecodeError as e:
        raise BackendError("Cache file is corrupt.", path=path, detail=str(e)) from e
    except OSError as e:
        raise BackendError("Cache file could not be read.", path=path, detail=str(e)) from e
    if not isinstance(obj, dict):
        raise BackendError("Cache file must contain a JSON object.", path=path)
    return obj


def atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_cache_", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
            f.write("\n")
            try:
                f.flush()
                os.fsync(f.fileno())
            except OSError:
                pass
        os.replace(tmp, path)
    except (OSError, TypeError, ValueError) as e:
        raise BackendError("Cache file could not be written.", path=path, detail=str(e)) from e
    finally:
        try:
            if os.path.exists(tmp):
                os.remove(tmp)
        except OSError:
            pass


class JsonFileCacheDriver:
    """
    Keeps every key in one JSON object file. Values must be JSON-serializable.
    """

    def __init__(self, path: str):
        self.path = str(path)

    def get(self, key: str, default: Any = None) -> Any:
        return read_json_object(self.path).get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = read_json_object(self.path)
        data[str(key)] = value
        atomic_write_json(self.path, data)

    def remove(self, key: str) -> None:
        data = read_json_object(self.path)
        if key in data:
            del data[key]
            atomic_write_json(self.path, data)
