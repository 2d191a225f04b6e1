"""
Dotted key-path access over nested mappings.

A path such as "address.city" walks nested dicts; integer segments index
into lists/tuples on read. An exact top-level key always wins over splitting,
so keys that themselves contain dots stay reachable.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any, List

_MISSING = object()


def _segments(path: str) -> List[str]:
    path = str(path)
    if not path:
        raise ValueError("path required")
    return path.split(".")


def _step(node: Any, seg: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(seg, _MISSING)
    if isinstance(node, Sequence) and not isinstance(node, (str, bytes)):
        try:
            idx = int(seg)
        except ValueError:
            return _MISSING
        if -len(node) <= idx < len(node):
            return node[idx]
    return _MISSING


def _lookup(doc: Any, path: str) -> Any:
    if isinstance(doc, Mapping) and path in doc:
        return doc[path]
    node = doc
    for seg in _segments(path):
        node = _step(node, seg)
        if node is _MISSING:
            return _MISSING
    return node


def get_path(doc: Any, path: str, default: Any = None) -> Any:
    value = _lookup(doc, path)
    return default if value is _MISSING else value


def has_path(doc: Any, path: str) -> bool:
    return _lookup(doc, path) is not _MISSING


def set_path(doc: MutableMapping, path: str, value: Any, *, copy_intermediates: bool = False) -> None:
    """
    Write `value` at `path`, creating intermediate dicts as needed.

    A non-mapping value sitting on an intermediate segment is replaced by a dict.
    With copy_intermediates, existing nested mappings along the path are
    copied before the write so objects shared with a caller stay untouched.
    """
    if path in doc or "." not in str(path):
        doc[path] = value
        return
    segs = _segments(path)
    node: MutableMapping = doc
    for seg in segs[:-1]:
        nxt = node.get(seg)
        if not isinstance(nxt, Mapping):
            nxt = {}
            node[seg] = nxt
        elif copy_intermediates or not isinstance(nxt, MutableMapping):
            nxt = dict(nxt)
            node[seg] = nxt
        node = nxt
    node[segs[-1]] = value


def values_equal(a: Any, b: Any) -> bool:
    """
    Equality used for change detection: identical objects, or same type and ==.

    Containers compare structurally; 1, 1.0 and True are different values.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    try:
        return bool(a == b)
    except Exception:  # noqa: BLE001
        return False
