"""String, list and cache helpers used when evaluating policy matchers."""

from __future__ import annotations

import re
import threading
from collections import OrderedDict
from collections.abc import Hashable, Iterable, Iterator, Mapping, Sequence
from typing import Any

__all__ = [
    "LRUCache",
    "SyncLRUCache",
    "array_2d_equals",
    "array_equals",
    "array_remove_duplicates",
    "array_to_string",
    "escape_assertion",
    "get_eval_value",
    "has_eval",
    "join_slice",
    "params_to_string",
    "remove_comments",
    "remove_duplicate_element",
    "replace_eval",
    "replace_eval_with_map",
    "set_2d_equals",
    "set_equals",
    "set_equals_int",
    "set_subtract",
]

_EVAL_RE = re.compile(r"\beval\((?P<rule>[^)]*)\)", re.ASCII)
_ESCAPE_ASSERTION_RE = re.compile(r"\b((r|p)[0-9]*)\.", re.ASCII)


def escape_assertion(s: str) -> str:
    """Replace the dot after ``r``/``p`` tokens with an underscore (``r.sub`` -> ``r_sub``)."""
    return _ESCAPE_ASSERTION_RE.sub(lambda m: m.group(1) + "_", s)


def remove_comments(s: str) -> str:
    """Strip a trailing ``#`` comment from a line."""
    pos = s.find("#")
    if pos == -1:
        return s
    return s[:pos].strip()


def array_equals(a: Sequence[str], b: Sequence[str]) -> bool:
    """Return True if both sequences hold the same items in the same order."""
    return list(a) == list(b)


def array_2d_equals(a: Sequence[Sequence[str]], b: Sequence[Sequence[str]]) -> bool:
    """Return True if both nested sequences are identical, row by row."""
    if len(a) != len(b):
        return False
    return all(array_equals(x, y) for x, y in zip(a, b))


def array_remove_duplicates(s: list[str]) -> None:
    """Remove repeated items from ``s`` in place, keeping first occurrences."""
    s[:] = dict.fromkeys(s)


def array_to_string(s: Iterable[str]) -> str:
    """Join items with ``", "``."""
    return ", ".join(s)


def params_to_string(*args: str) -> str:
    """Join the arguments with ``", "``."""
    return ", ".join(args)


def set_equals(a: Iterable[str], b: Iterable[str]) -> bool:
    """Return True if both collections hold the same items, ignoring order."""
    return sorted(a) == sorted(b)


def set_equals_int(a: Iterable[int], b: Iterable[int]) -> bool:
    """Return True if both integer collections hold the same items, ignoring order."""
    return sorted(a) == sorted(b)


def set_2d_equals(a: Sequence[Sequence[str]], b: Sequence[Sequence[str]]) -> bool:
    """Compare two collections of rows, ignoring the order of rows and of items in a row."""
    if len(a) != len(b):
        return False
    return set_equals(
        (", ".join(sorted(row)) for row in a),
        (", ".join(sorted(row)) for row in b),
    )


def join_slice(a: str, *args: str) -> list[str]:
    """Return a new list of ``a`` followed by ``args``."""
    return [a, *args]


def set_subtract(a: Iterable[str], b: Iterable[str]) -> list[str]:
    """Return the items of ``a`` that are not in ``b``, in order."""
    excluded = set(b)
    return [x for x in a if x not in excluded]


def has_eval(s: str) -> bool:
    """Return True if the matcher contains an ``eval(...)`` call."""
    return _EVAL_RE.search(s) is not None


def replace_eval(s: str, rule: str) -> str:
    """Replace every ``eval(...)`` call with ``(rule)``."""
    replacement = f"({rule})"
    return _EVAL_RE.sub(lambda _m: replacement, s)


def replace_eval_with_map(src: str, sets: Mapping[str, str] | None) -> str:
    """Replace ``eval(name)`` calls with ``sets[name]``; unknown names are left as they are."""
    lookup = sets or {}

    def _substitute(m: re.Match[str]) -> str:
        return lookup.get(m.group("rule"), m.group(0))

    return _EVAL_RE.sub(_substitute, src)


def get_eval_value(s: str) -> list[str]:
    """Return the arguments of every ``eval(...)`` call, in order."""
    return [m.group("rule") for m in _EVAL_RE.finditer(s)]


def remove_duplicate_element(s: Iterable[str]) -> list[str]:
    """Return a new list with repeated items removed, keeping first occurrences."""
    return list(dict.fromkeys(s))


class LRUCache:
    """A fixed-capacity mapping that evicts the least recently used entry."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._data: OrderedDict[Hashable, Any] = OrderedDict()

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the value for ``key`` and mark it as recently used, or ``default``."""
        if key not in self._data:
            return default
        self._data.move_to_end(key)
        return self._data[key]

    def put(self, key: Hashable, value: Any) -> None:
        """Store ``value`` under ``key``, evicting the oldest entry when full."""
        if key in self._data:
            self._data.move_to_end(key)
        elif self._data and len(self._data) >= self.capacity:
            self._data.popitem(last=False)
        self._data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._data))

    def values(self) -> list[Any]:
        """Return the stored values, least recently used first."""
        return list(self._data.values())


class SyncLRUCache(LRUCache):
    """An :class:`LRUCache` that is safe to share between threads."""

    def __init__(self, capacity: int) -> None:
        super().__init__(capacity)
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            return super().get(key, default)

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            super().put(key, value)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return super().__contains__(key)

    def __len__(self) -> int:
        with self._lock:
            return super().__len__()

    def values(self) -> list[Any]:
        with self._lock:
            return super().values()