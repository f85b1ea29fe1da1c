"""Built-in matching operators available to policy matcher expressions."""

from __future__ import annotations

import ipaddress
import re
from collections import deque
from collections.abc import Callable
from typing import Any, Protocol

__all__ = [
    "OperatorArgumentError",
    "generate_g_function",
    "glob_match",
    "glob_match_func",
    "ip_match",
    "ip_match_func",
    "key_get",
    "key_get2",
    "key_get2_func",
    "key_get3",
    "key_get3_func",
    "key_get_func",
    "key_match",
    "key_match2",
    "key_match2_func",
    "key_match3",
    "key_match3_func",
    "key_match4",
    "key_match4_func",
    "key_match5",
    "key_match5_func",
    "regex_match",
    "regex_match_func",
]

_COLON_VAR_RE = re.compile(r":[^/]+")
_BRACE_VAR_RE = re.compile(r"\{[^/]+\}")
_BRACE_VAR_LAZY_RE = re.compile(r"\{[^/]+?\}")
_BRACE_TOKEN_RE = re.compile(r"\{([^/]+)\}")

_END = r"\Z"


class OperatorArgumentError(TypeError):
    """Raised when an operator wrapper gets the wrong number or type of arguments."""


class RoleManager(Protocol):
    """The part of a role manager that the ``g`` function needs."""

    def has_link(self, name1: str, name2: str, *domain: str) -> bool: ...


def _string_args(name: str, expected: int, args: tuple[Any, ...]) -> tuple[str, ...]:
    if len(args) != expected:
        raise OperatorArgumentError(
            f"{name}: Expected {expected} arguments, but got {len(args)}"
        )
    if not all(isinstance(arg, str) for arg in args):
        raise OperatorArgumentError(f"{name}: Argument must be a string")
    return args


def _anchored_search(pattern: str, text: str) -> re.Match[str] | None:
    return re.search("^" + pattern + _END, text)


def key_match(key1: str, key2: str) -> bool:
    """Match ``key1`` against ``key2``, where a ``*`` in ``key2`` matches any suffix."""
    i = key2.find("*")
    if i == -1:
        return key1 == key2
    if len(key1) > i:
        return key1[:i] == key2[:i]
    return key1 == key2[:i]


def key_match_func(*args: Any) -> bool:
    """Matcher wrapper for :func:`key_match`."""
    key1, key2 = _string_args("keyMatch", 2, args)
    return key_match(key1, key2)


def key_get(key1: str, key2: str) -> str:
    """Return the part of ``key1`` matched by the ``*`` in ``key2``, or ``""``."""
    i = key2.find("*")
    if i == -1:
        return ""
    if len(key1) > i and key1[:i] == key2[:i]:
        return key1[i:]
    return ""


def key_get_func(*args: Any) -> str:
    """Matcher wrapper for :func:`key_get`."""
    key1, key2 = _string_args("keyGet", 2, args)
    return key_get(key1, key2)


def key_match2(key1: str, key2: str) -> bool:
    """Match a RESTful path against a pattern with ``*`` and ``:name`` parts."""
    key2 = key2.replace("/*", "/.*")
    key2 = _COLON_VAR_RE.sub(lambda _m: "[^/]+", key2)
    return regex_match(key1, "^" + key2 + _END)


def key_match2_func(*args: Any) -> bool:
    """Matcher wrapper for :func:`key_match2`."""
    key1, key2 = _string_args("keyMatch2", 2, args)
    return key_match2(key1, key2)


def key_get2(key1: str, key2: str, path_var: str) -> str:
    """Return the value in ``key1`` bound to ``:path_var`` in ``key2``, or ``""``."""
    key2 = key2.replace("/*", "/.*")
    names = [token[1:] for token in _COLON_VAR_RE.findall(key2)]
    pattern = _COLON_VAR_RE.sub(lambda _m: "([^/]+)", key2)
    match = _anchored_search(pattern, key1)
    if match is None:
        return ""
    for name, value in zip(names, match.groups()):
        if name == path_var:
            return value or ""
    return ""


def key_get2_func(*args: Any) -> str:
    """Matcher wrapper for :func:`key_get2`."""
    key1, key2, path_var = _string_args("keyGet2", 3, args)
    return key_get2(key1, key2, path_var)


def key_match3(key1: str, key2: str) -> bool:
    """Match a RESTful path against a pattern with ``*`` and ``{name}`` parts."""
    key2 = key2.replace("/*", "/.*")
    key2 = _BRACE_VAR_RE.sub(lambda _m: "[^/]+", key2)
    return regex_match(key1, "^" + key2 + _END)


def key_match3_func(*args: Any) -> bool:
    """Matcher wrapper for :func:`key_match3`."""
    key1, key2 = _string_args("keyMatch3", 2, args)
    return key_match3(key1, key2)


def key_get3(key1: str, key2: str, path_var: str) -> str:
    """Return the value in ``key1`` bound to ``{path_var}`` in ``key2``, or ``""``."""
    key2 = key2.replace("/*", "/.*")
    names = [token[1:-1] for token in _BRACE_VAR_LAZY_RE.findall(key2)]
    pattern = _BRACE_VAR_LAZY_RE.sub(lambda _m: "([^/]+?)", key2)
    match = _anchored_search(pattern, key1)
    if match is None:
        return ""
    for name, value in zip(names, match.groups()):
        if name == path_var:
            return value or ""
    return ""


def key_get3_func(*args: Any) -> str:
    """Matcher wrapper for :func:`key_get3`."""
    key1, key2, path_var = _string_args("keyGet3", 3, args)
    return key_get3(key1, key2, path_var)


def key_match4(key1: str, key2: str) -> bool:
    """Like :func:`key_match3`, but repeated ``{name}`` parts must bind equal values."""
    key2 = key2.replace("/*", "/.*")
    tokens: list[str] = []

    def _capture(m: re.Match[str]) -> str:
        tokens.append(m.group(1))
        return "([^/]+)"

    pattern = _BRACE_TOKEN_RE.sub(_capture, key2)
    match = _anchored_search(pattern, key1)
    if match is None:
        return False
    values = match.groups()
    if len(tokens) != len(values):
        raise ValueError(
            "KeyMatch4: number of tokens is not equal to number of values"
        )
    bound: dict[str, str | None] = {}
    for token, value in zip(tokens, values):
        if bound.setdefault(token, value) != value:
            return False
    return True


def key_match4_func(*args: Any) -> bool:
    """Matcher wrapper for :func:`key_match4`."""
    key1, key2 = _string_args("keyMatch4", 2, args)
    return key_match4(key1, key2)


def key_match5(key1: str, key2: str) -> bool:
    """Match ``key1`` against ``key2``, ignoring any query string in ``key1``."""
    path, _sep, _query = key1.partition("?")
    return path == key2


def key_match5_func(*args: Any) -> bool:
    """Matcher wrapper for :func:`key_match5`."""
    key1, key2 = _string_args("keyMatch5", 2, args)
    return key_match5(key1, key2)


def regex_match(key1: str, key2: str) -> bool:
    """Return True if the regular expression ``key2`` matches somewhere in ``key1``."""
    return re.search(key2, key1) is not None


def regex_match_func(*args: Any) -> bool:
    """Matcher wrapper for :func:`regex_match`."""
    key1, key2 = _string_args("regexMatch", 2, args)
    return regex_match(key1, key2)


def _parse_ip(text: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    address = ipaddress.ip_address(text)
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


def ip_match(ip1: str, ip2: str) -> bool:
    """Return True if address ``ip1`` equals address ``ip2`` or lies in CIDR ``ip2``."""
    try:
        address = _parse_ip(ip1)
    except ValueError:
        raise ValueError(
            "invalid argument: ip1 in IPMatch() function is not an IP address."
        ) from None

    if "/" in ip2:
        try:
            network = ipaddress.ip_network(ip2, strict=False)
        except ValueError:
            pass
        else:
            return address in network

    try:
        other = _parse_ip(ip2)
    except ValueError:
        raise ValueError(
            "invalid argument: ip2 in IPMatch() function is neither an IP address nor a CIDR."
        ) from None
    return address == other


def ip_match_func(*args: Any) -> bool:
    """Matcher wrapper for :func:`ip_match`."""
    ip1, ip2 = _string_args("ipMatch", 2, args)
    return ip_match(ip1, ip2)


_BAD_PATTERN = "syntax error in pattern"


def _take_class_char(chars: deque[str]) -> str:
    if not chars or chars[0] in "-]":
        raise ValueError(_BAD_PATTERN)
    char = chars.popleft()
    if char == "\\":
        if not chars:
            raise ValueError(_BAD_PATTERN)
        char = chars.popleft()
    if not chars:
        raise ValueError(_BAD_PATTERN)
    return char


def _class_regex(chars: deque[str]) -> str:
    negated = bool(chars) and chars[0] == "^"
    if negated:
        chars.popleft()
    ranges: list[tuple[str, str]] = []
    while True:
        if chars and chars[0] == "]" and ranges:
            chars.popleft()
            break
        low = _take_class_char(chars)
        high = low
        if chars[0] == "-":
            chars.popleft()
            high = _take_class_char(chars)
        ranges.append((low, high))

    pieces = [
        f"{re.escape(low)}-{re.escape(high)}" for low, high in ranges if low <= high
    ]
    if not pieces:
        return r"[\s\S]" if negated else "(?!)"
    return "[" + ("^" if negated else "") + "".join(pieces) + "]"


def _glob_regex(pattern: str) -> re.Pattern[str]:
    chars = deque(pattern)
    parts: list[str] = []
    while chars:
        char = chars.popleft()
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "\\":
            if not chars:
                raise ValueError(_BAD_PATTERN)
            parts.append(re.escape(chars.popleft()))
        elif char == "[":
            parts.append(_class_regex(chars))
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def glob_match(key1: str, key2: str) -> bool:
    """Match ``key1`` against the shell glob ``key2``; ``*`` and ``?`` do not cross ``/``.

    Raises ``ValueError`` if ``key2`` is malformed.
    """
    return _glob_regex(key2).fullmatch(key1) is not None


def glob_match_func(*args: Any) -> bool:
    """Matcher wrapper for :func:`glob_match`."""
    key1, key2 = _string_args("globMatch", 2, args)
    return glob_match(key1, key2)


def generate_g_function(rm: RoleManager | None) -> Callable[..., bool]:
    """Build the memoising ``g(name1, name2[, domain])`` function for a role manager.

    Without a role manager, ``g`` compares the two names for equality.
    """
    memo: dict[tuple[str, ...], bool] = {}

    def g(*args: str) -> bool:
        key = tuple(args)
        if key in memo:
            return memo[key]
        name1, name2 = args[0], args[1]
        if rm is None:
            result = name1 == name2
        else:
            extra = () if len(args) == 2 else (args[2],)
            try:
                result = bool(rm.has_link(name1, name2, *extra))
            except Exception:  # a failing lookup counts as no link
                result = False
        memo[key] = result
        return result

    return g