# policymatch

Building blocks for evaluating access-control policies: the matching operators
that a policy matcher expression calls, helpers for rewriting matcher
expressions, and a small LRU cache. The package has no dependencies beyond the
standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Matching operators

`policymatch.builtin_operators` provides:

- `key_match(key1, key2)`: a `*` in `key2` matches any suffix. `"/foo/bar"` matches `"/foo/*"`.
- `key_get(key1, key2)`: returns the part of `key1` covered by the `*`, or `""`.
- `key_match2(key1, key2)` and `key_get2(key1, key2, path_var)`: RESTful patterns with `:name` segments, such as `"/:id/using/:resId"`; `/*` matches any remainder.
- `key_match3(key1, key2)` and `key_get3(key1, key2, path_var)`: the same with `{name}` segments. `key_get3` binds segments non-greedily, so patterns like `"/api/{g}_{gn}/..."` work.
- `key_match4(key1, key2)`: `{name}` segments, where every repeat of a name must bind the same value.
- `key_match5(key1, key2)`: compares a path with `key2`, ignoring any query string in `key1`.
- `regex_match(key1, key2)`: `key2` is a regular expression searched for anywhere in `key1`.
- `ip_match(ip1, ip2)`: `ip2` is an address or a CIDR network. Raises `ValueError` if either argument is not valid.
- `glob_match(key1, key2)`: shell-style glob in which `*` and `?` do not cross `/`; supports `[...]` classes and `\` escapes. Raises `ValueError` for a malformed pattern.

```python
from policymatch.builtin_operators import key_match2, key_get2, key_match4, ip_match

key_match2("/resource1", "/:resource")                          # True
key_get2("/myid/using/myresid", "/:id/using/:resId", "resId")   # "myresid"
key_match4("/parent/123/child/456", "/parent/{id}/child/{id}")  # False
ip_match("192.168.2.123", "192.168.2.0/24")                     # True
```

Each operator also has a `*_func(*args)` form (`key_match_func`,
`key_get2_func`, `ip_match_func`, `glob_match_func` and so on) for use from an
expression evaluator. It checks the number of arguments and that each is a
string, and raises `OperatorArgumentError` (a `TypeError`) otherwise:

```python
from policymatch.builtin_operators import key_match_func, OperatorArgumentError

key_match_func("/foo/bar", "/foo/*")   # True
try:
    key_match_func("/foo")
except OperatorArgumentError as err:
    print(err)  # keyMatch: Expected 2 arguments, but got 1
```

### The `g` function

`generate_g_function(rm)` builds the `g(name1, name2[, domain])` function that a
matcher uses for role checks. `rm` is any object with a
`has_link(name1, name2, *domain)` method; if it raises, the result is `False`.
With `rm=None`, `g` only compares the two names for equality. Results are
memoised per argument tuple.

```python
from policymatch.builtin_operators import generate_g_function

class Roles:
    def has_link(self, name1, name2, *domain):
        return (name1, name2) == ("alice", "admin")

g = generate_g_function(Roles())
g("alice", "admin")   # True
g("bob", "admin")     # False
```

## Expression and list helpers

`policymatch.util` provides:

- `escape_assertion(s)`: rewrites `r.sub` as `r_sub` and `p2.attr` as `p2_attr`.
- `remove_comments(s)`: strips a `#` comment and the whitespace before it.
- `has_eval(s)`, `replace_eval(s, rule)`, `get_eval_value(s)` and `replace_eval_with_map(src, sets)`: find and substitute `eval(...)` calls in matcher expressions.
- `array_equals`, `array_2d_equals`, `set_equals`, `set_equals_int`, `set_2d_equals`: order-sensitive and order-insensitive comparisons.
- `array_remove_duplicates` (in place), `remove_duplicate_element` (new list), `set_subtract`, `join_slice`, `array_to_string`, `params_to_string`.

```python
from policymatch.util import escape_assertion, get_eval_value, replace_eval_with_map

escape_assertion("g(r.sub, p.sub) == p.attr")               # "g(r_sub, p_sub) == p_attr"
get_eval_value("eval(a) && eval(b) && c")                   # ["a", "b"]
replace_eval_with_map("eval(rule1) && c", {"rule1": "a == b"})  # "a == b && c"
```

## Caching

`LRUCache(capacity)` keeps the most recently used entries and evicts the least
recently used one when full. It offers `get(key, default=None)`,
`put(key, value)`, `in`, `len()`, iteration over keys and `values()`.
`SyncLRUCache` is the same cache guarded by a lock, for use from several
threads.

```python
from policymatch.util import LRUCache

cache = LRUCache(2)
cache.put("one", 1)
cache.put("two", 2)
cache.get("one")     # 1
cache.put("three", 3)
"two" in cache       # False
```

## What this package does not do

It supplies the operators and helpers only. It has no enforcer, no model or
policy file parsing, no policy storage or adapters, no role manager and no
expression evaluator; `generate_g_function` expects a role manager to be passed
in, and the `*_func` wrappers expect a caller to register them with an
evaluator of its own.