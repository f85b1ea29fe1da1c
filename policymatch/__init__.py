"""Matching operators, matcher-expression helpers and LRU caches for access-control policy evaluation."""

__version__ = "0.1.0"
__all__ = ["builtin_operators", "util"]