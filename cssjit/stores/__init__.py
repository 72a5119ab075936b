"""Persistent stores used across cssjit runs."""

from .result_cache import ResultCache

__all__ = ["ResultCache"]
