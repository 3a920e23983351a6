"""Cache providers."""

from .memory_cache import MemoryCache

__all__ = ["MemoryCache"]
