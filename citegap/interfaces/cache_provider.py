"""Cache interface consumed by the gap analysis warm-up."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheProvider(Protocol):
    """Key/value cache with per-entry TTL.

    Values are JSON-compatible structures; ``get`` returns None on a miss.
    """

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: int) -> None: ...
