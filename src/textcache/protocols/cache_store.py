"""Cache storage protocol.

Defines the interface for any persistent store that memoizes generation
results keyed by (keyword, context). The store is an opaque associative
store: lookups return the first stored record for a key, inserts always
append a new record.
"""

from typing import Protocol, runtime_checkable

from textcache.entities import CacheEntryEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.
    """

    async def lookup(self, keyword: str, context: str) -> CacheEntryEntity | None:
        """Find the first stored entry for (keyword, context).

        Args:
            keyword: The primary input text
            context: Disambiguating text ("" for none)

        Returns:
            The stored entry, or None on a miss

        Raises:
            StorageError: On a genuine storage fault (a miss is not a fault)
        """
        ...

    async def insert(self, entry: CacheEntryEntity) -> CacheEntryEntity:
        """Store a new record for the entry.

        Any storage identity carried by ``entry`` is discarded so that an
        existing record is never overwritten.

        Args:
            entry: The entry to store

        Returns:
            The stored entry with its new identity

        Raises:
            StorageError: If the write fails
        """
        ...

    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...

    async def close(self) -> None:
        """Release connections held by the store."""
        ...
