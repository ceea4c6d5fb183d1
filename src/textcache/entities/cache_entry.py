"""Cache entry domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for one memoized generation result.

    The pair (keyword, context) is the lookup key. It is not unique at the
    storage layer; the first stored record for a key is authoritative.

    Attributes:
        keyword: The primary input text
        context: Optional disambiguating text ("" means no context)
        result: The generated text
        id: Storage identity, set only on entries read back from storage
        created_at: Unix timestamp of insertion, set by storage
    """

    keyword: str
    context: str
    result: str
    id: str | None = None
    created_at: float | None = None
