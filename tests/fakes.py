"""
In-memory doubles for the CacheStore and TextGenerator protocols.
"""

from textcache.entities import CacheEntryEntity
from textcache.errors import StorageError


class InMemoryCacheStore:
    """CacheStore double backed by a list, with call recording and fault injection."""

    def __init__(self) -> None:
        self.records: list[CacheEntryEntity] = []
        self.lookup_calls: list[tuple[str, str]] = []
        self.inserted: list[CacheEntryEntity] = []
        self.fail_lookup = False
        self.fail_insert = False
        self.closed = False
        self._next_id = 1

    async def lookup(self, keyword: str, context: str) -> CacheEntryEntity | None:
        self.lookup_calls.append((keyword, context))
        if self.fail_lookup:
            raise StorageError("connection refused")
        for record in self.records:
            if record.keyword == keyword and record.context == context:
                return record
        return None

    async def insert(self, entry: CacheEntryEntity) -> CacheEntryEntity:
        self.inserted.append(entry)
        if self.fail_insert:
            raise StorageError("disk full")
        stored = CacheEntryEntity(
            keyword=entry.keyword,
            context=entry.context,
            result=entry.result,
            id=str(self._next_id),
        )
        self._next_id += 1
        self.records.append(stored)
        return stored

    async def health_check(self) -> bool:
        return not self.fail_lookup

    async def close(self) -> None:
        self.closed = True


class StubGenerator:
    """TextGenerator double returning a fixed result or raising a fixed error."""

    def __init__(self, result: str = "generated", error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[str, tuple[str, ...]]] = []
        self.available = True
        self.closed = False

    @property
    def model_name(self) -> str:
        return "stub-model"

    async def generate(self, system_prompt: str, *texts: str) -> str:
        self.calls.append((system_prompt, texts))
        if self.error is not None:
            raise self.error
        return self.result

    async def is_available(self) -> bool:
        return self.available

    async def close(self) -> None:
        self.closed = True

