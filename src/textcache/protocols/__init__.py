"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis -> PostgreSQL, hosted -> local model)
- Unit testing with in-memory doubles
- Clear separation of concerns

Usage:
    ```python
    from textcache.protocols import CacheStore, TextGenerator

    repo: CacheStore = RedisCacheRepository.create(settings)
    generator: TextGenerator = ChatCompletionGenerator.create(settings)
    ```
"""

from .cache_store import CacheStore
from .text_generator import TextGenerator

__all__ = [
    "CacheStore",
    "TextGenerator",
]
