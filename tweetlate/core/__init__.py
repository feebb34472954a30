"""Core building blocks exposed for external consumers."""

from .keys import KeyKind, gen_key, refresh_key, tweets_key
from .result import Failure, Result, Success
from .retry import with_retries
from .sigils import MaskedText, mask, unmask
from .store import CacheStore, MemoryCacheStore, RedisCacheStore

__all__ = [
    "KeyKind",
    "gen_key",
    "refresh_key",
    "tweets_key",
    "Failure",
    "Result",
    "Success",
    "with_retries",
    "MaskedText",
    "mask",
    "unmask",
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
]
