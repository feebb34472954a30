"""Cache key derivation for subscriptions."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from tweetlate.models.subscription import Subscription


class KeyKind(str, Enum):
    REFRESH = "refresh"
    TWEETS = "tweets"


@lru_cache(maxsize=4096)
def gen_key(kind: KeyKind, subscription: Subscription) -> str:
    """``<kind>_<username>_<src>_<tgt>``, stable across processes."""
    return "_".join([KeyKind(kind).value, subscription.username, subscription.source_lang, subscription.target_lang])


def refresh_key(subscription: Subscription) -> str:
    return gen_key(KeyKind.REFRESH, subscription)


def tweets_key(subscription: Subscription) -> str:
    return gen_key(KeyKind.TWEETS, subscription)


__all__ = ["KeyKind", "gen_key", "refresh_key", "tweets_key"]
