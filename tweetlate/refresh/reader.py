"""Read side of the translated timeline cache."""

from __future__ import annotations

from typing import List

from tweetlate.core.keys import tweets_key
from tweetlate.core.store import CacheStore
from tweetlate.models.subscription import Subscription
from tweetlate.models.tweet import TranslatedTweet


async def get_cached_tweets(store: CacheStore, subscription: Subscription) -> List[TranslatedTweet]:
    """All cached translations for ``subscription``, newest first."""
    key = tweets_key(subscription)
    count = await store.length(key)
    if count == 0:
        return []
    return await store.range(key, 0, count - 1)


async def get_cached_texts(store: CacheStore, subscription: Subscription) -> List[str]:
    return [tweet.text for tweet in await get_cached_tweets(store, subscription)]


__all__ = ["get_cached_tweets", "get_cached_texts"]
