"""Refresh pipeline: fetch, mask, translate, restore and append.

A refresh for a subscription walks through these states::

    CHECK_STALE -> DONE (fresh)
                -> STAMP_AND_FETCH -> DONE (nothing fetched)
                                   -> TRANSLATE -> DONE (nothing translated)
                                                -> APPEND -> DONE

The staleness stamp is written before the fetch and is never rolled back, so
a failed round is not retried until the stale window elapses again.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import List, Optional, Set

from tweetlate.core.keys import tweets_key
from tweetlate.core.retry import with_retries
from tweetlate.core.result import Success
from tweetlate.core.sigils import mask, unmask
from tweetlate.core.store import CacheStore
from tweetlate.models.subscription import Subscription
from tweetlate.models.tweet import TranslatedTweet, TweetRecord
from tweetlate.refresh.gate import StalenessGate
from tweetlate.sources.base import FeedClient, TranslationClient
from tweetlate.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_FETCH_ATTEMPTS = 3
DEFAULT_TRANSLATE_ATTEMPTS = 3


class RefreshOutcome(str, Enum):
    FRESH = "fresh"
    CLAIM_LOST = "claim_lost"
    FETCH_FAILED = "fetch_failed"
    NO_NEW_POSTS = "no_new_posts"
    NO_TRANSLATIONS = "no_translations"
    APPENDED = "appended"


class RefreshPipeline:
    def __init__(
        self,
        store: CacheStore,
        gate: StalenessGate,
        feed: FeedClient,
        translator: TranslationClient,
        *,
        fetch_attempts: int = DEFAULT_FETCH_ATTEMPTS,
        translate_attempts: int = DEFAULT_TRANSLATE_ATTEMPTS,
    ) -> None:
        self.store = store
        self.gate = gate
        self.feed = feed
        self.translator = translator
        self.fetch_attempts = fetch_attempts
        self.translate_attempts = translate_attempts
        self._tasks: Set[asyncio.Task] = set()

    def trigger(self, subscription: Subscription) -> asyncio.Task:
        """Start a refresh in the background and return its task without waiting."""
        log.debug(f"Spawning refresh task for {subscription}")
        task = asyncio.get_running_loop().create_task(
            self.refresh(subscription), name=f"refresh:{subscription}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.opt(exception=exc).error(f"Refresh task {task.get_name()} failed: {exc}")

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait for every refresh started with :meth:`trigger` to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def refresh(self, subscription: Subscription) -> RefreshOutcome:
        log.debug(f"Refreshing {subscription}")

        decision = await self.gate.claim(subscription)
        if not decision.should_run:
            log.debug(f"Skipping refresh for {subscription}: {decision.reason}")
            return RefreshOutcome.CLAIM_LOST if decision.contended else RefreshOutcome.FRESH

        log.info(f"Tweets are stale for {subscription} ({decision.reason})")
        key = tweets_key(subscription)

        newest = await self.store.peek_front(key)
        since_id = newest.id if newest is not None else None

        fetched = await with_retries(
            self.fetch_attempts,
            lambda: self.feed.fetch_since(subscription, since_id),
            label=f"fetch {subscription}",
        )
        if not isinstance(fetched, Success):
            log.warning(f"Could not fetch tweets for {subscription}: {fetched.reason}")
            return RefreshOutcome.FETCH_FAILED

        tweets: List[TweetRecord] = list(fetched.value)
        if not tweets:
            log.debug(f"No new tweets for {subscription}")
            return RefreshOutcome.NO_NEW_POSTS

        translated: List[TranslatedTweet] = []
        for tweet in tweets:
            result = await self.translate_tweet(subscription, tweet)
            if result is not None:
                translated.append(result)

        if not translated:
            log.warning(f"Failed to translate any of {len(tweets)} tweets for {subscription}")
            return RefreshOutcome.NO_TRANSLATIONS

        await self.store.push_front(key, translated)
        log.info(f"Stored {len(translated)}/{len(tweets)} translated tweets for {subscription}")
        return RefreshOutcome.APPENDED

    async def translate_tweet(self, subscription: Subscription, tweet: TweetRecord) -> Optional[TranslatedTweet]:
        masked = mask(tweet.text)
        result = await with_retries(
            self.translate_attempts,
            lambda: self.translator.translate(subscription, masked.template),
            label=f"translate {tweet.id}",
        )
        if not isinstance(result, Success):
            log.debug(f"Dropping tweet {tweet.id} for {subscription}: {result.reason}")
            return None
        return TranslatedTweet(id=tweet.id, text=unmask(result.value, masked.tokens))


__all__ = ["RefreshPipeline", "RefreshOutcome", "DEFAULT_FETCH_ATTEMPTS", "DEFAULT_TRANSLATE_ATTEMPTS"]
