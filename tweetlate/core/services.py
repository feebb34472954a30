"""Wiring of the store, collaborators and pipeline from settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tweetlate.core.settings import Settings
from tweetlate.core.store import CacheStore, MemoryCacheStore, RedisCacheStore
from tweetlate.refresh.gate import StalenessGate
from tweetlate.refresh.pipeline import RefreshPipeline
from tweetlate.sources.google_translate import GoogleTranslateClient
from tweetlate.sources.twitter import TwitterFeedClient
from tweetlate.utils.logger import get_logger

log = get_logger(__name__)


@dataclass
class Services:
    store: CacheStore
    gate: StalenessGate
    pipeline: RefreshPipeline
    feed: Optional[TwitterFeedClient] = None
    translator: Optional[GoogleTranslateClient] = None

    async def close(self) -> None:
        await self.pipeline.wait_idle()
        if self.feed is not None:
            await self.feed.close()
        if self.translator is not None:
            await self.translator.close()
        await self.store.close()
        log.info("Services closed")


def build_store(settings: Settings) -> CacheStore:
    if settings.cache_backend == "memory":
        log.warning("Using in-memory cache store; translations are lost on restart")
        return MemoryCacheStore()
    return RedisCacheStore.from_url(settings.redis_host, settings.redis_port, settings.redis_db)


def build_services(settings: Settings) -> Services:
    settings.validate()

    store = build_store(settings)
    gate = StalenessGate(store, threshold=settings.stale_window)
    feed = TwitterFeedClient(
        settings.twitter_bearer_token,
        timeline_url=settings.twitter_timeline_url,
        count=settings.tweet_count,
        timeout=settings.http_timeout_seconds,
    )
    translator = GoogleTranslateClient(
        settings.google_api_key,
        translate_url=settings.google_translate_url,
        timeout=settings.http_timeout_seconds,
    )
    pipeline = RefreshPipeline(
        store,
        gate,
        feed,
        translator,
        fetch_attempts=settings.fetch_attempts,
        translate_attempts=settings.translate_attempts,
    )
    log.info(
        f"Services ready: backend={settings.cache_backend}, stale={settings.stale_minutes}m, "
        f"attempts={settings.fetch_attempts}/{settings.translate_attempts}"
    )
    return Services(store=store, gate=gate, pipeline=pipeline, feed=feed, translator=translator)


__all__ = ["Services", "build_services", "build_store"]
