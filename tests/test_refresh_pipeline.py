import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from tweetlate.core.keys import refresh_key, tweets_key
from tweetlate.core.result import Failure, Success
from tweetlate.core.store import format_timestamp
from tweetlate.models.tweet import TranslatedTweet
from tweetlate.refresh.gate import StalenessGate
from tweetlate.refresh.pipeline import RefreshOutcome, RefreshPipeline
from tweetlate.refresh.reader import get_cached_texts

from conftest import FakeFeed, FakeTranslator, make_tweets

STALE = timedelta(minutes=5)


def build(store, now, feed, translator, **kwargs):
    gate = StalenessGate(store, STALE, clock=lambda: now)
    return RefreshPipeline(store, gate, feed, translator, **kwargs)


def test_fresh_data_is_left_alone(store, subscription, now):
    asyncio.run(store.set_timestamp(refresh_key(subscription), now - timedelta(minutes=1)))
    before = dict(store.values)
    store.push_front = AsyncMock()
    feed = FakeFeed(Success(make_tweets("one")))
    translator = FakeTranslator("four")

    outcome = asyncio.run(build(store, now, feed, translator).refresh(subscription))

    assert outcome is RefreshOutcome.FRESH
    assert feed.calls == []
    assert translator.calls == []
    store.push_front.assert_not_awaited()
    assert store.values == before


def test_stale_data_is_translated_and_pushed_in_order(store, subscription, now):
    asyncio.run(store.set_timestamp(refresh_key(subscription), now - timedelta(minutes=10)))
    events = []
    original_cas = store.compare_and_set_timestamp
    original_push = store.push_front

    async def tracking_cas(key, expected, ts):
        events.append("stamp")
        return await original_cas(key, expected, ts)

    async def tracking_push(key, elements):
        events.append("push")
        await original_push(key, elements)

    class TrackingFeed(FakeFeed):
        async def fetch_since(self, subscription, since_id=None):
            events.append("fetch")
            return await super().fetch_since(subscription, since_id)

    store.compare_and_set_timestamp = tracking_cas
    store.push_front = tracking_push
    feed = TrackingFeed(Success(make_tweets("one", "two", "three")))

    outcome = asyncio.run(build(store, now, feed, FakeTranslator("four")).refresh(subscription))

    assert outcome is RefreshOutcome.APPENDED
    assert events == ["stamp", "fetch", "push"]
    assert store.values[refresh_key(subscription)] == format_timestamp(now)
    assert asyncio.run(get_cached_texts(store, subscription)) == ["four", "four", "four"]


def test_fetch_uses_newest_cached_id(store, subscription, now):
    asyncio.run(store.push_front(tweets_key(subscription), [TranslatedTweet(id="123", text="hola")]))
    feed = FakeFeed(Success(make_tweets("newer", start_id=124)))

    asyncio.run(build(store, now, feed, FakeTranslator("nuevo")).refresh(subscription))

    assert feed.calls == [(subscription, "123")]
    assert asyncio.run(get_cached_texts(store, subscription)) == ["nuevo", "hola"]


def test_empty_cache_fetches_without_lower_bound(store, subscription, now):
    feed = FakeFeed(Success([]))

    outcome = asyncio.run(build(store, now, feed, FakeTranslator("x")).refresh(subscription))

    assert outcome is RefreshOutcome.NO_NEW_POSTS
    assert feed.calls == [(subscription, None)]


def test_feed_exhausted_stamps_but_never_translates(store, subscription, now):
    feed = FakeFeed(Failure("twitter returned 503", status_code=503))
    translator = FakeTranslator("four")

    outcome = asyncio.run(build(store, now, feed, translator).refresh(subscription))

    assert outcome is RefreshOutcome.FETCH_FAILED
    assert len(feed.calls) == 3
    assert translator.calls == []
    assert store.lists == {}
    assert store.values[refresh_key(subscription)] == format_timestamp(now)


def test_feed_recovers_within_retry_budget(store, subscription, now):
    feed = FakeFeed(Failure("503"), Failure("503"), Success(make_tweets("one")))

    outcome = asyncio.run(build(store, now, feed, FakeTranslator("uno")).refresh(subscription))

    assert outcome is RefreshOutcome.APPENDED
    assert len(feed.calls) == 3


def test_all_translations_failing_pushes_nothing(store, subscription, now):
    feed = FakeFeed(Success(make_tweets("hi", "there", "you")))
    translator = FakeTranslator(None)
    store.push_front = AsyncMock()

    outcome = asyncio.run(build(store, now, feed, translator).refresh(subscription))

    assert outcome is RefreshOutcome.NO_TRANSLATIONS
    assert len(translator.calls) == 9
    assert len(feed.calls) == 1
    store.push_front.assert_not_awaited()


def test_partial_translation_keeps_survivors_in_order(store, subscription, now):
    feed = FakeFeed(Success(make_tweets("one", "two", "three")))
    translator = FakeTranslator(lambda text: None if text == "two" else text.upper())

    outcome = asyncio.run(build(store, now, feed, translator).refresh(subscription))

    assert outcome is RefreshOutcome.APPENDED
    assert asyncio.run(get_cached_texts(store, subscription)) == ["ONE", "THREE"]


def test_sigils_survive_translation(store, subscription, now):
    feed = FakeFeed(Success(make_tweets("@joz hello #there guys http://foobar.com how")))
    translator = FakeTranslator(lambda text: text.replace("hello", "hola").replace("guys", "chicos").replace("how", "como"))

    asyncio.run(build(store, now, feed, translator).refresh(subscription))

    assert translator.calls == ["XZ0 hello XZ1 guys XZ2 how"]
    assert asyncio.run(get_cached_texts(store, subscription)) == ["@joz hola #there chicos http://foobar.com como"]


def test_configured_attempts_are_respected(store, subscription, now):
    feed = FakeFeed(Failure("503"))

    asyncio.run(build(store, now, feed, FakeTranslator("x"), fetch_attempts=5).refresh(subscription))

    assert len(feed.calls) == 5


def test_trigger_returns_task_without_blocking(store, subscription, now):
    feed = FakeFeed(Success(make_tweets("one", "two", "three")))
    pipeline = build(store, now, feed, FakeTranslator("four"))

    async def scenario():
        task = pipeline.trigger(subscription)
        assert isinstance(task, asyncio.Task)
        assert not task.done()
        outcome = await task
        await pipeline.wait_idle()
        return outcome

    assert asyncio.run(scenario()) is RefreshOutcome.APPENDED
    assert pipeline.in_flight == 0


def test_concurrent_triggers_refresh_once(store, subscription, now):
    feed = FakeFeed(Success(make_tweets("one")))
    pipeline = build(store, now, feed, FakeTranslator("uno"))

    async def scenario():
        tasks = [pipeline.trigger(subscription) for _ in range(3)]
        return await asyncio.gather(*tasks)

    outcomes = asyncio.run(scenario())

    assert outcomes.count(RefreshOutcome.APPENDED) == 1
    assert len(feed.calls) == 1
    assert asyncio.run(get_cached_texts(store, subscription)) == ["uno"]


def test_store_failure_fails_the_task(store, subscription, now):
    from tweetlate.core.errors import PersistenceError

    store.peek_front = AsyncMock(side_effect=PersistenceError("redis down", key="k", operation="lindex"))
    pipeline = build(store, now, FakeFeed(Success([])), FakeTranslator("x"))

    async def scenario():
        task = pipeline.trigger(subscription)
        await pipeline.wait_idle()
        return task

    task = asyncio.run(scenario())
    assert isinstance(task.exception(), PersistenceError)
