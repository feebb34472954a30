import os
import sys
from datetime import datetime, timezone
from typing import List, Optional

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tweetlate.core.result import Failure, Success
from tweetlate.core.store import MemoryCacheStore
from tweetlate.models.subscription import Subscription
from tweetlate.models.tweet import TweetRecord

NOW = datetime(2014, 10, 15, 9, 30, 12, 250000, tzinfo=timezone.utc)


class FakeFeed:
    """Feed collaborator returning a scripted sequence of results."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls: List[tuple] = []

    async def fetch_since(self, subscription: Subscription, since_id: Optional[str] = None):
        self.calls.append((subscription, since_id))
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0] if self.results else Failure("feed down")


class FakeTranslator:
    """Translator answering with a fixed text, or a function of the input."""

    def __init__(self, reply=None):
        self.reply = reply
        self.calls: List[str] = []

    async def translate(self, subscription: Subscription, text: str):
        self.calls.append(text)
        reply = self.reply(text) if callable(self.reply) else self.reply
        if reply is None:
            return Failure("google returned 503", status_code=503)
        return Success(reply)


def make_tweets(*texts: str, start_id: int = 100) -> List[TweetRecord]:
    return [TweetRecord(id=str(start_id + offset), text=text) for offset, text in enumerate(texts)]


@pytest.fixture
def subscription() -> Subscription:
    return Subscription("nate_smith", "en", "es")


@pytest.fixture
def store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def now() -> datetime:
    return NOW
