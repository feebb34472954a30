"""Collaborator interfaces consumed by the refresh pipeline."""

from __future__ import annotations

from typing import List, Optional, Protocol

from tweetlate.core.result import Result
from tweetlate.models.subscription import Subscription
from tweetlate.models.tweet import TweetRecord


class FeedClient(Protocol):
    async def fetch_since(self, subscription: Subscription, since_id: Optional[str] = None) -> Result[List[TweetRecord]]:
        """Posts newer than ``since_id``, newest first; the latest page when None."""
        ...


class TranslationClient(Protocol):
    async def translate(self, subscription: Subscription, text: str) -> Result[str]:
        ...


__all__ = ["FeedClient", "TranslationClient"]
