"""Twitter user-timeline client."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from tweetlate.core.result import Failure, Result, Success, failure_for_status
from tweetlate.models.subscription import Subscription
from tweetlate.models.tweet import TweetRecord
from tweetlate.utils.logger import get_logger

log = get_logger(__name__)

TIMELINE_URL = "https://api.twitter.com/1.1/statuses/user_timeline.json"
DEFAULT_COUNT = 20


class TwitterFeedClient:
    """Fetches a user's own tweets (no retweets) with an app bearer token."""

    def __init__(
        self,
        bearer_token: str,
        *,
        timeline_url: str = TIMELINE_URL,
        count: int = DEFAULT_COUNT,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.timeline_url = timeline_url
        self.count = count
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.headers = {"Authorization": f"Bearer {bearer_token}"}

    def build_params(self, subscription: Subscription, since_id: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "screen_name": subscription.username,
            "include_rts": "false",
            "count": self.count,
            "tweet_mode": "extended",
        }
        if since_id:
            params["since_id"] = since_id
        return params

    async def fetch_since(self, subscription: Subscription, since_id: Optional[str] = None) -> Result[List[TweetRecord]]:
        params = self.build_params(subscription, since_id)
        try:
            response = await self.client.get(self.timeline_url, params=params, headers=self.headers)
        except httpx.RequestError as exc:
            log.warning(f"Network error fetching timeline for {subscription}: {exc}")
            return Failure(f"twitter request failed: {exc}", retryable=True)

        failure = failure_for_status(response.status_code, "twitter")
        if failure is not None:
            log.debug(f"Got {response.status_code} from twitter for {subscription}")
            return failure

        try:
            payload = response.json()
        except ValueError:
            return Failure("twitter returned a non-JSON body", retryable=True, status_code=response.status_code)
        if not isinstance(payload, list):
            return Failure("twitter returned an unexpected payload", retryable=False, status_code=response.status_code)

        log.debug(f"Got {len(payload)} tweets from twitter for {subscription}")
        return Success([TweetRecord.from_api(item) for item in payload])

    async def close(self) -> None:
        await self.client.aclose()


__all__ = ["TwitterFeedClient", "TIMELINE_URL", "DEFAULT_COUNT"]
