import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Query, Request

from tweetlate.core.services import Services
from tweetlate.models.subscription import Subscription, SubscriptionValidationError
from tweetlate.refresh.reader import get_cached_texts

logger = logging.getLogger(__name__)
router = APIRouter()


def _services(request: Request) -> Services:
    return request.app.state.services


@router.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/tweets/{username}")
async def get_tweets(
    request: Request,
    username: str,
    src: str = Query(..., description="Source language code"),
    tgt: str = Query(..., description="Target language code"),
) -> Dict[str, Any]:
    """
    Serve cached translations and kick off a background refresh.
    The response reflects the cache as it is now; new tweets appear on a later read.
    """
    try:
        subscription = Subscription(username, src, tgt)
    except SubscriptionValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    services = _services(request)
    services.pipeline.trigger(subscription)

    tweets = await get_cached_texts(services.store, subscription)
    logger.debug("Served %d cached tweets for %s", len(tweets), subscription)
    return {
        "username": subscription.username,
        "src": subscription.source_lang,
        "tgt": subscription.target_lang,
        "tweets": tweets,
    }
