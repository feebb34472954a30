import logging
from typing import List

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tweetlate.models.subscription import Subscription
from tweetlate.refresh.pipeline import RefreshPipeline

logger = logging.getLogger(__name__)


class WatchlistRefresher:
    """
    Keeps configured subscriptions warm without waiting for a reader to ask.
    """

    def __init__(self, pipeline: RefreshPipeline, subscriptions: List[Subscription], interval_minutes: int = 5):
        self.pipeline = pipeline
        self.subscriptions = list(subscriptions)
        self.interval_minutes = interval_minutes
        self.scheduler = AsyncIOScheduler()

    async def refresh_watchlist(self) -> int:
        """Trigger a refresh per subscription; the gate drops the fresh ones."""
        for subscription in self.subscriptions:
            self.pipeline.trigger(subscription)
        logger.info("Watchlist refresh triggered for %d subscriptions", len(self.subscriptions))
        return len(self.subscriptions)

    def start(self) -> None:
        if not self.subscriptions:
            logger.info("Watchlist empty; scheduler not started")
            return
        if self.scheduler.running:
            return
        self.scheduler.add_job(
            self.refresh_watchlist,
            IntervalTrigger(minutes=self.interval_minutes),
            id="refresh_watchlist",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Watchlist scheduler started (interval: %d mins)", self.interval_minutes)

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Watchlist scheduler stopped")
