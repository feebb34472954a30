"""Staleness gate: decides whether a refresh is due and stamps intent."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from tweetlate.core.keys import refresh_key
from tweetlate.core.store import CacheStore, parse_timestamp
from tweetlate.models.subscription import Subscription
from tweetlate.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_STALE_WINDOW = timedelta(minutes=5)
# Stand-in for "never refreshed".
NEVER_AGE = timedelta(days=365 * 1000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_stale(last: datetime, now: datetime, threshold: timedelta) -> bool:
    return now - last >= threshold


@dataclass(slots=True)
class GateDecision:
    should_run: bool
    reason: str
    last_refresh: Optional[datetime] = None
    contended: bool = False


class StalenessGate:
    """Advisory refresh lock backed by a per-subscription timestamp."""

    def __init__(
        self,
        store: CacheStore,
        threshold: timedelta = DEFAULT_STALE_WINDOW,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.threshold = threshold
        self.clock = clock

    async def last_refresh(self, subscription: Subscription, *, now: Optional[datetime] = None) -> datetime:
        stored = await self.store.get_timestamp(refresh_key(subscription))
        if stored is None:
            return (now or self.clock()) - NEVER_AGE
        return stored

    async def should_refresh(self, subscription: Subscription, now: Optional[datetime] = None) -> bool:
        now = now or self.clock()
        return is_stale(await self.last_refresh(subscription, now=now), now, self.threshold)

    async def evaluate(self, subscription: Subscription, now: Optional[datetime] = None) -> GateDecision:
        decision, _ = await self._evaluate(subscription, now or self.clock())
        return decision

    async def claim(self, subscription: Subscription, now: Optional[datetime] = None) -> GateDecision:
        """Evaluate and, when stale, stamp ``now`` before any work starts.

        The stamp is a conditional write against the value that was read, so
        two callers racing on the same stale timestamp cannot both win.
        """
        now = now or self.clock()
        decision, raw = await self._evaluate(subscription, now)
        if not decision.should_run:
            return decision

        stamped = await self.store.compare_and_set_timestamp(refresh_key(subscription), raw, now)
        if not stamped:
            log.debug(f"Refresh for {subscription} already claimed elsewhere")
            return GateDecision(False, "claimed by a concurrent refresh", decision.last_refresh, contended=True)
        return decision

    async def _evaluate(self, subscription: Subscription, now: datetime):
        raw = await self.store.get_raw_timestamp(refresh_key(subscription))
        if raw is None:
            return GateDecision(True, "never refreshed"), None

        last = parse_timestamp(raw)
        elapsed = now - last
        if is_stale(last, now, self.threshold):
            overdue = int((elapsed - self.threshold).total_seconds())
            return GateDecision(True, f"stale by {overdue}s", last), raw

        remaining = int((self.threshold - elapsed).total_seconds())
        return GateDecision(False, f"fresh (next refresh in {remaining}s)", last), raw


__all__ = ["StalenessGate", "GateDecision", "is_stale", "utc_now", "DEFAULT_STALE_WINDOW", "NEVER_AGE"]
