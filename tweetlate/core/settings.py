"""Runtime settings: YAML defaults overlaid with environment variables."""

from __future__ import annotations

import os
from datetime import timedelta
from functools import lru_cache
from typing import Iterable, List

from tweetlate.core.config import Config
from tweetlate.core.errors import ConfigError
from tweetlate.models.subscription import Subscription, SubscriptionValidationError
from tweetlate.sources.google_translate import TRANSLATE_URL
from tweetlate.sources.twitter import TIMELINE_URL

CACHE_BACKENDS = {"redis", "memory"}


def _env_or(var_name: str, *keys: str, default=None):
    raw = os.getenv(var_name)
    if raw is not None and raw.strip() != "":
        return raw
    return Config.get(*keys, default=default)


def _as_int(var_name: str, value, *, minimum: int = 0) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{var_name} must be an integer, got {value!r}", key=var_name, phase="config") from exc
    return max(parsed, minimum)


class Settings:
    """Container for runtime-tunable settings."""

    def __init__(self) -> None:
        self.stale_minutes: int = _as_int("STALE_MINUTES", _env_or("STALE_MINUTES", "refresh", "stale_minutes", default=5))
        self.fetch_attempts: int = _as_int(
            "FETCH_ATTEMPTS", _env_or("FETCH_ATTEMPTS", "refresh", "fetch_attempts", default=3)
        )
        self.translate_attempts: int = _as_int(
            "TRANSLATE_ATTEMPTS", _env_or("TRANSLATE_ATTEMPTS", "refresh", "translate_attempts", default=3)
        )

        self.cache_backend: str = str(_env_or("CACHE_BACKEND", "cache", "backend", default="redis")).lower()
        self.redis_host: str = str(_env_or("REDIS_HOST", "redis", "host", default="127.0.0.1"))
        self.redis_port: int = _as_int("REDIS_PORT", _env_or("REDIS_PORT", "redis", "port", default=6379), minimum=1)
        self.redis_db: int = _as_int("REDIS_DB", _env_or("REDIS_DB", "redis", "db", default=0))

        self.twitter_bearer_token: str | None = os.getenv("TWITTER_BEARER_TOKEN") or None
        self.twitter_timeline_url: str = str(Config.get("twitter", "timeline_url", default=TIMELINE_URL))
        self.tweet_count: int = _as_int("TWEET_COUNT", _env_or("TWEET_COUNT", "twitter", "tweet_count", default=20), minimum=1)

        self.google_api_key: str | None = os.getenv("GOOGLE_API_KEY") or None
        self.google_translate_url: str = str(Config.get("google", "translate_url", default=TRANSLATE_URL))

        self.http_timeout_seconds: float = max(
            float(_env_or("HTTP_TIMEOUT_SECONDS", "http", "timeout_seconds", default=15)), 1.0
        )

        self.watchlist_interval_minutes: int = _as_int(
            "WATCHLIST_INTERVAL_MINUTES",
            _env_or("WATCHLIST_INTERVAL_MINUTES", "watchlist", "interval_minutes", default=5),
            minimum=1,
        )
        self.watchlist: List[Subscription] = self._load_watchlist()

    @property
    def stale_window(self) -> timedelta:
        return timedelta(minutes=self.stale_minutes)

    @staticmethod
    def _env_list(var_name: str) -> Iterable[str]:
        raw = os.getenv(var_name)
        if not raw:
            return []
        # Accept comma or newline separated lists
        parts = [item.strip() for item in raw.replace("\n", ",").split(",")]
        return [item for item in parts if item]

    def _load_watchlist(self) -> List[Subscription]:
        entries = list(self._env_list("WATCHLIST")) or list(Config.get("watchlist", "subscriptions", default=[]))
        subscriptions: List[Subscription] = []
        for entry in entries:
            try:
                subscription = Subscription.parse(str(entry))
            except SubscriptionValidationError as exc:
                raise ConfigError(str(exc), key="WATCHLIST", section="watchlist", phase="config") from exc
            if subscription not in subscriptions:
                subscriptions.append(subscription)
        return subscriptions

    def validate(self) -> None:
        if self.cache_backend not in CACHE_BACKENDS:
            raise ConfigError(
                f"CACHE_BACKEND must be one of {sorted(CACHE_BACKENDS)}",
                key="CACHE_BACKEND",
                section="cache",
                phase="config",
            )
        if not self.twitter_bearer_token:
            raise ConfigError(
                "TWITTER_BEARER_TOKEN is required to fetch timelines.", key="TWITTER_BEARER_TOKEN", phase="config"
            )
        if not self.google_api_key:
            raise ConfigError("GOOGLE_API_KEY is required to translate tweets.", key="GOOGLE_API_KEY", phase="config")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings", "CACHE_BACKENDS"]
