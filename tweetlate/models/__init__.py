"""Model exports for tweetlate."""

from .subscription import Subscription, SubscriptionValidationError
from .tweet import TranslatedTweet, TweetRecord

__all__ = [
    "Subscription",
    "SubscriptionValidationError",
    "TranslatedTweet",
    "TweetRecord",
]
