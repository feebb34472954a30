"""Subscription identity shared by the refresh pipeline and the cache."""

from __future__ import annotations

import re
from dataclasses import dataclass

_USERNAME_RE = re.compile(r"[A-Za-z0-9_]{1,15}")
# Language codes never contain "_", which keeps derived cache keys unambiguous.
_LANG_RE = re.compile(r"[A-Za-z]{2,3}(?:-[A-Za-z0-9]+)*")


class SubscriptionValidationError(ValueError):
    """Raised when a username or language code is not usable."""


@dataclass(frozen=True, slots=True)
class Subscription:
    """A (username, source language, target language) triple."""

    username: str
    source_lang: str
    target_lang: str

    def __post_init__(self) -> None:
        if not isinstance(self.username, str) or not _USERNAME_RE.fullmatch(self.username):
            raise SubscriptionValidationError(
                f"Invalid username {self.username!r}. Expected 1-15 letters, digits or underscores."
            )
        for field_name in ("source_lang", "target_lang"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not _LANG_RE.fullmatch(value):
                raise SubscriptionValidationError(f"Invalid language code for {field_name}: {value!r}")

    @classmethod
    def parse(cls, raw: str) -> "Subscription":
        """Build a subscription from ``user:src:tgt`` notation."""
        parts = [part.strip() for part in raw.split(":")]
        if len(parts) != 3:
            raise SubscriptionValidationError(f"Expected 'user:src:tgt', got {raw!r}")
        return cls(*parts)

    def __str__(self) -> str:
        return f"{self.username}:{self.source_lang}->{self.target_lang}"


__all__ = ["Subscription", "SubscriptionValidationError"]
