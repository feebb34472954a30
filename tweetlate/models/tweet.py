"""Post records moving through the refresh pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True, slots=True)
class TweetRecord:
    """A raw post as returned by the feed. Never persisted."""

    id: str
    text: str

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "TweetRecord":
        tweet_id = payload.get("id_str") or payload.get("id")
        text = payload.get("full_text") or payload.get("text") or ""
        return cls(id=str(tweet_id), text=str(text))


@dataclass(frozen=True, slots=True)
class TranslatedTweet:
    """A post after mask, translate and restore."""

    id: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "text": self.text}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_json(cls, raw: str) -> "TranslatedTweet":
        payload = json.loads(raw)
        return cls(id=str(payload["id"]), text=str(payload["text"]))


__all__ = ["TweetRecord", "TranslatedTweet"]
