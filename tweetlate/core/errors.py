"""
tweetlate error hierarchy for clear classification in logs and API responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TweetlateError(Exception):
    """Base class for all tweetlate errors."""

    def __init__(
        self,
        message: str,
        *,
        subscription: Optional[str] = None,
        phase: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.subscription = subscription
        self.phase = phase
        self.details = details or {}

    def as_dict(self) -> Dict[str, Any]:
        """Serializable representation for logs/API."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "subscription": self.subscription,
            "phase": self.phase,
            "details": self.details,
        }


class SourceError(TweetlateError):
    """Raised when a feed or translation response cannot be interpreted."""

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.source = source
        self.status_code = status_code
        if source is not None:
            self.details["source"] = source
        if status_code is not None:
            self.details["status_code"] = status_code


class PersistenceError(TweetlateError):
    """Raised when the cache store cannot be read or written."""

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.key = key
        self.operation = operation
        if key is not None:
            self.details["key"] = key
        if operation is not None:
            self.details["operation"] = operation


class ConfigError(TweetlateError):
    """Raised on missing/invalid configuration values."""

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        section: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.key = key
        self.section = section
        if key is not None:
            self.details["key"] = key
        if section is not None:
            self.details["section"] = section


__all__ = ["TweetlateError", "SourceError", "PersistenceError", "ConfigError"]
