"""Success/failure values returned across the collaborator boundary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

import httpx

T = TypeVar("T")

# Worth another attempt even though they are 4xx.
RETRYABLE_CLIENT_STATUSES = {
    httpx.codes.REQUEST_TIMEOUT,
    httpx.codes.TOO_MANY_REQUESTS,
}


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    reason: str
    retryable: bool = True
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None


Result = Union[Success[T], Failure]


def as_result(outcome: Any) -> Result:
    """Normalise a plain return value: ``None`` is a retryable failure."""
    if isinstance(outcome, (Success, Failure)):
        return outcome
    if outcome is None:
        return Failure("no result")
    return Success(outcome)


def failure_for_status(status_code: int, source: str) -> Optional[Failure]:
    """Classify an HTTP status. Returns None for 2xx responses."""
    if httpx.codes.is_success(status_code):
        return None
    if httpx.codes.is_server_error(status_code) or status_code in RETRYABLE_CLIENT_STATUSES:
        return Failure(f"{source} returned {status_code}", retryable=True, status_code=status_code)
    return Failure(f"{source} returned {status_code}", retryable=False, status_code=status_code)


__all__ = ["Success", "Failure", "Result", "as_result", "failure_for_status", "RETRYABLE_CLIENT_STATUSES"]
