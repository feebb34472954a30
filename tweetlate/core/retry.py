"""Bounded re-invocation of fallible collaborator calls."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from tweetlate.core.result import Failure, Result, Success, as_result
from tweetlate.utils.logger import get_logger

log = get_logger(__name__)

Operation = Callable[[], Union[Any, Awaitable[Any]]]


async def with_retries(max_attempts: int, operation: Operation, *, label: Optional[str] = None) -> Result:
    """Call ``operation`` until it succeeds, at most ``max_attempts`` times.

    ``operation`` may be a plain callable or return an awaitable. Its outcome is
    normalised with :func:`as_result`, so returning ``None`` counts as a
    retryable failure. There is no delay between attempts.

    Args:
        max_attempts: Upper bound on calls. Zero or less means no call at all.
        operation: Zero-argument callable to invoke.
        label: Name used in log lines.

    Returns:
        The first :class:`Success`, a non-retryable :class:`Failure` as soon as
        one is seen, or the last failure once the attempts run out.
    """
    label = label or getattr(operation, "__name__", "operation")
    if max_attempts <= 0:
        return Failure("no attempts permitted", retryable=False)

    result: Result = Failure("no result")
    for attempt in range(1, max_attempts + 1):
        outcome = operation()
        if inspect.isawaitable(outcome):
            outcome = await outcome
        result = as_result(outcome)

        if isinstance(result, Success):
            if attempt > 1:
                log.debug(f"{label} succeeded on attempt {attempt}/{max_attempts}")
            return result

        if not result.retryable:
            log.debug(f"{label} failed permanently on attempt {attempt}/{max_attempts}: {result.reason}")
            return result

        log.debug(f"{label} attempt {attempt}/{max_attempts} failed: {result.reason}")

    log.warning(f"{label} gave up after {max_attempts} attempts: {result.reason}")
    return result


__all__ = ["with_retries"]
