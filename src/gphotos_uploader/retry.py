"""Retry engine driven by outcomes that each attempt returns by value.

An operation performs one unit of work and classifies its own result as a
``RetryOutcome``:

* ``Success(value)`` ends the loop and ``value`` is returned.
* ``StopWithError(cause)`` ends the loop and ``cause`` is raised.
* ``RetryAfter(seconds, cause)`` asks for another attempt, after ``seconds``
  when positive or after the current exponential backoff otherwise.

When the attempt budget runs out, the cause of the last ``RetryAfter`` is
raised.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Union

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
)

from gphotos_uploader.exceptions import RetryExhaustedError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    """The attempt succeeded; ``value`` is handed back to the caller."""

    value: Any = None


@dataclass(frozen=True)
class StopWithError:
    """The attempt failed fatally; no further attempts are made."""

    cause: BaseException


@dataclass(frozen=True)
class RetryAfter:
    """The attempt failed but may be retried.

    ``seconds`` is a server-requested wait; ``0`` means use the backoff delay.
    """

    seconds: int = 0
    cause: BaseException | None = None


RetryOutcome = Union[Success, StopWithError, RetryAfter]
Operation = Callable[[], Awaitable[RetryOutcome]]
SleepFunc = Callable[[float], Awaitable[None]]


def parse_retry_after(headers: Mapping[str, str]) -> int:
    """Return the ``Retry-After`` header as whole seconds, or 0 if unusable."""
    value = headers.get("Retry-After")
    if value is None:
        return 0
    try:
        seconds = int(value.strip())
    except ValueError:
        return 0
    return max(seconds, 0)


def _should_retry(outcome: Any) -> bool:
    return isinstance(outcome, RetryAfter)


def _last_outcome(retry_state: RetryCallState) -> Any:
    return retry_state.outcome.result()


async def retry(
    max_attempts: int,
    initial_delay: float,
    operation: Operation,
    *,
    sleep: SleepFunc | None = None,
) -> Any:
    """Run ``operation`` until it succeeds, stops, or the budget is spent.

    Args:
        max_attempts: Maximum number of invocations of ``operation`` (>= 1)
        initial_delay: First backoff delay in seconds (>= 0), doubled on
            every retry
        operation: Coroutine function returning a ``RetryOutcome``
        sleep: Awaitable sleep used between attempts (defaults to
            ``asyncio.sleep``)

    Returns:
        The ``value`` carried by the ``Success`` outcome

    Raises:
        ValidationError: If the budget or delay is out of range
        RetryExhaustedError: If the last ``RetryAfter`` carried no cause
        BaseException: The cause of a ``StopWithError`` or of the last
            ``RetryAfter``
    """
    if max_attempts < 1:
        raise ValidationError(f"max_attempts must be at least 1, got {max_attempts}")
    if initial_delay < 0:
        raise ValidationError(f"initial_delay cannot be negative, got {initial_delay}")

    def wait(retry_state: RetryCallState) -> float:
        outcome = _last_outcome(retry_state)
        if outcome.seconds > 0:
            return float(outcome.seconds)
        # the counter keeps advancing across server-specified waits
        return initial_delay * 2 ** (retry_state.attempt_number - 1)

    def log_retry(retry_state: RetryCallState) -> None:
        outcome = _last_outcome(retry_state)
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"Attempt {retry_state.attempt_number}/{max_attempts} failed, "
            f"retrying in {delay:.1f}s: {outcome.cause}"
        )

    retrying = AsyncRetrying(
        retry=retry_if_result(_should_retry),
        stop=stop_after_attempt(max_attempts),
        wait=wait,
        before_sleep=log_retry,
        retry_error_callback=_last_outcome,
        sleep=sleep or asyncio.sleep,
    )
    outcome = await retrying(operation)

    if isinstance(outcome, Success):
        return outcome.value
    if isinstance(outcome, StopWithError):
        raise outcome.cause
    if isinstance(outcome, RetryAfter):
        if outcome.cause is None:
            raise RetryExhaustedError(f"Gave up after {max_attempts} attempt(s)")
        raise outcome.cause
    raise TypeError(f"Operation returned {outcome!r}, expected a RetryOutcome")
