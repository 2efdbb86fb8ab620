"""
Retry helper - run a fallible block a fixed number of times.

Attempts run back to back with no delay. Instead of terminating the
process when every attempt fails, the helper returns a RetryOutcome and
leaves the decision to the caller.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from tenacity import RetryCallState, RetryError, Retrying, retry_if_exception, stop_after_attempt

from console_wrapper.core.exceptions import FetchFailedError, WrapperError, is_retriable_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryOutcome(Generic[T]):
    """Result of a retried block."""

    value: T | None = None
    failures: list[BaseException] = field(default_factory=list)
    attempts: int = 0
    succeeded: bool = False

    @property
    def last_error(self) -> BaseException | None:
        """The most recent failure, if any."""
        return self.failures[-1] if self.failures else None

    def unwrap(self, error_hint: str) -> T:
        """
        Return the value or raise with every collected failure attached.

        A permanent WrapperError (missing artifact, empty listing) is
        re-raised as is; anything else becomes a FetchFailedError.

        Args:
            error_hint: Message used when raising FetchFailedError

        Raises:
            WrapperError: If the block never succeeded
        """
        if self.succeeded:
            return self.value  # type: ignore[return-value]

        last = self.last_error
        if isinstance(last, WrapperError) and not is_retriable_error(last):
            raise last
        raise FetchFailedError(
            error_hint,
            failures=list(self.failures),
            attempts=self.attempts,
        ) from last


def try_n_times(
    attempts: int,
    block: Callable[[int], T],
    *,
    retry_on: Callable[[BaseException], bool] = is_retriable_error,
) -> RetryOutcome[T]:
    """
    Run ``block`` until it succeeds or ``attempts`` runs have failed.

    Args:
        attempts: Maximum number of runs, at least 1
        block: Callable receiving the zero-based attempt index
        retry_on: Predicate deciding whether a failure is worth another run

    Returns:
        RetryOutcome holding the value or every failure seen
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    failures: list[BaseException] = []

    def _record(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        if error is not None:
            logger.warning("Attempt %d/%d failed: %s", state.attempt_number, attempts, error)
            failures.append(error)

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        retry=retry_if_exception(retry_on),
        after=_record,
        reraise=False,
    )

    try:
        for attempt in retrying:
            with attempt:
                value = block(attempt.retry_state.attempt_number - 1)
    except RetryError:
        return RetryOutcome(failures=failures, attempts=len(failures))
    except WrapperError as e:
        # Permanent failure: not retried, reported like an exhausted budget
        failures.append(e)
        return RetryOutcome(failures=failures, attempts=len(failures))

    return RetryOutcome(value=value, failures=failures, attempts=len(failures) + 1, succeeded=True)
