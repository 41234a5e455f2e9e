"""Retry, backoff and deadline policy around the report collaborator call."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar

from adreport.domain.errors import (
    CollaboratorError,
    DeadlineExceededError,
    TransientUnavailableError,
    classify_collaborator_error,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReportCollaborator(Protocol):
    def generate(self, prompt: str, *, json_output: bool = True, timeout_s: float | None = None) -> str: ...


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    initial_delay_s: float = 2.0
    backoff_factor: float = 2.0
    deadline_s: float | None = 120.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay_s < 0:
            raise ValueError(f"initial_delay_s must be >= 0, got {self.initial_delay_s}")
        if self.deadline_s is not None and self.deadline_s <= 0:
            raise ValueError(f"deadline_s must be > 0, got {self.deadline_s}")

    def delay_for(self, attempt: int) -> float:
        return self.initial_delay_s * (self.backoff_factor ** (attempt - 1))


class ResilientInvoker:
    """Run a call with bounded exponential backoff on transient overload.

    Quota and other non-transient errors propagate immediately. Each attempt is
    handed the seconds left before the deadline so the in-flight call can be
    cut short by its own transport timeout.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._clock = clock
        self.attempts = 0

    def _remaining(self, started: float) -> float | None:
        if self.policy.deadline_s is None:
            return None
        return self.policy.deadline_s - (self._clock() - started)

    def call(self, func: Callable[[float | None], T]) -> T:
        started = self._clock()
        self.attempts = 0
        for attempt in range(1, self.policy.max_attempts + 1):
            remaining = self._remaining(started)
            if remaining is not None and remaining <= 0:
                raise DeadlineExceededError(self.policy.deadline_s or 0.0)
            self.attempts = attempt
            try:
                return func(remaining)
            except CollaboratorError as exc:
                error: CollaboratorError = exc
            except Exception as exc:
                error = classify_collaborator_error(exc)
                if error is not exc:
                    error.__cause__ = exc

            if not isinstance(error, TransientUnavailableError):
                raise error
            if attempt >= self.policy.max_attempts:
                raise TransientUnavailableError(
                    f"Collaborator still unavailable after {attempt} attempts: {error}",
                    attempts=attempt,
                ) from error

            delay = self.policy.delay_for(attempt)
            remaining = self._remaining(started)
            if remaining is not None and delay >= remaining:
                raise DeadlineExceededError(self.policy.deadline_s or 0.0) from error
            logger.warning(
                "Collaborator overloaded (attempt %d/%d); retrying in %.1fs: %s",
                attempt,
                self.policy.max_attempts,
                delay,
                error,
            )
            self._sleep(delay)

        raise TransientUnavailableError(attempts=self.attempts)


def invoke_collaborator(
    client: ReportCollaborator,
    prompt: str,
    invoker: ResilientInvoker,
    json_output: bool = True,
) -> str:
    return invoker.call(lambda timeout_s: client.generate(prompt, json_output=json_output, timeout_s=timeout_s))
