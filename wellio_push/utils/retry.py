"""Bounded retry with exponential backoff for idempotent async operations."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
  """Attempt cap and backoff curve for a retried operation."""

  max_attempts: int = 3
  base_delay_seconds: float = 1.0
  multiplier: float = 2.0
  max_delay_seconds: float | None = None
  jitter: bool = False

  def __post_init__(self) -> None:
    if self.max_attempts < 1:
      raise ValueError("max_attempts must be at least 1.")
    if self.base_delay_seconds < 0:
      raise ValueError("base_delay_seconds must not be negative.")

  def delay_for(self, attempt: int) -> float:
    """Return the wait after a failed 1-based attempt (1s, 2s, 4s ... by default)."""
    delay = self.base_delay_seconds * (self.multiplier ** (attempt - 1))
    if self.max_delay_seconds is not None:
      delay = min(delay, self.max_delay_seconds)
    if self.jitter:
      # Spread retries by +/-25% so many devices do not hit the API in lockstep.
      jitter_range = delay * 0.25
      delay += random.uniform(-jitter_range, jitter_range)
    return max(delay, 0.0)


class RetryExhaustedError(Exception):
  """Raised when every attempt of a retried operation failed."""

  def __init__(self, operation_name: str, attempts: int, last_error: BaseException) -> None:
    super().__init__(f"{operation_name} failed after {attempts} attempt(s): {last_error}")
    self.operation_name = operation_name
    self.attempts = attempts
    self.last_error = last_error


async def execute_with_retry(
  *,
  operation_name: str,
  func: Callable[[], Awaitable[T]],
  policy: RetryPolicy,
  is_retryable: Callable[[Exception], bool] | None = None,
  sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
  """
  Execute an async operation, retrying failures according to the policy.

  Args:
    operation_name: Human-readable name for logging (e.g., "coach_push_persist")
    func: Async callable to execute (must be idempotent)
    policy: Attempt cap and backoff curve
    is_retryable: Optional classifier; non-retryable errors are re-raised immediately
    sleep: Awaitable delay function, replaceable in tests

  Returns:
    Result from func

  Raises:
    RetryExhaustedError: when the attempt cap is reached
  """
  last_error: Exception | None = None

  for attempt in range(1, policy.max_attempts + 1):
    try:
      result = await func()
      if attempt > 1:
        logger.info("Operation succeeded after retry: operation=%s, attempt=%d/%d", operation_name, attempt, policy.max_attempts)
      return result

    except Exception as exc:
      last_error = exc
      logger.warning("Operation failed: operation=%s, attempt=%d/%d, error=%s", operation_name, attempt, policy.max_attempts, exc)

      # Non-retryable error - fail fast
      if is_retryable is not None and not is_retryable(exc):
        raise

      if attempt >= policy.max_attempts:
        break

      delay = policy.delay_for(attempt)
      logger.info("Retrying operation after backoff: operation=%s, attempt=%d/%d, backoff_s=%.2f", operation_name, attempt, policy.max_attempts, delay)
      await sleep(delay)

  logger.error("Operation failed after %d attempt(s): operation=%s - giving up", policy.max_attempts, operation_name)
  assert last_error is not None
  raise RetryExhaustedError(operation_name, policy.max_attempts, last_error) from last_error
