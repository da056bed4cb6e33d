from __future__ import annotations

import pytest
from wellio_push.utils.retry import RetryExhaustedError, RetryPolicy, execute_with_retry


def test_backoff_doubles_from_base_delay():
  policy = RetryPolicy(max_attempts=3, base_delay_seconds=1.0)
  assert [policy.delay_for(attempt) for attempt in (1, 2, 3)] == [1.0, 2.0, 4.0]


def test_backoff_is_capped():
  policy = RetryPolicy(base_delay_seconds=1.0, max_delay_seconds=1.5)
  assert policy.delay_for(3) == 1.5


def test_jitter_stays_within_a_quarter():
  policy = RetryPolicy(base_delay_seconds=2.0, jitter=True)
  for _ in range(50):
    assert 1.5 <= policy.delay_for(1) <= 2.5


def test_policy_rejects_zero_attempts():
  with pytest.raises(ValueError):
    RetryPolicy(max_attempts=0)


@pytest.mark.anyio
async def test_retries_until_success(fake_sleep, sleeps):
  calls = {"count": 0}

  async def _flaky():
    calls["count"] += 1
    if calls["count"] < 3:
      raise RuntimeError("boom")
    return "ok"

  result = await execute_with_retry(operation_name="flaky", func=_flaky, policy=RetryPolicy(max_attempts=3), sleep=fake_sleep)

  assert result == "ok"
  assert calls["count"] == 3
  assert sleeps == [1.0, 2.0]


@pytest.mark.anyio
async def test_exhaustion_carries_last_error(fake_sleep, sleeps):
  errors = [RuntimeError("first"), RuntimeError("second"), RuntimeError("third")]

  async def _always_fail():
    raise errors.pop(0)

  with pytest.raises(RetryExhaustedError) as exc:
    await execute_with_retry(operation_name="doomed", func=_always_fail, policy=RetryPolicy(max_attempts=3), sleep=fake_sleep)

  assert exc.value.attempts == 3
  assert str(exc.value.last_error) == "third"
  assert sleeps == [1.0, 2.0]


@pytest.mark.anyio
async def test_non_retryable_errors_fail_fast(fake_sleep, sleeps):
  async def _invalid():
    raise ValueError("bad input")

  with pytest.raises(ValueError):
    await execute_with_retry(operation_name="invalid", func=_invalid, policy=RetryPolicy(max_attempts=3), is_retryable=lambda exc: not isinstance(exc, ValueError), sleep=fake_sleep)

  assert sleeps == []
