"""Per-role subscription behaviour."""

from __future__ import annotations

from dataclasses import dataclass

from wellio_push.config import Settings
from wellio_push.notifications.contracts import UserRole
from wellio_push.subscriptions.notifier import UserMessage
from wellio_push.utils.retry import RetryPolicy


@dataclass(frozen=True)
class RoleProfile:
  """What differs between the coach and client subscription flows."""

  role: UserRole
  tracks_server_status: bool
  persist_policy: RetryPolicy
  enabled_message: UserMessage
  failed_message: UserMessage


def coach_profile(*, max_attempts: int = 3, base_delay_seconds: float = 1.0) -> RoleProfile:
  """Coaches get message alerts, so persistence is retried and status is cross-checked server-side."""
  return RoleProfile(
    role=UserRole.COACH,
    tracks_server_status=True,
    persist_policy=RetryPolicy(max_attempts=max_attempts, base_delay_seconds=base_delay_seconds),
    enabled_message=UserMessage(title="Notifications Enabled", description="You will now receive push notifications when clients message you"),
    failed_message=UserMessage(title="Subscription Failed", description="Failed to enable push notifications. Please try again.", destructive=True),
  )


def client_profile(*, max_attempts: int = 1, base_delay_seconds: float = 1.0) -> RoleProfile:
  return RoleProfile(
    role=UserRole.CLIENT,
    tracks_server_status=False,
    persist_policy=RetryPolicy(max_attempts=max_attempts, base_delay_seconds=base_delay_seconds),
    enabled_message=UserMessage(title="Notifications Enabled", description="You will now receive push notifications from your coach"),
    failed_message=UserMessage(title="Subscription Failed", description="Failed to enable push notifications", destructive=True),
  )


def profile_for(role: UserRole, settings: Settings) -> RoleProfile:
  """Build the profile for a role from configuration."""
  if role is UserRole.COACH:
    return coach_profile(max_attempts=settings.coach_persist_max_attempts, base_delay_seconds=settings.persist_base_delay_seconds)
  return client_profile(max_attempts=settings.client_persist_max_attempts, base_delay_seconds=settings.persist_base_delay_seconds)
