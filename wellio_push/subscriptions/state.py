"""Subscription state snapshots and their derived presentation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from wellio_push.subscriptions.platform import PermissionValue


class SubscriptionPhase(StrEnum):
  """Lifecycle phase of a subscription manager."""

  UNKNOWN = "unknown"
  CHECKING = "checking"
  UNSUPPORTED = "unsupported"
  UNSUBSCRIBED = "unsubscribed"
  SUBSCRIBED = "subscribed"
  SUBSCRIBING = "subscribing"
  UNSUBSCRIBING = "unsubscribing"


@dataclass(frozen=True)
class PushSubscriptionState:
  """Best-effort view of the device's push registration; the platform and server remain the record."""

  is_supported: bool = False
  is_subscribed: bool = False
  permission: PermissionValue | None = None
  is_loading: bool = True


class PushBannerVariant(StrEnum):
  """Which notification prompt a page should show."""

  HIDDEN = "hidden"
  ENABLED = "enabled"
  BLOCKED = "blocked"
  PROMPT = "prompt"


def banner_variant(state: PushSubscriptionState) -> PushBannerVariant:
  """Derive the prompt variant: nothing when unsupported, status when subscribed, a hint when blocked."""
  if not state.is_supported:
    return PushBannerVariant.HIDDEN
  if state.is_subscribed:
    return PushBannerVariant.ENABLED
  if state.permission == "denied":
    return PushBannerVariant.BLOCKED
  return PushBannerVariant.PROMPT
