"""Normalize inbound Web Push message bodies into canonical notifications.

Producers send arbitrary JSON (or nothing at all). The worker must always show
something for a delivered push, so this module is total: a missing body yields
the static defaults and an unparseable body is shown as plain text.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import msgspec

from wellio_push.notifications.contracts import CanonicalNotification, NotificationDefaults, NotificationType
from wellio_push.notifications.deep_links import landing_path

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_DEFAULTS = NotificationDefaults()


def epoch_ms() -> int:
  """Current wall clock in epoch milliseconds."""
  return time.time_ns() // 1_000_000


def _as_text(raw: bytes | str) -> str:
  if isinstance(raw, str):
    return raw
  return raw.decode("utf-8", errors="replace")


def _first_str(*candidates: Any) -> str | None:
  """Return the first non-empty string, mirroring `a || b` in producer code."""
  for candidate in candidates:
    if isinstance(candidate, str) and candidate:
      return candidate
  return None


def default_notification(defaults: NotificationDefaults = DEFAULT_NOTIFICATION_DEFAULTS, *, body: str | None = None) -> CanonicalNotification:
  """Build the static notification shown for an empty or unreadable push."""
  return CanonicalNotification(
    title=defaults.app_name,
    body=body or defaults.body,
    icon=defaults.icon,
    badge=defaults.badge,
    tag=defaults.tag,
    data={"type": NotificationType.DEFAULT.value, "url": landing_path(defaults.role)},
  )


def normalize_push_payload(raw: bytes | str | None, *, defaults: NotificationDefaults = DEFAULT_NOTIFICATION_DEFAULTS, clock: Callable[[], int] = epoch_ms) -> CanonicalNotification:
  """Convert a raw push body into a CanonicalNotification; never raises."""
  if raw is None or len(raw) == 0:
    return default_notification(defaults)

  text = _as_text(raw)
  try:
    payload = msgspec.json.decode(text)
  except msgspec.DecodeError as exc:
    logger.info("Push payload is not JSON; showing it as plain text: %s", exc)
    return default_notification(defaults, body=text.strip())

  if not isinstance(payload, dict):
    # Scalars and arrays carry no fields we can map; show them verbatim.
    logger.info("Push payload JSON is a %s, not an object; showing it as plain text", type(payload).__name__)
    return default_notification(defaults, body=text.strip())

  return _from_object(payload, defaults=defaults, clock=clock)


def _from_object(payload: dict[str, Any], *, defaults: NotificationDefaults, clock: Callable[[], int]) -> CanonicalNotification:
  payload_data = payload.get("data")
  if not isinstance(payload_data, dict):
    payload_data = {}

  # Producers that do not nest the type under data put it at the top level.
  raw_type = payload_data.get("type")
  if raw_type is None:
    raw_type = payload.get("type")
  notification_type = NotificationType.parse(raw_type)

  data: dict[str, Any] = {"type": NotificationType.DEFAULT.value, **payload_data}
  data["type"] = notification_type.value

  tag = _first_str(payload.get("tag"))
  if tag is None:
    tag_type = raw_type if isinstance(raw_type, str) and raw_type else "notification"
    tag = f"{defaults.tag_prefix}-{tag_type}-{clock()}"

  return CanonicalNotification(
    title=_first_str(payload.get("title")) or defaults.app_name,
    body=_first_str(payload.get("body"), payload.get("message")) or defaults.body,
    icon=_first_str(payload.get("icon")) or defaults.icon,
    badge=_first_str(payload.get("badge")) or defaults.badge,
    tag=tag,
    data=data,
  )
