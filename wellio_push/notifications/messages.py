"""Typed messages exchanged between the background worker and open pages."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import msgspec

logger = logging.getLogger(__name__)

NOTIFICATION_CLICK = "NOTIFICATION_CLICK"
SKIP_WAITING = "SKIP_WAITING"


class NotificationClickMessage(msgspec.Struct, tag=NOTIFICATION_CLICK, tag_field="type", rename="camel"):
  """Worker -> page: a notification was activated; navigate client-side."""

  url: str
  notification_type: str
  data: dict[str, Any] = {}


class SkipWaitingMessage(msgspec.Struct, tag=SKIP_WAITING, tag_field="type"):
  """Page -> worker: activate a pending worker version immediately."""


def encode_message(message: msgspec.Struct) -> dict[str, Any]:
  """Convert a message struct into the plain structure posted across contexts."""
  return msgspec.to_builtins(message)


def decode_worker_control(raw: Any) -> SkipWaitingMessage | None:
  """Decode a page -> worker message, returning None for anything unrecognized."""
  try:
    return msgspec.convert(raw, type=SkipWaitingMessage)
  except msgspec.ValidationError:
    return None


def decode_page_message(raw: Any) -> NotificationClickMessage | None:
  """Decode a worker -> page message, returning None for anything unrecognized."""
  try:
    return msgspec.convert(raw, type=NotificationClickMessage)
  except msgspec.ValidationError:
    return None


def handle_worker_message(raw: Any, navigate: Callable[[str], None]) -> bool:
  """Page-side listener: navigate in place when the worker reports a notification click."""
  message = decode_page_message(raw)
  if message is None:
    logger.debug("Ignoring worker message: %r", raw)
    return False

  logger.info("Navigating to %s after %s notification click", message.url, message.notification_type)
  navigate(message.url)
  return True
