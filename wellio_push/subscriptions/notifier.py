"""User-facing feedback for subscription outcomes (the page's toast)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserMessage:
  """A short message shown to the user."""

  title: str
  description: str
  destructive: bool = False


class UserNotifier(Protocol):
  """Delivery contract for user-facing messages."""

  def notify(self, message: UserMessage) -> None:
    """Show a message to the user."""


class LoggingUserNotifier(UserNotifier):
  """Notifier used when no UI is attached; writes messages to the log."""

  def notify(self, message: UserMessage) -> None:
    level = logging.WARNING if message.destructive else logging.INFO
    logger.log(level, "%s: %s", message.title, message.description)


NOT_SUPPORTED = UserMessage(title="Not Supported", description="Push notifications are not supported on this device", destructive=True)
PERMISSION_DENIED = UserMessage(title="Permission Denied", description="Please enable notifications in your browser settings", destructive=True)
DISABLED = UserMessage(title="Notifications Disabled", description="You will no longer receive push notifications")
DISABLE_FAILED = UserMessage(title="Failed", description="Failed to disable push notifications", destructive=True)
