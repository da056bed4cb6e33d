"""Turn canonical notifications into OS notification options and display them."""

from __future__ import annotations

import logging

from wellio_push.notifications.contracts import ActionButton, CanonicalNotification, NotificationAction, NotificationOptions, NotificationType, WorkerHost

logger = logging.getLogger(__name__)

VIBRATION_PATTERN: tuple[int, ...] = (100, 50, 100)
DEFAULT_ACTIONS: tuple[ActionButton, ...] = (ActionButton(action=NotificationAction.OPEN.value, title="Open"), ActionButton(action=NotificationAction.DISMISS.value, title="Dismiss"))


def render_notification(notification: CanonicalNotification) -> NotificationOptions:
  """Build platform options for a canonical notification."""
  # Chat messages stay on screen until the user acts on them.
  require_interaction = notification.type is NotificationType.MESSAGE
  return NotificationOptions(
    body=notification.body,
    icon=notification.icon,
    badge=notification.badge,
    tag=notification.tag,
    data=dict(notification.data),
    vibrate=VIBRATION_PATTERN,
    require_interaction=require_interaction,
    actions=DEFAULT_ACTIONS,
  )


async def show_notification(host: WorkerHost, notification: CanonicalNotification) -> bool:
  """Display a notification through the host; failures are logged, never raised or retried."""
  try:
    options = render_notification(notification)
    await host.show_notification(notification.title, options)
  except Exception as exc:  # noqa: BLE001
    logger.error("Notification display failed tag=%s type=%s error=%s", notification.tag, notification.type.value, exc, exc_info=True)
    return False

  logger.debug("Notification shown tag=%s type=%s", notification.tag, notification.type.value)
  return True
