"""Background worker components: payload normalization, deep links, rendering and click routing."""

from wellio_push.notifications.contracts import CanonicalNotification, NotificationDefaults, NotificationOptions, NotificationType, UserRole
from wellio_push.notifications.deep_links import DeepLinkRegistry, resolve_deep_link
from wellio_push.notifications.payload import normalize_push_payload
from wellio_push.notifications.renderer import render_notification, show_notification
from wellio_push.notifications.window_router import ClickOutcome, route_notification_click
from wellio_push.notifications.worker import BackgroundWorker

__all__ = [
  "BackgroundWorker",
  "CanonicalNotification",
  "ClickOutcome",
  "DeepLinkRegistry",
  "NotificationDefaults",
  "NotificationOptions",
  "NotificationType",
  "UserRole",
  "normalize_push_payload",
  "render_notification",
  "resolve_deep_link",
  "route_notification_click",
  "show_notification",
]
