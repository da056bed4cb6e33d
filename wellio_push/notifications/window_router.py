"""Route notification activations to an open tab or a new window."""

from __future__ import annotations

import logging
from enum import StrEnum
from urllib.parse import urljoin, urlsplit

from wellio_push.notifications.contracts import DisplayedNotification, NotificationAction, NotificationType, WorkerHost
from wellio_push.notifications.deep_links import DEFAULT_REGISTRY, DeepLinkRegistry
from wellio_push.notifications.messages import NotificationClickMessage, encode_message

logger = logging.getLogger(__name__)


class ClickOutcome(StrEnum):
  """What the router did with a notification activation."""

  DISMISSED = "dismissed"
  FOCUSED = "focused"
  OPENED = "opened"
  UNHANDLED = "unhandled"


DEFAULT_PORTS = {"http": 80, "https": 443}


def origin_of(url: str) -> str:
  """Return scheme://host[:port] for an absolute URL, or an empty string.

  Default ports are dropped so "https://host:443" and "https://host" compare equal.
  """
  parts = urlsplit(url)
  scheme = parts.scheme.lower()
  try:
    host, port = parts.hostname, parts.port
  except ValueError:
    return ""
  if not scheme or not host:
    return ""

  if ":" in host:
    host = f"[{host}]"
  if port is None or DEFAULT_PORTS.get(scheme) == port:
    return f"{scheme}://{host}"
  return f"{scheme}://{host}:{port}"


async def route_notification_click(host: WorkerHost, notification: DisplayedNotification, action: str | None, *, registry: DeepLinkRegistry = DEFAULT_REGISTRY) -> ClickOutcome:
  """Close the notification, then focus a same-origin tab or open a new one at the deep link."""
  notification.close()

  # Dismiss is checked before any resolution work.
  if action == NotificationAction.DISMISS.value:
    logger.info("Notification dismissed via action tag=%s", notification.tag)
    return ClickOutcome.DISMISSED

  data = dict(notification.data or {})
  url = registry.resolve(data)
  notification_type = NotificationType.parse(data.get("type")).value
  logger.info("Deep-linking to %s", url)

  base_origin = origin_of(host.origin)
  message = encode_message(NotificationClickMessage(url=url, notification_type=notification_type, data=data))

  for client in await host.match_clients(window_only=True, include_uncontrolled=True):
    if origin_of(client.url) != base_origin:
      continue

    try:
      await client.focus()
      client.post_message(message)
    except Exception as exc:  # noqa: BLE001
      # The platform may refuse focus or the page may be gone; try the next candidate.
      logger.info("Could not hand click to client url=%s error=%s", client.url, exc)
      continue

    return ClickOutcome.FOCUSED

  if not host.can_open_windows:
    logger.warning("No focusable client and host cannot open windows; url=%s", url)
    return ClickOutcome.UNHANDLED

  target_url = urljoin(host.origin, url)
  await host.open_window(target_url)
  return ClickOutcome.OPENED
