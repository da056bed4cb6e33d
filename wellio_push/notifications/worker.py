"""Background worker shell: lifecycle, push, click, close and message handling.

The host runtime owns the worker's lifetime. It delivers events at any time,
including when no page is open, and may stop the worker as soon as a handler
returns unless the handler extends the event with `wait_until`. `dispatch`
plays the host's part by awaiting those extensions.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from wellio_push.config import Settings
from wellio_push.notifications.contracts import DisplayedNotification, NotificationDefaults, UserRole, WorkerHost
from wellio_push.notifications.deep_links import DEFAULT_REGISTRY, DeepLinkRegistry
from wellio_push.notifications.messages import decode_worker_control
from wellio_push.notifications.payload import DEFAULT_NOTIFICATION_DEFAULTS, epoch_ms, normalize_push_payload
from wellio_push.notifications.renderer import show_notification
from wellio_push.notifications.window_router import route_notification_click

logger = logging.getLogger(__name__)


@dataclass
class ExtendableEvent:
  """Event whose lifetime handlers can extend until async work completes."""

  type: str = ""
  _extensions: list[Awaitable[Any]] = field(default_factory=list, init=False, repr=False)

  def wait_until(self, work: Awaitable[Any]) -> None:
    """Keep the worker alive until the given work completes."""
    self._extensions.append(work)

  async def settle(self) -> list[Any]:
    """Await every extension; failures are returned, not raised."""
    pending, self._extensions = self._extensions, []
    if not pending:
      return []
    return await asyncio.gather(*pending, return_exceptions=True)


@dataclass
class InstallEvent(ExtendableEvent):
  type: str = "install"


@dataclass
class ActivateEvent(ExtendableEvent):
  type: str = "activate"


@dataclass
class PushEvent(ExtendableEvent):
  data: bytes | str | None = None
  type: str = "push"


@dataclass
class NotificationClickEvent(ExtendableEvent):
  notification: DisplayedNotification | None = None
  action: str = ""
  type: str = "notificationclick"


@dataclass
class NotificationCloseEvent(ExtendableEvent):
  notification: DisplayedNotification | None = None
  type: str = "notificationclose"


@dataclass
class MessageEvent(ExtendableEvent):
  data: Any = None
  type: str = "message"


def defaults_from_settings(settings: Settings) -> NotificationDefaults:
  """Build notification defaults from configuration."""
  return NotificationDefaults(app_name=settings.app_name, tag_prefix=settings.tag_prefix, icon=settings.notification_icon, badge=settings.notification_badge, role=UserRole.parse(settings.default_role))


class BackgroundWorker:
  """Wires host events to the normalizer, renderer and window router."""

  def __init__(self, host: WorkerHost, *, defaults: NotificationDefaults = DEFAULT_NOTIFICATION_DEFAULTS, registry: DeepLinkRegistry = DEFAULT_REGISTRY, clock: Callable[[], int] = epoch_ms) -> None:
    self._host = host
    self._defaults = defaults
    self._registry = registry
    self._clock = clock
    self._handlers: dict[str, Callable[[Any], None]] = {
      "install": self.on_install,
      "activate": self.on_activate,
      "push": self.on_push,
      "notificationclick": self.on_notification_click,
      "notificationclose": self.on_notification_close,
      "message": self.on_message,
    }

  async def dispatch(self, event: ExtendableEvent) -> list[Any]:
    """Run the handler for an event and await its lifetime extensions."""
    handler = self._handlers.get(event.type)
    if handler is None:
      logger.debug("No handler for worker event type=%s", event.type)
      return []

    handler(event)
    results = await event.settle()
    for result in results:
      if isinstance(result, BaseException):
        logger.error("Worker event type=%s failed: %s", event.type, result, exc_info=result)
    return results

  def on_install(self, event: InstallEvent) -> None:
    logger.info("Service worker installed")
    # Activate the new version right away instead of waiting for every tab to close.
    event.wait_until(self._host.skip_waiting())

  def on_activate(self, event: ActivateEvent) -> None:
    logger.info("Service worker activated")
    event.wait_until(self._host.claim_clients())

  def on_push(self, event: PushEvent) -> None:
    logger.info("Push notification received")
    notification = normalize_push_payload(event.data, defaults=self._defaults, clock=self._clock)
    event.wait_until(show_notification(self._host, notification))

  def on_notification_click(self, event: NotificationClickEvent) -> None:
    logger.info("Notification clicked action=%s", event.action or "<body>")
    if event.notification is None:
      return
    event.wait_until(route_notification_click(self._host, event.notification, event.action, registry=self._registry))

  def on_notification_close(self, event: NotificationCloseEvent) -> None:
    tag = event.notification.tag if event.notification is not None else None
    logger.info("Notification closed tag=%s", tag)

  def on_message(self, event: MessageEvent) -> None:
    logger.info("Message received: %r", event.data)
    if decode_worker_control(event.data) is not None:
      event.wait_until(self._host.skip_waiting())
