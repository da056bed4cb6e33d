"""In-memory worker host for headless runs and local simulation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from wellio_push.notifications.contracts import NotificationOptions, NotificationRenderError, WindowFocusError

logger = logging.getLogger(__name__)


@dataclass
class TrayNotification:
  """A notification held by the in-memory tray."""

  title: str
  options: NotificationOptions
  closed: bool = False

  @property
  def tag(self) -> str:
    return self.options.tag

  @property
  def data(self) -> dict[str, Any]:
    return self.options.data

  def close(self) -> None:
    self.closed = True


@dataclass
class MemoryWindowClient:
  """An open tab; `focusable=False` makes focus fail like a platform refusal."""

  url: str
  focusable: bool = True
  focused: bool = False
  messages: list[dict[str, Any]] = field(default_factory=list)

  async def focus(self) -> None:
    if not self.focusable:
      raise WindowFocusError(f"Focus refused for {self.url}")
    self.focused = True

  def post_message(self, message: dict[str, Any]) -> None:
    self.messages.append(message)


class MemoryWorkerHost:
  """Worker global scope backed by plain lists."""

  def __init__(self, origin: str, *, can_open_windows: bool = True, notifications_allowed: bool = True) -> None:
    self._origin = origin.rstrip("/")
    self._can_open_windows = can_open_windows
    self.notifications_allowed = notifications_allowed
    self.clients: list[MemoryWindowClient] = []
    self.tray: list[TrayNotification] = []
    self.opened_urls: list[str] = []
    self.skip_waiting_calls = 0
    self.claimed = False

  @property
  def origin(self) -> str:
    return self._origin

  @property
  def can_open_windows(self) -> bool:
    return self._can_open_windows

  async def skip_waiting(self) -> None:
    self.skip_waiting_calls += 1

  async def claim_clients(self) -> None:
    self.claimed = True

  async def show_notification(self, title: str, options: NotificationOptions) -> None:
    if not self.notifications_allowed:
      raise NotificationRenderError("Notifications are blocked for this origin")
    # Same-tag notifications replace each other, as in an OS tray.
    self.tray = [existing for existing in self.tray if existing.tag != options.tag]
    self.tray.append(TrayNotification(title=title, options=options))

  async def match_clients(self, *, window_only: bool = True, include_uncontrolled: bool = True) -> list[MemoryWindowClient]:
    return list(self.clients)

  async def open_window(self, url: str) -> MemoryWindowClient | None:
    self.opened_urls.append(url)
    client = MemoryWindowClient(url=url, focused=True)
    self.clients.append(client)
    return client
