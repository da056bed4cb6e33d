"""Contracts shared by the background worker components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol


class NotificationType(StrEnum):
  """Notification kinds understood by the worker."""

  MESSAGE = "message"
  PLAN_ASSIGNED = "plan_assigned"
  TEST = "test"
  REMINDER = "reminder"
  GOAL_UPDATE = "goal_update"
  DEFAULT = "default"

  @classmethod
  def parse(cls, raw: object) -> NotificationType:
    """Resolve a producer type string, falling back to DEFAULT for anything unknown."""
    if isinstance(raw, str):
      try:
        return cls(raw)
      except ValueError:
        return cls.DEFAULT
    return cls.DEFAULT


class UserRole(StrEnum):
  """Roles that own a push subscription."""

  COACH = "coach"
  CLIENT = "client"

  @classmethod
  def parse(cls, raw: object) -> UserRole:
    """Only an explicit "coach" is a coach; everything else is treated as a client."""
    return cls.COACH if raw == cls.COACH.value else cls.CLIENT


class NotificationAction(StrEnum):
  """Action buttons attached to every rendered notification."""

  OPEN = "open"
  DISMISS = "dismiss"


@dataclass(frozen=True)
class NotificationDefaults:
  """Static presentation used when a push carries no (usable) payload."""

  app_name: str = "Wellio"
  tag_prefix: str = "wellio"
  body: str = "You have a new notification"
  icon: str = "/icon-192.png"
  badge: str = "/icon-72.png"
  role: UserRole = UserRole.CLIENT

  @property
  def tag(self) -> str:
    return f"{self.tag_prefix}-notification"


@dataclass(frozen=True)
class CanonicalNotification:
  """Normalized notification record the worker renders and routes."""

  title: str
  body: str
  icon: str
  badge: str
  tag: str
  data: dict[str, Any] = field(default_factory=dict)

  @property
  def type(self) -> NotificationType:
    return NotificationType.parse(self.data.get("type"))


@dataclass(frozen=True)
class ActionButton:
  """One action button on an OS notification."""

  action: str
  title: str


@dataclass(frozen=True)
class NotificationOptions:
  """Platform notification options produced by the renderer."""

  body: str
  icon: str
  badge: str
  tag: str
  data: dict[str, Any]
  vibrate: tuple[int, ...]
  require_interaction: bool
  actions: tuple[ActionButton, ...]


class NotificationError(Exception):
  """Base class for all push subsystem failures."""


class NotificationRenderError(NotificationError):
  """Raised by a host when it cannot display a notification."""


class WindowFocusError(NotificationError):
  """Raised by a host when a window client refuses focus."""


class DisplayedNotification(Protocol):
  """A notification currently shown in the OS tray."""

  @property
  def title(self) -> str: ...

  @property
  def tag(self) -> str: ...

  @property
  def data(self) -> dict[str, Any]: ...

  def close(self) -> None:
    """Remove the notification from the tray."""


class WindowClient(Protocol):
  """An open window/tab the worker can see."""

  @property
  def url(self) -> str: ...

  async def focus(self) -> None:
    """Bring the window to the foreground; raises when the platform refuses."""

  def post_message(self, message: dict[str, Any]) -> None:
    """Deliver a structured message to the page."""


class WorkerHost(Protocol):
  """Global scope of the background worker as provided by the host runtime."""

  @property
  def origin(self) -> str: ...

  @property
  def can_open_windows(self) -> bool: ...

  async def skip_waiting(self) -> None:
    """Activate this worker version without waiting for old tabs to close."""

  async def claim_clients(self) -> None:
    """Take control of already-open pages."""

  async def show_notification(self, title: str, options: NotificationOptions) -> None:
    """Display an OS-level notification."""

  async def match_clients(self, *, window_only: bool = True, include_uncontrolled: bool = True) -> list[WindowClient]:
    """Enumerate open clients of this origin."""

  async def open_window(self, url: str) -> WindowClient | None:
    """Open a new window at an absolute URL."""

