"""Page-side platform ports the subscription manager drives."""

from __future__ import annotations

from typing import Any, Literal, Protocol

PermissionValue = Literal["default", "granted", "denied"]


class PushSubscriptionHandle(Protocol):
  """A live push-manager subscription."""

  @property
  def endpoint(self) -> str: ...

  def to_json(self) -> dict[str, Any]:
    """Return `{"endpoint", "expirationTime", "keys": {"p256dh", "auth"}}`."""

  async def unsubscribe(self) -> bool:
    """Drop the subscription from the push service."""


class PushManagerPort(Protocol):
  """Per-registration push manager."""

  async def get_subscription(self) -> PushSubscriptionHandle | None:
    """Return the existing subscription, if any."""

  async def subscribe(self, *, user_visible_only: bool, application_server_key: bytes) -> PushSubscriptionHandle:
    """Create (or return the existing) subscription for the given server key."""


class WorkerHandle(Protocol):
  """A worker version known to a registration."""

  def post_message(self, message: dict[str, Any]) -> None:
    """Deliver a message to the worker."""


class WorkerRegistration(Protocol):
  """Result of registering the background worker."""

  @property
  def scope(self) -> str: ...

  @property
  def push_manager(self) -> PushManagerPort: ...

  @property
  def waiting(self) -> WorkerHandle | None: ...


class ServiceWorkerContainer(Protocol):
  """Entry point for worker registration."""

  async def register(self, script_url: str) -> WorkerRegistration:
    """Register the worker script; registering the same script again is a no-op."""

  async def ready(self) -> WorkerRegistration:
    """Resolve once an active worker controls this page."""


class NotificationPermissionPort(Protocol):
  """OS/browser notification permission."""

  @property
  def permission(self) -> PermissionValue: ...

  async def request_permission(self) -> PermissionValue:
    """Prompt the user; the platform owns the prompt's lifetime."""


class PushEnvironment(Protocol):
  """Capabilities of the page's runtime. Missing APIs are None/False."""

  @property
  def service_worker(self) -> ServiceWorkerContainer | None: ...

  @property
  def has_push_manager(self) -> bool: ...

  @property
  def notifications(self) -> NotificationPermissionPort | None: ...
