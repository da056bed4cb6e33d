"""In-memory page platform for headless runs and local simulation."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any

from wellio_push.notifications.contracts import NotificationError
from wellio_push.subscriptions.platform import PermissionValue
from wellio_push.utils.base64url import bytes_to_url_base64

logger = logging.getLogger(__name__)


class MemoryPushSubscription:
  """A subscription issued by MemoryPushManager."""

  def __init__(self, manager: MemoryPushManager, *, application_server_key: bytes) -> None:
    self._manager = manager
    self.application_server_key = application_server_key
    self._endpoint = f"https://push.wellio.test/send/{secrets.token_urlsafe(16)}"
    # Uncompressed P-256 point and a 16-byte auth secret, as browsers hand out.
    self._p256dh = bytes_to_url_base64(b"\x04" + secrets.token_bytes(64))
    self._auth = bytes_to_url_base64(secrets.token_bytes(16))
    self.active = True

  @property
  def endpoint(self) -> str:
    return self._endpoint

  def to_json(self) -> dict[str, Any]:
    return {"endpoint": self._endpoint, "expirationTime": None, "keys": {"p256dh": self._p256dh, "auth": self._auth}}

  async def unsubscribe(self) -> bool:
    return self._manager.drop(self)


class MemoryPushManager:
  """Holds at most one subscription, like a real per-origin push manager."""

  def __init__(self) -> None:
    self.subscription: MemoryPushSubscription | None = None
    self.subscribe_calls = 0

  async def get_subscription(self) -> MemoryPushSubscription | None:
    return self.subscription

  async def subscribe(self, *, user_visible_only: bool, application_server_key: bytes) -> MemoryPushSubscription:
    self.subscribe_calls += 1
    if not user_visible_only:
      raise NotificationError("Push subscriptions must be user visible")
    if not application_server_key:
      raise NotificationError("An application server key is required")

    if self.subscription is not None:
      if self.subscription.application_server_key != application_server_key:
        raise NotificationError("A subscription with a different application server key already exists")
      return self.subscription

    self.subscription = MemoryPushSubscription(self, application_server_key=application_server_key)
    return self.subscription

  def drop(self, subscription: MemoryPushSubscription) -> bool:
    if self.subscription is not subscription:
      return False
    subscription.active = False
    self.subscription = None
    return True


@dataclass
class MemoryWorker:
  """A worker version; records the messages pages post to it."""

  script_url: str
  messages: list[dict[str, Any]] = field(default_factory=list)

  def post_message(self, message: dict[str, Any]) -> None:
    self.messages.append(message)


@dataclass
class MemoryRegistration:
  scope: str
  active: MemoryWorker
  push_manager: MemoryPushManager = field(default_factory=MemoryPushManager)
  waiting: MemoryWorker | None = None


class MemoryServiceWorkerContainer:
  """Registers workers by script URL; re-registering the same script is a no-op."""

  def __init__(self, *, scope: str = "/") -> None:
    self._scope = scope
    self.registrations: dict[str, MemoryRegistration] = {}
    self.register_calls = 0
    self.available = True

  async def register(self, script_url: str) -> MemoryRegistration:
    self.register_calls += 1
    registration = self.registrations.get(script_url)
    if registration is None:
      registration = MemoryRegistration(scope=self._scope, active=MemoryWorker(script_url=script_url))
      self.registrations[script_url] = registration
    return registration

  async def ready(self) -> MemoryRegistration:
    if not self.available or not self.registrations:
      raise NotificationError("No active service worker registration")
    return next(iter(self.registrations.values()))


class MemoryNotificationPermission:
  """Permission that resolves a prompt with a preset answer."""

  def __init__(self, *, permission: PermissionValue = "default", answer: PermissionValue = "granted") -> None:
    self.permission: PermissionValue = permission
    self.answer: PermissionValue = answer
    self.prompts = 0

  async def request_permission(self) -> PermissionValue:
    # Browsers only prompt while the decision is still open.
    if self.permission == "default":
      self.prompts += 1
      self.permission = self.answer
    return self.permission


class MemoryPushEnvironment:
  """A page runtime with (or without) push support."""

  def __init__(self, *, service_worker: MemoryServiceWorkerContainer | None = None, has_push_manager: bool = True, notifications: MemoryNotificationPermission | None = None) -> None:
    self._service_worker = service_worker
    self._has_push_manager = has_push_manager
    self._notifications = notifications

  @classmethod
  def supported(cls, *, permission: PermissionValue = "default", answer: PermissionValue = "granted") -> MemoryPushEnvironment:
    return cls(service_worker=MemoryServiceWorkerContainer(), notifications=MemoryNotificationPermission(permission=permission, answer=answer))

  @classmethod
  def unsupported(cls) -> MemoryPushEnvironment:
    return cls(service_worker=None, has_push_manager=False, notifications=None)

  @property
  def service_worker(self) -> MemoryServiceWorkerContainer | None:
    return self._service_worker

  @property
  def has_push_manager(self) -> bool:
    return self._has_push_manager

  @property
  def notifications(self) -> MemoryNotificationPermission | None:
    return self._notifications
