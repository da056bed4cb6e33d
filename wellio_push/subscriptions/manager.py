"""Page-side push subscription lifecycle.

One manager per role drives: support probe -> permission -> VAPID key fetch ->
push-manager subscribe -> server persistence (retried per role) -> state.
When persistence is exhausted the fresh local subscription is unsubscribed
again so the browser and the server never disagree about a live registration.

Lifecycle operations are serialized per instance. Concurrent `subscribe()`
calls join the attempt already in flight and share its result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any, TypeVar

from wellio_push.notifications.contracts import NotificationError
from wellio_push.notifications.messages import SkipWaitingMessage, encode_message
from wellio_push.subscriptions.api_client import PushApiClient, PushApiError, build_subscribe_request
from wellio_push.subscriptions.notifier import DISABLE_FAILED, DISABLED, NOT_SUPPORTED, PERMISSION_DENIED, LoggingUserNotifier, UserNotifier
from wellio_push.subscriptions.platform import PushEnvironment, PushManagerPort, PushSubscriptionHandle, WorkerRegistration
from wellio_push.subscriptions.profiles import RoleProfile
from wellio_push.subscriptions.state import PushSubscriptionState, SubscriptionPhase
from wellio_push.utils.base64url import url_base64_to_bytes
from wellio_push.utils.retry import execute_with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")
StateListener = Callable[[PushSubscriptionState], None]

DEFAULT_WORKER_SCRIPT = "/sw.js"


class SubscriptionManager:
  """Owns one role's push subscription state machine."""

  def __init__(
    self,
    *,
    environment: PushEnvironment,
    api: PushApiClient,
    profile: RoleProfile,
    notifier: UserNotifier | None = None,
    worker_script_path: str = DEFAULT_WORKER_SCRIPT,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
  ) -> None:
    self._env = environment
    self._api = api
    self._profile = profile
    self._notifier = notifier or LoggingUserNotifier()
    self._worker_script_path = worker_script_path
    self._sleep = sleep
    self._state = PushSubscriptionState()
    self._phase = SubscriptionPhase.UNKNOWN
    self._lock = asyncio.Lock()
    self._subscribe_task: asyncio.Task[bool] | None = None
    self._registration: WorkerRegistration | None = None
    self._listeners: list[StateListener] = []

  @property
  def profile(self) -> RoleProfile:
    return self._profile

  @property
  def state(self) -> PushSubscriptionState:
    return self._state

  @property
  def phase(self) -> SubscriptionPhase:
    return self._phase

  def add_listener(self, listener: StateListener) -> Callable[[], None]:
    """Call `listener` with every new state; returns a function that removes it."""
    self._listeners.append(listener)

    def _remove() -> None:
      if listener in self._listeners:
        self._listeners.remove(listener)

    return _remove

  def _transition(self, phase: SubscriptionPhase, **changes: Any) -> None:
    self._phase = phase
    self._state = replace(self._state, **changes)
    for listener in list(self._listeners):
      try:
        listener(self._state)
      except Exception as exc:  # noqa: BLE001
        logger.error("Subscription state listener failed: %s", exc, exc_info=True)

  async def _serialized(self, operation: Callable[[], Awaitable[T]]) -> T:
    async with self._lock:
      return await operation()

  # -------------------------------------------------------------------------
  # Probing
  # -------------------------------------------------------------------------

  def check_support(self) -> bool:
    """Capability probe: worker container, push manager and notifications all present."""
    return self._env.service_worker is not None and self._env.has_push_manager and self._env.notifications is not None

  async def ensure_registered(self) -> WorkerRegistration | None:
    """Register the background worker once; later calls return the same registration."""
    if self._registration is not None:
      return self._registration

    container = self._env.service_worker
    if container is None:
      return None

    self._registration = await container.register(self._worker_script_path)
    logger.info("Service worker registered scope=%s role=%s", self._registration.scope, self._profile.role.value)
    return self._registration

  async def start(self) -> PushSubscriptionState:
    """Mount: register the worker, then compute the current state."""
    if self.check_support():
      try:
        await self.ensure_registered()
      except Exception as exc:  # noqa: BLE001
        logger.error("Service worker registration failed role=%s error=%s", self._profile.role.value, exc)
    return await self.check_subscription()

  async def check_subscription(self) -> PushSubscriptionState:
    """Recompute the state snapshot from the push manager, permission and (per role) the server."""
    return await self._serialized(self._check_subscription)

  async def _check_subscription(self) -> PushSubscriptionState:
    if not self.check_support():
      self._transition(SubscriptionPhase.UNSUPPORTED, is_supported=False, is_subscribed=False, is_loading=False)
      return self._state

    self._transition(SubscriptionPhase.CHECKING)
    try:
      registration = await self._env.service_worker.ready()
      subscription = await registration.push_manager.get_subscription()
      permission = self._env.notifications.permission
    except Exception as exc:  # noqa: BLE001
      # Worker not available right now; report unsupported without pinning the session to it.
      logger.warning("Push subscription check failed role=%s error=%s", self._profile.role.value, exc)
      self._transition(SubscriptionPhase.UNKNOWN, is_supported=False, is_loading=False)
      return self._state

    is_subscribed = subscription is not None and await self._is_confirmed()
    phase = SubscriptionPhase.SUBSCRIBED if is_subscribed else SubscriptionPhase.UNSUBSCRIBED
    self._transition(phase, is_supported=True, is_subscribed=is_subscribed, permission=permission, is_loading=False)
    return self._state

  async def _is_confirmed(self) -> bool:
    """Whether the server agrees a registration is active; roles without a status endpoint trust the browser."""
    if not self._profile.tracks_server_status:
      return True

    try:
      return await self._api.fetch_status()
    except PushApiError as exc:
      logger.warning("Push status check failed role=%s error=%s", self._profile.role.value, exc)
      return False

  # -------------------------------------------------------------------------
  # Subscribe
  # -------------------------------------------------------------------------

  async def subscribe(self) -> bool:
    """Enable push for this role; returns False on any user-facing failure."""
    inflight = self._subscribe_task
    if inflight is not None and not inflight.done():
      logger.info("Subscribe already in flight role=%s; joining it", self._profile.role.value)
      return await asyncio.shield(inflight)

    task = asyncio.ensure_future(self._serialized(self._subscribe))
    self._subscribe_task = task
    task.add_done_callback(self._clear_subscribe_task)
    return await asyncio.shield(task)

  def _clear_subscribe_task(self, task: asyncio.Task[bool]) -> None:
    if self._subscribe_task is task:
      self._subscribe_task = None

  async def _subscribe(self) -> bool:
    role = self._profile.role.value
    if not self.check_support():
      self._notifier.notify(NOT_SUPPORTED)
      return False

    self._transition(SubscriptionPhase.SUBSCRIBING, is_loading=True)
    permission = self._state.permission
    registration: WorkerRegistration | None = None
    try:
      permission = await self._env.notifications.request_permission()
      if permission != "granted":
        # A normal outcome: the user said no (or dismissed the prompt).
        logger.info("Notification permission not granted role=%s permission=%s", role, permission)
        self._transition(SubscriptionPhase.UNSUBSCRIBED, permission=permission, is_subscribed=False, is_loading=False)
        self._notifier.notify(PERMISSION_DENIED)
        return False

      registration = await self._env.service_worker.ready()
      existing = await registration.push_manager.get_subscription()
      if existing is not None and await self._is_confirmed():
        logger.info("Push subscription already active role=%s", role)
        self._transition(SubscriptionPhase.SUBSCRIBED, is_supported=True, is_subscribed=True, permission=permission, is_loading=False)
        return True

      subscription = existing
      if subscription is None:
        public_key = await self._api.fetch_vapid_public_key()
        subscription = await registration.push_manager.subscribe(user_visible_only=True, application_server_key=url_base64_to_bytes(public_key))

      await self._persist(registration.push_manager, subscription)

    except Exception as exc:  # noqa: BLE001
      logger.error("Push subscription failed role=%s error=%s", role, exc, exc_info=True)
      # Report what the platform actually holds, not what the attempt intended.
      is_subscribed = await self._verified_subscription(registration)
      phase = SubscriptionPhase.SUBSCRIBED if is_subscribed else SubscriptionPhase.UNSUBSCRIBED
      self._transition(phase, is_subscribed=is_subscribed, permission=permission, is_loading=False)
      self._notifier.notify(self._profile.failed_message)
      return False

    self._transition(SubscriptionPhase.SUBSCRIBED, is_supported=True, is_subscribed=True, permission=permission, is_loading=False)
    self._notifier.notify(self._profile.enabled_message)
    return True

  async def _verified_subscription(self, registration: WorkerRegistration | None) -> bool:
    """Re-read the push manager after a failed attempt; same rule as check_subscription()."""
    if registration is None:
      return False
    try:
      subscription = await registration.push_manager.get_subscription()
    except Exception as exc:  # noqa: BLE001
      logger.warning("Could not re-read push subscription role=%s error=%s", self._profile.role.value, exc)
      return False
    return subscription is not None and await self._is_confirmed()

  async def _persist(self, push_manager: PushManagerPort, subscription: PushSubscriptionHandle) -> None:
    """Store the subscription server-side, rolling the local one back if that never succeeds."""
    role = self._profile.role.value
    try:
      request = build_subscribe_request(subscription.to_json())
      await execute_with_retry(operation_name=f"{role}_push_persist", func=lambda: self._api.persist_subscription(request), policy=self._profile.persist_policy, sleep=self._sleep)
    except Exception:
      await self._compensate(push_manager, subscription)
      raise

  async def _compensate(self, push_manager: PushManagerPort, subscription: PushSubscriptionHandle) -> None:
    """Unsubscribe locally and confirm the push manager no longer holds a subscription."""
    role = self._profile.role.value
    try:
      if not await subscription.unsubscribe():
        logger.error("Compensating unsubscribe was refused role=%s endpoint=%s", role, subscription.endpoint)
    except Exception as exc:  # noqa: BLE001
      logger.error("Compensating unsubscribe failed role=%s endpoint=%s error=%s", role, subscription.endpoint, exc, exc_info=True)

    try:
      remaining = await push_manager.get_subscription()
    except Exception as exc:  # noqa: BLE001
      logger.error("Could not verify rollback role=%s error=%s", role, exc)
      return

    if remaining is not None:
      logger.error("Local push subscription left in place after persistence failure role=%s endpoint=%s", role, remaining.endpoint)
      return
    logger.info("Rolled back local push subscription after persistence failure role=%s", role)

  # -------------------------------------------------------------------------
  # Unsubscribe
  # -------------------------------------------------------------------------

  async def unsubscribe(self) -> bool:
    """Disable push: local unsubscribe, then best-effort server delete."""
    return await self._serialized(self._unsubscribe)

  async def _unsubscribe(self) -> bool:
    role = self._profile.role.value
    previous_phase = self._phase
    self._transition(SubscriptionPhase.UNSUBSCRIBING, is_loading=True)

    try:
      container = self._env.service_worker
      if container is not None:
        registration = await container.ready()
        subscription = await registration.push_manager.get_subscription()
        if subscription is not None and not await subscription.unsubscribe():
          raise NotificationError("Push service refused to drop the subscription")
    except Exception as exc:  # noqa: BLE001
      logger.error("Push unsubscribe failed role=%s error=%s", role, exc, exc_info=True)
      self._transition(previous_phase, is_loading=False)
      self._notifier.notify(DISABLE_FAILED)
      return False

    # The local subscription is gone; the server reconciles stale records on its own.
    try:
      await self._api.delete_subscription()
    except PushApiError as exc:
      logger.warning("Server-side push subscription delete failed role=%s error=%s", role, exc)

    self._transition(SubscriptionPhase.UNSUBSCRIBED, is_subscribed=False, is_loading=False)
    self._notifier.notify(DISABLED)
    return True

  # -------------------------------------------------------------------------
  # Worker updates
  # -------------------------------------------------------------------------

  async def request_worker_update(self) -> bool:
    """Ask a waiting worker version to activate now; False when nothing is waiting."""
    registration = await self.ensure_registered()
    if registration is None or registration.waiting is None:
      return False

    registration.waiting.post_message(encode_message(SkipWaitingMessage()))
    return True
