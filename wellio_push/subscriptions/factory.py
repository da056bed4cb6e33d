"""Factory helpers for subscription managers."""

from __future__ import annotations

import httpx

from wellio_push.config import Settings, get_settings
from wellio_push.notifications.contracts import UserRole
from wellio_push.subscriptions.api_client import PushApiClient
from wellio_push.subscriptions.manager import SubscriptionManager
from wellio_push.subscriptions.notifier import UserNotifier
from wellio_push.subscriptions.platform import PushEnvironment
from wellio_push.subscriptions.profiles import profile_for


def build_subscription_manager(role: UserRole, environment: PushEnvironment, *, settings: Settings | None = None, notifier: UserNotifier | None = None, http_client: httpx.AsyncClient | None = None) -> SubscriptionManager:
  """Construct a role's subscription manager from environment configuration."""
  settings = settings or get_settings()
  api = PushApiClient(settings.api_base_url, role, timeout=settings.http_timeout_seconds, client=http_client)
  return SubscriptionManager(environment=environment, api=api, profile=profile_for(role, settings), notifier=notifier, worker_script_path=settings.worker_script_path)
