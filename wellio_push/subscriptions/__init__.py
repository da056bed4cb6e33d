"""Page-side push subscription management."""

from wellio_push.subscriptions.api_client import PushApiClient
from wellio_push.subscriptions.factory import build_subscription_manager
from wellio_push.subscriptions.manager import SubscriptionManager
from wellio_push.subscriptions.profiles import RoleProfile, client_profile, coach_profile
from wellio_push.subscriptions.state import PushBannerVariant, PushSubscriptionState, SubscriptionPhase, banner_variant

__all__ = [
  "PushApiClient",
  "PushBannerVariant",
  "PushSubscriptionState",
  "RoleProfile",
  "SubscriptionManager",
  "SubscriptionPhase",
  "banner_variant",
  "build_subscription_manager",
  "client_profile",
  "coach_profile",
]
