from __future__ import annotations

import itertools

import pytest
from wellio_push.notifications.contracts import NotificationType, UserRole
from wellio_push.notifications.deep_links import DeepLinkRegistry, is_relative_path, landing_path, resolve_deep_link


@pytest.mark.parametrize(
  ("data", "expected"),
  [
    ({"type": "message", "userType": "coach", "clientId": "c1"}, "/communication?client=c1"),
    ({"type": "message", "userType": "coach"}, "/communication"),
    ({"type": "message", "userType": "client"}, "/client/coach-chat"),
    ({"type": "message"}, "/client/coach-chat"),
    ({"type": "plan_assigned", "userType": "coach"}, "/dashboard"),
    ({"type": "plan_assigned", "userType": "client"}, "/client/my-plan"),
    ({"type": "goal_update", "userType": "coach", "clientId": "c9"}, "/clients/c9?tab=goals"),
    ({"type": "goal_update", "userType": "coach"}, "/client"),
    ({"type": "goal_update", "userType": "client", "clientId": "c9"}, "/client"),
    ({"type": "reminder", "userType": "coach"}, "/dashboard"),
    ({"type": "reminder"}, "/client"),
    ({"type": "test", "userType": "coach"}, "/dashboard"),
    ({"type": "default"}, "/client"),
    ({"type": "mystery", "userType": "coach"}, "/dashboard"),
  ],
)
def test_resolution_table(data, expected):
  assert resolve_deep_link(data) == expected


def test_producer_url_is_echoed_verbatim():
  data = {"type": "message", "userType": "coach", "clientId": "c1", "url": "/client/ai-tracker?from=push"}
  assert resolve_deep_link(data) == "/client/ai-tracker?from=push"


@pytest.mark.parametrize("url", ["https://evil.example/phish", "//evil.example/x", "", "javascript:alert(1)", 42])
def test_unsafe_or_empty_urls_are_ignored(url):
  assert resolve_deep_link({"type": "message", "userType": "coach", "url": url}) == "/communication"


def test_missing_data_resolves_to_client_landing():
  assert resolve_deep_link(None) == "/client"
  assert resolve_deep_link({}) == "/client"


def test_client_id_is_percent_encoded():
  assert resolve_deep_link({"type": "message", "userType": "coach", "clientId": "a/b?c"}) == "/communication?client=a%2Fb%3Fc"


def test_registering_a_type_is_additive():
  registry = DeepLinkRegistry({})
  registry.register(NotificationType.TEST, lambda ctx: "/settings/notifications")

  assert registry.resolve({"type": "test"}) == "/settings/notifications"
  assert registry.resolve({"type": "message", "userType": "coach"}) == "/dashboard"


def test_resolver_returning_external_url_falls_back_to_landing():
  registry = DeepLinkRegistry({NotificationType.TEST: lambda ctx: "https://elsewhere.example"})
  assert registry.resolve({"type": "test", "userType": "coach"}) == landing_path(UserRole.COACH)


def test_resolution_is_total():
  types = [member.value for member in NotificationType] + ["unknown", None]
  user_types = ["coach", "client", None, "admin"]
  client_ids = ["c1", None, ""]
  urls = [None, "/custom", "https://x.example"]

  for notification_type, user_type, client_id, url in itertools.product(types, user_types, client_ids, urls):
    data = {"type": notification_type, "userType": user_type, "clientId": client_id, "url": url}
    link = resolve_deep_link(data)
    assert link
    assert is_relative_path(link)
    if url == "/custom":
      assert link == "/custom"
