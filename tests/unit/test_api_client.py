from __future__ import annotations

import json

import httpx
import pytest
from wellio_push.notifications.contracts import UserRole
from wellio_push.subscriptions.api_client import PushApiClient, PushStatusError, SubscriptionPersistError, VapidKeyError, build_subscribe_request
from wellio_push.utils.base64url import bytes_to_url_base64

ORIGIN = "https://app.wellio.test"
VAPID_PUBLIC_KEY = bytes_to_url_base64(b"\x04" + bytes(range(64)))

SUBSCRIPTION_JSON = {"endpoint": "https://fcm.googleapis.com/fcm/send/abc", "expirationTime": None, "keys": {"p256dh": "BEl6f5Y8X5Y_u7d8mV_AbpZfXfTLT3s1O3L4wM1x8QY2_5qWQ-jxJq7uKjv8mQ4I", "auth": "gq8Yh5xA9l2mQ6pR"}}


def _client(handler) -> PushApiClient:
  return PushApiClient(ORIGIN, UserRole.COACH, client=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=ORIGIN))


def test_role_scopes_the_base_path(coach_api, client_api):
  assert coach_api.base_path == "/api/coach/push"
  assert client_api.base_path == "/api/client/push"


def test_build_subscribe_request_keeps_endpoint_and_keys():
  request = build_subscribe_request(SUBSCRIPTION_JSON)
  assert request.model_dump(mode="json") == {"endpoint": SUBSCRIPTION_JSON["endpoint"], "keys": SUBSCRIPTION_JSON["keys"]}


@pytest.mark.parametrize(
  "payload",
  [
    {**SUBSCRIPTION_JSON, "endpoint": "http://insecure.example/push"},
    {**SUBSCRIPTION_JSON, "keys": {"p256dh": "has spaces", "auth": "gq8Yh5xA9l2mQ6pR"}},
    {"endpoint": SUBSCRIPTION_JSON["endpoint"]},
  ],
)
def test_build_subscribe_request_rejects_invalid_subscriptions(payload):
  with pytest.raises(SubscriptionPersistError):
    build_subscribe_request(payload)


@pytest.mark.anyio
async def test_fetch_vapid_public_key(coach_api, push_server):
  assert await coach_api.fetch_vapid_public_key() == VAPID_PUBLIC_KEY
  assert push_server.paths("GET") == ["/api/coach/push/vapid-public-key"]


@pytest.mark.anyio
async def test_fetch_vapid_public_key_raises_on_error_status(coach_api, push_server):
  push_server.vapid_status = 503

  with pytest.raises(VapidKeyError) as exc:
    await coach_api.fetch_vapid_public_key()

  assert exc.value.status_code == 503


@pytest.mark.anyio
async def test_fetch_vapid_public_key_rejects_malformed_body():
  api = _client(lambda request: httpx.Response(200, json={"key": "x"}))

  with pytest.raises(VapidKeyError):
    await api.fetch_vapid_public_key()


@pytest.mark.anyio
async def test_transport_errors_are_wrapped():
  def _offline(request):
    raise httpx.ConnectError("offline", request=request)

  api = _client(_offline)

  with pytest.raises(VapidKeyError) as exc:
    await api.fetch_vapid_public_key()

  assert exc.value.status_code is None


@pytest.mark.anyio
async def test_persist_subscription_posts_endpoint_and_keys(client_api, push_server):
  await client_api.persist_subscription(build_subscribe_request(SUBSCRIPTION_JSON))

  request = push_server.requests[-1]
  assert request.method == "POST"
  assert request.url.path == "/api/client/push/subscribe"
  assert json.loads(request.content) == {"endpoint": SUBSCRIPTION_JSON["endpoint"], "keys": SUBSCRIPTION_JSON["keys"]}


@pytest.mark.anyio
async def test_persist_subscription_raises_on_server_error(client_api, push_server):
  push_server.subscribe_statuses = [500]

  with pytest.raises(SubscriptionPersistError) as exc:
    await client_api.persist_subscription(build_subscribe_request(SUBSCRIPTION_JSON))

  assert exc.value.status_code == 500


@pytest.mark.anyio
async def test_delete_subscription(coach_api, push_server):
  await coach_api.delete_subscription()
  assert push_server.paths("DELETE") == ["/api/coach/push/subscription"]


@pytest.mark.anyio
async def test_fetch_status(coach_api, push_server):
  push_server.enabled = True
  assert await coach_api.fetch_status() is True

  push_server.status_code = 401
  assert await coach_api.fetch_status() is False


@pytest.mark.anyio
async def test_fetch_status_transport_error_propagates():
  def _offline(request):
    raise httpx.ReadTimeout("slow", request=request)

  with pytest.raises(PushStatusError):
    await _client(_offline).fetch_status()


@pytest.mark.anyio
async def test_owned_client_is_closed_on_exit():
  async with PushApiClient(ORIGIN, UserRole.CLIENT) as api:
    inner = api._client
  assert inner.is_closed
