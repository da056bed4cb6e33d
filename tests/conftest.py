"""Shared fixtures: an in-memory page platform and a scripted push API."""

from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

import httpx  # noqa: E402
import pytest  # noqa: E402

from wellio_push.notifications.contracts import UserRole  # noqa: E402
from wellio_push.subscriptions.api_client import PushApiClient  # noqa: E402
from wellio_push.subscriptions.memory import MemoryPushEnvironment  # noqa: E402
from wellio_push.utils.base64url import bytes_to_url_base64  # noqa: E402

ORIGIN = "https://app.wellio.test"
VAPID_PUBLIC_KEY = bytes_to_url_base64(b"\x04" + bytes(range(64)))


# Force anyio to use asyncio
@pytest.fixture
def anyio_backend():
  return "asyncio"


class FakePushServer:
  """Scripted stand-in for the role-scoped push API."""

  def __init__(self) -> None:
    self.requests: list[httpx.Request] = []
    self.vapid_status = 200
    self.subscribe_statuses: list[int] = []
    self.delete_status = 204
    self.status_code = 200
    self.enabled = False

  def paths(self, method: str | None = None) -> list[str]:
    return [request.url.path for request in self.requests if method is None or request.method == method]

  def handler(self, request: httpx.Request) -> httpx.Response:
    self.requests.append(request)
    path = request.url.path

    if path.endswith("/vapid-public-key"):
      if self.vapid_status != 200:
        return httpx.Response(self.vapid_status, json={"message": "unavailable"})
      return httpx.Response(200, json={"publicKey": VAPID_PUBLIC_KEY})

    if path.endswith("/subscribe") and request.method == "POST":
      status = self.subscribe_statuses.pop(0) if self.subscribe_statuses else 204
      if 200 <= status < 300:
        self.enabled = True
      return httpx.Response(status)

    if path.endswith("/subscription") and request.method == "DELETE":
      if 200 <= self.delete_status < 300:
        self.enabled = False
      return httpx.Response(self.delete_status)

    if path.endswith("/status"):
      if self.status_code != 200:
        return httpx.Response(self.status_code)
      return httpx.Response(200, content=json.dumps({"enabled": self.enabled}), headers={"content-type": "application/json"})

    return httpx.Response(404)


@pytest.fixture
def push_server() -> FakePushServer:
  return FakePushServer()


@pytest.fixture
def http_client(push_server):
  return httpx.AsyncClient(transport=httpx.MockTransport(push_server.handler), base_url=ORIGIN)


@pytest.fixture
def coach_api(http_client) -> PushApiClient:
  return PushApiClient(ORIGIN, UserRole.COACH, client=http_client)


@pytest.fixture
def client_api(http_client) -> PushApiClient:
  return PushApiClient(ORIGIN, UserRole.CLIENT, client=http_client)


@pytest.fixture
def environment() -> MemoryPushEnvironment:
  return MemoryPushEnvironment.supported()


@pytest.fixture
def sleeps() -> list[float]:
  return []


@pytest.fixture
def fake_sleep(sleeps):
  async def _sleep(delay: float) -> None:
    sleeps.append(delay)

  return _sleep
