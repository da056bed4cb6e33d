"""
Role-scoped client for the push subscription HTTP API.

Endpoints (prefix `/api/{role}/push`):
- GET  /vapid-public-key -> {"publicKey": str}
- POST /subscribe        {"endpoint", "keys"} -> 2xx
- DELETE /subscription   best-effort, no body required
- GET  /status           -> {"enabled": bool} (coach only)
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from wellio_push import __version__
from wellio_push.notifications.contracts import NotificationError, UserRole
from wellio_push.utils.base64url import is_base64url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0  # seconds
USER_AGENT = f"Wellio-Push/{__version__}"


class PushApiError(NotificationError):
  """Base exception for push API failures."""

  def __init__(self, message: str, status_code: int | None = None) -> None:
    super().__init__(message)
    self.status_code = status_code


class VapidKeyError(PushApiError):
  """Raised when the VAPID public key cannot be fetched."""


class SubscriptionPersistError(PushApiError):
  """Raised when the server does not accept a subscription."""


class SubscriptionDeleteError(PushApiError):
  """Raised when the server-side subscription delete fails."""


class PushStatusError(PushApiError):
  """Raised when the server-side status cannot be read."""


class PushSubscriptionKeys(BaseModel):
  """Browser-provided key material for Web Push encryption."""

  p256dh: str = Field(min_length=1, max_length=512)
  auth: str = Field(min_length=1, max_length=256)
  model_config = ConfigDict(extra="ignore")

  @field_validator("p256dh", "auth")
  @classmethod
  def validate_base64url(cls, value: str) -> str:
    """Key material must be base64url so the server can decode it."""
    normalized = value.strip()
    if not is_base64url(normalized):
      raise PydanticCustomError("push_key_format", "push keys must be base64url encoded.")
    return normalized


class PushSubscribeRequest(BaseModel):
  """Body of POST /subscribe, built from a browser subscription's JSON form."""

  endpoint: str = Field(min_length=1, max_length=2048)
  keys: PushSubscriptionKeys
  model_config = ConfigDict(extra="ignore")

  @field_validator("endpoint")
  @classmethod
  def validate_endpoint(cls, value: str) -> str:
    """Push services only hand out https endpoints."""
    normalized = value.strip()
    if urllib.parse.urlparse(normalized).scheme.lower() != "https":
      raise PydanticCustomError("push_endpoint_https", "endpoint must use https.")
    return normalized


class VapidPublicKeyResponse(BaseModel):
  public_key: str = Field(alias="publicKey", min_length=1)
  model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PushStatusResponse(BaseModel):
  enabled: bool = False
  model_config = ConfigDict(extra="ignore")


def build_subscribe_request(subscription_json: dict[str, Any]) -> PushSubscribeRequest:
  """Validate a subscription's JSON form into a subscribe body."""
  try:
    return PushSubscribeRequest.model_validate(subscription_json)
  except ValidationError as exc:
    raise SubscriptionPersistError(f"Subscription is not valid for persistence: {exc.error_count()} error(s)") from exc


class PushApiClient:
  """
  HTTP client for one role's push endpoints.

  Attributes:
    role: Role whose endpoints this client calls
    base_path: Role-scoped path prefix, e.g. /api/coach/push
  """

  def __init__(self, base_url: str, role: UserRole, *, timeout: float = DEFAULT_TIMEOUT, client: httpx.AsyncClient | None = None) -> None:
    if not base_url:
      raise ValueError("base_url is required")

    self.role = role
    self.base_path = f"/api/{role.value}/push"
    self._owns_client = client is None
    # Session cookies live on the client, so one instance per page session.
    self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), headers={"User-Agent": USER_AGENT, "Accept": "application/json"}, timeout=timeout)

  async def aclose(self) -> None:
    """Close the underlying HTTP client if this instance created it."""
    if self._owns_client:
      await self._client.aclose()

  async def __aenter__(self) -> PushApiClient:
    return self

  async def __aexit__(self, *exc_info: object) -> None:
    await self.aclose()

  async def _request(self, method: str, path: str, error_cls: type[PushApiError], **kwargs: Any) -> httpx.Response:
    url = f"{self.base_path}{path}"
    try:
      response = await self._client.request(method, url, **kwargs)
    except httpx.RequestError as exc:
      raise error_cls(f"{method} {url} failed: {exc}") from exc

    if not response.is_success:
      raise error_cls(f"{method} {url} returned {response.status_code}", status_code=response.status_code)
    return response

  async def fetch_vapid_public_key(self) -> str:
    """Fetch the server's VAPID public key (base64url)."""
    response = await self._request("GET", "/vapid-public-key", VapidKeyError)
    try:
      return VapidPublicKeyResponse.model_validate(response.json()).public_key
    except (ValueError, ValidationError) as exc:
      raise VapidKeyError(f"Malformed VAPID key response: {exc}", status_code=response.status_code) from exc

  async def persist_subscription(self, request: PushSubscribeRequest) -> None:
    """Store the subscription server-side; any non-2xx raises SubscriptionPersistError."""
    await self._request("POST", "/subscribe", SubscriptionPersistError, json=request.model_dump(mode="json"))

  async def delete_subscription(self) -> None:
    """Delete this identity's server-side subscription."""
    await self._request("DELETE", "/subscription", SubscriptionDeleteError)

  async def fetch_status(self) -> bool:
    """Return whether the server holds an active subscription; non-2xx counts as disabled."""
    try:
      response = await self._request("GET", "/status", PushStatusError)
    except PushStatusError as exc:
      if exc.status_code is None:
        raise
      logger.info("Push status unavailable for role=%s status=%s", self.role.value, exc.status_code)
      return False

    try:
      return PushStatusResponse.model_validate(response.json()).enabled
    except (ValueError, ValidationError):
      logger.warning("Malformed push status response for role=%s", self.role.value)
      return False
