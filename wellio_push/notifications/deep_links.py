"""Map notification data to a same-origin application path."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from wellio_push.notifications.contracts import NotificationType, UserRole

LANDING_PATHS: dict[UserRole, str] = {UserRole.COACH: "/dashboard", UserRole.CLIENT: "/client"}


def landing_path(role: UserRole) -> str:
  """Default page for a role; the final fallback for every resolution."""
  return LANDING_PATHS[role]


def is_relative_path(url: object) -> bool:
  """True for rooted same-origin paths such as "/client"; rejects "//host" and absolute URLs."""
  return isinstance(url, str) and url.startswith("/") and not url.startswith("//") and "\\" not in url


@dataclass(frozen=True)
class LinkContext:
  """Fields of notification data the resolvers branch on."""

  role: UserRole
  client_id: str | None

  @classmethod
  def from_data(cls, data: Mapping[str, Any]) -> LinkContext:
    client_id = data.get("clientId")
    if client_id is not None and not isinstance(client_id, str):
      client_id = str(client_id)
    return cls(role=UserRole.parse(data.get("userType")), client_id=client_id or None)

  @property
  def is_coach(self) -> bool:
    return self.role is UserRole.COACH

  @property
  def quoted_client_id(self) -> str:
    return quote(self.client_id or "", safe="")


LinkResolver = Callable[[LinkContext], str]


def _message_link(ctx: LinkContext) -> str:
  if ctx.is_coach and ctx.client_id:
    return f"/communication?client={ctx.quoted_client_id}"
  return "/communication" if ctx.is_coach else "/client/coach-chat"


def _plan_assigned_link(ctx: LinkContext) -> str:
  return "/dashboard" if ctx.is_coach else "/client/my-plan"


def _goal_update_link(ctx: LinkContext) -> str:
  if ctx.is_coach and ctx.client_id:
    return f"/clients/{ctx.quoted_client_id}?tab=goals"
  return "/client"


def _landing_link(ctx: LinkContext) -> str:
  return landing_path(ctx.role)


class DeepLinkRegistry:
  """Registry mapping notification types to link resolvers."""

  def __init__(self, resolvers: Mapping[NotificationType, LinkResolver], *, fallback: LinkResolver = _landing_link) -> None:
    self._resolvers = dict(resolvers)
    self._fallback = fallback

  def register(self, notification_type: NotificationType, resolver: LinkResolver) -> None:
    """Add or replace the resolver for a notification type."""
    self._resolvers[notification_type] = resolver

  def resolve(self, data: Mapping[str, Any] | None) -> str:
    """Resolve notification data to a rooted relative path; never empty, never absolute."""
    if not data:
      return landing_path(UserRole.CLIENT)

    # A producer-supplied path always wins.
    url = data.get("url")
    if is_relative_path(url):
      return url

    ctx = LinkContext.from_data(data)
    resolver = self._resolvers.get(NotificationType.parse(data.get("type")), self._fallback)
    link = resolver(ctx)
    if not is_relative_path(link):
      return landing_path(ctx.role)
    return link


DEFAULT_REGISTRY = DeepLinkRegistry(
  {
    NotificationType.MESSAGE: _message_link,
    NotificationType.PLAN_ASSIGNED: _plan_assigned_link,
    NotificationType.GOAL_UPDATE: _goal_update_link,
    NotificationType.REMINDER: _landing_link,
    NotificationType.TEST: _landing_link,
  }
)


def resolve_deep_link(data: Mapping[str, Any] | None, *, registry: DeepLinkRegistry = DEFAULT_REGISTRY) -> str:
  """Resolve notification data with the default resolver table."""
  return registry.resolve(data)
