from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from wellio_push.notifications.contracts import CanonicalNotification, NotificationRenderError
from wellio_push.notifications.memory_host import MemoryWorkerHost
from wellio_push.notifications.renderer import VIBRATION_PATTERN, render_notification, show_notification


def _notification(notification_type: str, tag: str = "wellio-x-1") -> CanonicalNotification:
  return CanonicalNotification(title="Wellio", body="body", icon="/icon-192.png", badge="/icon-72.png", tag=tag, data={"type": notification_type})


def test_message_notifications_require_interaction():
  options = render_notification(_notification("message"))
  assert options.require_interaction is True


@pytest.mark.parametrize("notification_type", ["plan_assigned", "test", "reminder", "goal_update", "default"])
def test_other_notifications_are_transient(notification_type):
  assert render_notification(_notification(notification_type)).require_interaction is False


def test_open_and_dismiss_actions_and_vibration_are_always_attached():
  options = render_notification(_notification("default"))

  assert [button.action for button in options.actions] == ["open", "dismiss"]
  assert options.vibrate == VIBRATION_PATTERN
  assert options.tag == "wellio-x-1"
  assert options.data == {"type": "default"}


@pytest.mark.anyio
async def test_show_notification_displays_through_host():
  host = MemoryWorkerHost("https://app.wellio.test")

  assert await show_notification(host, _notification("message")) is True
  assert host.tray[0].title == "Wellio"
  assert host.tray[0].options.require_interaction is True


@pytest.mark.anyio
async def test_show_notification_swallows_host_failures():
  host = AsyncMock()
  host.show_notification.side_effect = NotificationRenderError("actions unsupported")

  assert await show_notification(host, _notification("message")) is False
  host.show_notification.assert_awaited_once()


@pytest.mark.anyio
async def test_same_tag_replaces_existing_tray_entry():
  host = MemoryWorkerHost("https://app.wellio.test")
  await show_notification(host, _notification("reminder", tag="wellio-reminder-goal_weight"))
  await show_notification(host, _notification("reminder", tag="wellio-reminder-goal_weight"))

  assert len(host.tray) == 1


@pytest.mark.anyio
async def test_blocked_notifications_are_reported_not_raised():
  host = MemoryWorkerHost("https://app.wellio.test", notifications_allowed=False)

  assert await show_notification(host, _notification("default")) is False
  assert host.tray == []
