from __future__ import annotations

from wellio_push.notifications.messages import NotificationClickMessage, SkipWaitingMessage, decode_worker_control, encode_message, handle_worker_message


def test_click_message_wire_shape():
  message = encode_message(NotificationClickMessage(url="/client", notification_type="default", data={"type": "default"}))
  assert message == {"type": "NOTIFICATION_CLICK", "url": "/client", "notificationType": "default", "data": {"type": "default"}}


def test_skip_waiting_wire_shape():
  assert encode_message(SkipWaitingMessage()) == {"type": "SKIP_WAITING"}


def test_decode_worker_control_rejects_other_messages():
  assert decode_worker_control({"type": "SKIP_WAITING"}) == SkipWaitingMessage()
  assert decode_worker_control({"type": "NOTIFICATION_CLICK"}) is None
  assert decode_worker_control(None) is None


def test_page_bridge_navigates_on_click_messages():
  visited: list[str] = []
  message = {"type": "NOTIFICATION_CLICK", "url": "/client/my-plan", "notificationType": "plan_assigned", "data": {}}

  assert handle_worker_message(message, visited.append) is True
  assert handle_worker_message({"type": "SKIP_WAITING"}, visited.append) is False
  assert handle_worker_message("garbage", visited.append) is False
  assert visited == ["/client/my-plan"]
