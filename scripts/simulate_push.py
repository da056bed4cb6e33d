"""Feed a push payload through the background worker against an in-memory host.

Usage:
  python scripts/simulate_push.py '{"title": "Hi", "data": {"type": "message", "userType": "coach", "clientId": "c1"}}'
  python scripts/simulate_push.py --file payload.json --open-tab https://app.wellio.test/dashboard
  python scripts/simulate_push.py --empty --action dismiss
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

# Ensure repo root is on sys.path so local imports work when invoked directly.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from wellio_push.config import get_settings
from wellio_push.core.logging import initialize_logging
from wellio_push.notifications.memory_host import MemoryWindowClient, MemoryWorkerHost
from wellio_push.notifications.worker import BackgroundWorker, NotificationClickEvent, PushEvent, defaults_from_settings


def _parse_args(argv: list[str]) -> argparse.Namespace:
  parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
  source = parser.add_mutually_exclusive_group()
  source.add_argument("payload", nargs="?", help="Raw push body (JSON or plain text).")
  source.add_argument("--file", type=Path, help="Read the raw push body from a file.")
  source.add_argument("--empty", action="store_true", help="Simulate a push without a body.")
  parser.add_argument("--origin", default="https://app.wellio.test", help="Worker origin.")
  parser.add_argument("--open-tab", action="append", default=[], help="URL of an already open tab (repeatable).")
  parser.add_argument("--action", default="", help="Notification action to click ('open', 'dismiss' or empty for the body).")
  return parser.parse_args(argv)


async def _simulate(args: argparse.Namespace) -> int:
  settings = get_settings()
  initialize_logging(settings)

  if args.empty:
    raw = None
  elif args.file is not None:
    raw = args.file.read_bytes()
  else:
    raw = args.payload

  host = MemoryWorkerHost(args.origin)
  host.clients.extend(MemoryWindowClient(url=url) for url in args.open_tab)
  worker = BackgroundWorker(host, defaults=defaults_from_settings(settings))

  await worker.dispatch(PushEvent(data=raw))
  if not host.tray:
    print("No notification was shown.")
    return 1

  shown = host.tray[-1]
  print("Notification:")
  print(json.dumps({"title": shown.title, **asdict(shown.options)}, indent=2, default=str))

  await worker.dispatch(NotificationClickEvent(notification=shown, action=args.action))
  focused = [client for client in host.clients if client.messages]
  print("Click:")
  print(json.dumps({"closed": shown.closed, "opened": host.opened_urls, "messaged": [{"url": client.url, "messages": client.messages} for client in focused]}, indent=2))
  return 0


def main(argv: list[str] | None = None) -> int:
  args = _parse_args(sys.argv[1:] if argv is None else argv)
  return asyncio.run(_simulate(args))


if __name__ == "__main__":
  raise SystemExit(main())
