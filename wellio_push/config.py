"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from wellio_push.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

_VALID_ROLES = {"coach", "client"}


@dataclass(frozen=True)
class Settings:
  """Typed settings for the push worker and subscription managers."""

  environment: str
  debug: bool
  app_name: str
  tag_prefix: str
  api_base_url: str
  worker_script_path: str
  default_role: str
  notification_icon: str
  notification_badge: str
  http_timeout_seconds: float
  coach_persist_max_attempts: int
  client_persist_max_attempts: int
  persist_base_delay_seconds: float
  log_dir: str
  log_max_bytes: int
  log_backup_count: int


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  return value or None


def _number(name: str, default: str, cast: type[int] | type[float]) -> int | float:
  raw = os.getenv(name, default)
  try:
    return cast(raw)
  except ValueError as exc:
    raise ValueError(f"{name} must be a number, got {raw!r}.") from exc


def _positive_int(name: str, default: str) -> int:
  value = _number(name, default, int)
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


def _rooted_path(name: str, default: str) -> str:
  value = (os.getenv(name) or default).strip()
  if not value.startswith("/") or value.startswith("//"):
    raise ValueError(f"{name} must be a same-origin path starting with '/'.")
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("WELLIO_ENV", "development").lower()
  debug = _parse_bool(os.getenv("WELLIO_DEBUG"))

  app_name = _optional_str(os.getenv("WELLIO_APP_NAME")) or "Wellio"
  # Tags are grouped by a lowercase prefix, e.g. "wellio-message-1700000000000".
  tag_prefix = _optional_str(os.getenv("WELLIO_TAG_PREFIX")) or app_name.lower()

  api_base_url = (os.getenv("WELLIO_API_BASE_URL") or "http://localhost:5000").strip().rstrip("/")
  if not (api_base_url.startswith("http://") or api_base_url.startswith("https://")):
    raise ValueError("WELLIO_API_BASE_URL must start with 'http://' or 'https://'.")

  worker_script_path = _rooted_path("WELLIO_WORKER_SCRIPT_PATH", "/sw.js")

  default_role = (os.getenv("WELLIO_DEFAULT_ROLE") or "client").strip().lower()
  if default_role not in _VALID_ROLES:
    raise ValueError("WELLIO_DEFAULT_ROLE must be 'coach' or 'client'.")

  notification_icon = _rooted_path("WELLIO_NOTIFICATION_ICON", "/icon-192.png")
  notification_badge = _rooted_path("WELLIO_NOTIFICATION_BADGE", "/icon-72.png")

  http_timeout_seconds = _number("WELLIO_HTTP_TIMEOUT_SECONDS", "10", float)
  if http_timeout_seconds <= 0:
    raise ValueError("WELLIO_HTTP_TIMEOUT_SECONDS must be positive.")

  # Coach subscriptions back message alerts, so persistence is retried; client persistence is single-shot.
  coach_persist_max_attempts = _positive_int("WELLIO_COACH_PERSIST_MAX_ATTEMPTS", "3")
  client_persist_max_attempts = _positive_int("WELLIO_CLIENT_PERSIST_MAX_ATTEMPTS", "1")

  persist_base_delay_seconds = _number("WELLIO_PERSIST_BASE_DELAY_SECONDS", "1.0", float)
  if persist_base_delay_seconds < 0:
    raise ValueError("WELLIO_PERSIST_BASE_DELAY_SECONDS must be zero or positive.")

  log_dir = (os.getenv("WELLIO_LOG_DIR") or "./logs").strip()
  log_max_bytes = _positive_int("WELLIO_LOG_MAX_BYTES", "5242880")  # 5MB default
  log_backup_count = _number("WELLIO_LOG_BACKUP_COUNT", "10", int)
  if log_backup_count < 0:
    raise ValueError("WELLIO_LOG_BACKUP_COUNT must be zero or a positive integer.")

  return Settings(
    environment=environment,
    debug=debug,
    app_name=app_name,
    tag_prefix=tag_prefix,
    api_base_url=api_base_url,
    worker_script_path=worker_script_path,
    default_role=default_role,
    notification_icon=notification_icon,
    notification_badge=notification_badge,
    http_timeout_seconds=http_timeout_seconds,
    coach_persist_max_attempts=coach_persist_max_attempts,
    client_persist_max_attempts=client_persist_max_attempts,
    persist_base_delay_seconds=persist_base_delay_seconds,
    log_dir=log_dir,
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
  )
