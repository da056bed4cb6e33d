"""Repo-root .env support for local runs of the worker simulation and managers."""

from __future__ import annotations

import os
from pathlib import Path

ENV_PREFIX = "WELLIO_"


def default_env_path() -> Path:
  return Path(__file__).resolve().parents[2] / ".env"


def _unquote(value: str) -> str:
  if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
    return value[1:-1]
  # Unquoted values may carry a trailing "# comment".
  return value.split(" #", 1)[0].rstrip()


def read_env_file(path: Path) -> dict[str, str]:
  """Parse KEY=value lines; blank lines, comments and `export ` prefixes are tolerated."""

  if not path.is_file():
    return {}

  entries: dict[str, str] = {}
  for raw_line in path.read_text(encoding="utf-8").splitlines():
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
      continue
    line = line.removeprefix("export ").lstrip()
    key, value = line.split("=", 1)
    key = key.strip()
    if key:
      entries[key] = _unquote(value.strip())
  return entries


def load_env_file(path: Path, *, override: bool = False, prefix: str = ENV_PREFIX) -> list[str]:
  """Copy `prefix`-ed entries into os.environ and return the keys that were applied.

  The process environment wins unless `override` is set, so deployment
  variables are never shadowed by a stale local file.
  """

  applied: list[str] = []
  for key, value in read_env_file(path).items():
    if not key.startswith(prefix):
      continue
    if not override and key in os.environ:
      continue
    os.environ[key] = value
    applied.append(key)
  return applied
