"""Base64url helpers for Web Push key material."""

from __future__ import annotations

import base64
import binascii
import re

_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]+={0,2}$")


def is_base64url(value: str) -> bool:
  """Return True when the value only contains base64url characters."""
  return bool(_BASE64URL_RE.fullmatch(value))


def url_base64_to_bytes(value: str) -> bytes:
  """Decode an unpadded base64url string (e.g. a VAPID public key) into raw bytes."""
  normalized = value.strip()
  if not normalized or not is_base64url(normalized):
    raise ValueError("Key material must be a non-empty base64url string.")

  # Browsers hand out unpadded keys; restore padding before decoding.
  padding = "=" * ((4 - len(normalized.rstrip("=")) % 4) % 4)
  try:
    return base64.urlsafe_b64decode(normalized.rstrip("=") + padding)
  except (binascii.Error, ValueError) as exc:
    raise ValueError(f"Key material is not valid base64url: {exc}") from exc


def bytes_to_url_base64(raw: bytes) -> str:
  """Encode raw bytes as unpadded base64url."""
  return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
