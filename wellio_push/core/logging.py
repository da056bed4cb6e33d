import logging
import logging.handlers
import sys
import time
import traceback
from pathlib import Path
from types import TracebackType

from wellio_push.config import Settings

LOG_LINE_FORMAT = "%(asctime)s - [%(context)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# Logger-name prefix -> execution context shown in each line.
CONTEXT_BY_PREFIX = (
  ("wellio_push.notifications.messages", "page"),
  ("wellio_push.notifications", "worker"),
  ("wellio_push.subscriptions", "page"),
)

_log_path: Path | None = None


class ExecutionContextFilter(logging.Filter):
  """Tag records with the context (background worker or page) that emitted them."""

  def filter(self, record: logging.LogRecord) -> bool:
    record.context = next((context for prefix, context in CONTEXT_BY_PREFIX if record.name.startswith(prefix)), "app")
    return True


class TruncatedFormatter(logging.Formatter):
  """Keep the header and the innermost frames of long tracebacks."""

  def __init__(self, *args, tail_lines: int = 5, **kwargs) -> None:
    super().__init__(*args, **kwargs)
    self.tail_lines = tail_lines

  # ruff: noqa: N802
  def formatException(self, ei: tuple[type[BaseException] | None, BaseException | None, TracebackType | None]) -> str:
    lines = traceback.format_exception(*ei)
    if len(lines) <= self.tail_lines + 1:
      return "".join(lines)
    return "".join([lines[0], "    ...\n", *lines[-self.tail_lines :]])


def _rotated_name(default_name: str) -> str:
  """wellio_push.log.2 -> wellio_push.log-2"""
  stem, _, suffix = default_name.rpartition(".")
  return f"{stem}-{suffix}" if stem and suffix.isdigit() else default_name


def _file_handler(settings: Settings) -> tuple[logging.Handler, Path]:
  log_dir = Path(settings.log_dir).resolve()
  log_path = log_dir / f"wellio_push_{time.strftime('%Y%m%d_%H%M%S')}.log"
  try:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path.touch(exist_ok=True)
  except OSError as exc:
    raise RuntimeError(f"Cannot write logs under {log_dir}: {exc}") from exc

  handler = logging.handlers.RotatingFileHandler(log_path, encoding="utf-8", maxBytes=settings.log_max_bytes, backupCount=settings.log_backup_count)
  handler.namer = _rotated_name
  handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
  return handler, log_path


def setup_logging(settings: Settings) -> Path:
  """Replace root handlers with stdout plus a rotating file; returns the file path."""
  console = logging.StreamHandler(sys.stdout)
  console.setFormatter(TruncatedFormatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
  file_handler, log_path = _file_handler(settings)

  context_filter = ExecutionContextFilter()
  for handler in (console, file_handler):
    handler.addFilter(context_filter)

  logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO, handlers=[console, file_handler], force=True)
  # httpx logs every request at INFO; keep it quiet unless debugging.
  logging.getLogger("httpx").setLevel(logging.DEBUG if settings.debug else logging.WARNING)
  return log_path


def initialize_logging(settings: Settings) -> Path:
  """Set up logging on first call; later calls return the existing log file."""
  global _log_path
  if _log_path is None:
    _log_path = setup_logging(settings)
    logging.getLogger(__name__).info("Logging initialized env=%s file=%s", settings.environment, _log_path)
  return _log_path
