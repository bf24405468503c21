"""Root logger setup for the CLI and the long-running scheduler.

Arguments to ``configure_logging`` win; anything left as ``None`` is read
from the environment at call time (after ``.env`` has been loaded):

- ``LOG_LEVEL``: level name, default ``INFO``
- ``LOG_OUTPUT``: ``stdout``, ``file`` or ``both``; default ``stdout``
- ``LOG_FILE_PATH``: rotating log file, default ``logs/opportunity-agent.log``
- ``LOG_FORMAT``: ``text`` or ``json``
"""

from __future__ import annotations

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Literal, Optional

LogOutput = Literal["stdout", "file", "both"]
LogFormat = Literal["text", "json"]

DEFAULT_LEVEL = "INFO"
DEFAULT_OUTPUT: LogOutput = "stdout"
DEFAULT_FILE_PATH = "logs/opportunity-agent.log"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
_NOISY_LOGGERS = ("urllib3", "feedparser")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "file": f"{record.filename}:{record.lineno}",
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def is_kubernetes_env() -> bool:
    """Check if the application is running in a Kubernetes environment."""
    return bool(
        os.environ.get("K8S_CLUSTER")
        or os.environ.get("KUBERNETES_SERVICE_HOST")
        or os.path.exists("/var/run/secrets/kubernetes.io/serviceaccount")
    )


def _resolve_output() -> str:
    configured = os.environ.get("LOG_OUTPUT")
    if configured:
        return configured.lower()
    # Pods are scraped from stdout; never default to a file there
    return "stdout" if is_kubernetes_env() else DEFAULT_OUTPUT


def _handlers(output: str, file_path: str) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if output in ("file", "both"):
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(RotatingFileHandler(file_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS))
    return handlers


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
    module: Optional[str] = None,
) -> None:
    """Replace the root logger's handlers according to the given settings.

    ``module`` additionally sets the level on that named logger.
    """
    level = level or os.environ.get("LOG_LEVEL", DEFAULT_LEVEL).upper()
    fmt = (log_format or os.environ.get("LOG_FORMAT") or "text").lower()
    formatter = JsonFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in _handlers(output or _resolve_output(), file_path or os.environ.get("LOG_FILE_PATH") or DEFAULT_FILE_PATH):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if module:
        logging.getLogger(module).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
