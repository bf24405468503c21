from __future__ import annotations

from pathlib import Path
from typing import Any, List
from urllib.parse import urlparse

import yaml

from ..models import FeedSource


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


REQUIRED_FIELDS = ("name", "url")
SUPPORTED_TYPES = ("rss",)


def _check_url(value: Any) -> str:
    url = str(value).strip()
    parts = urlparse(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigError(f"Feed URL must be absolute http(s), got '{url}'")
    return url


def _check_keywords(value: Any, name: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or any(not isinstance(k, str) for k in value):
        raise ConfigError(f"Source '{name}': 'keywords' must be a list of strings")
    return [k.strip() for k in value if k.strip()]


def _check_weight(value: Any, name: str) -> float:
    if value is None:
        return 1.0
    # bool is an int subclass; reject "weight: yes"
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"Source '{name}': 'weight' must be a number, got {value!r}")
    if value <= 0:
        raise ConfigError(f"Source '{name}': 'weight' must be positive, got {value}")
    return float(value)


def parse_source(entry: Any) -> FeedSource:
    """Validate one mapping from the ``sources`` list and build a ``FeedSource``.

    Required: ``name``, ``url`` (absolute http/https). Optional: ``type``
    (only ``rss``), ``keywords`` (extra relevance terms for this feed) and
    ``weight`` (positive multiplier applied to the feed's scores, default 1.0).
    """
    if not isinstance(entry, dict):
        raise ConfigError(f"Each source must be a mapping, got: {type(entry).__name__}")
    missing = [f for f in REQUIRED_FIELDS if not entry.get(f)]
    if missing:
        raise ConfigError(f"Source is missing {', '.join(missing)}: {entry}")

    name = str(entry["name"]).strip()
    src_type = str(entry.get("type") or "rss").strip()
    if src_type not in SUPPORTED_TYPES:
        raise ConfigError(f"Source '{name}': unsupported type '{src_type}'")

    return FeedSource(
        name=name,
        url=_check_url(entry["url"]),
        type=src_type,  # type: ignore[arg-type]
        keywords=_check_keywords(entry.get("keywords"), name),
        weight=_check_weight(entry.get("weight"), name),
    )


def load_sources_config(path: Path | str) -> List[FeedSource]:
    """Read the feed list from a YAML file such as ``config/sources.yaml``.

    The file is a mapping with a ``sources`` list; other top-level keys are
    ignored. Source names must be unique since they label log lines, ids and
    ingestor status.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")

    raw_sources = data.get("sources") or []
    if not isinstance(raw_sources, list):
        raise ConfigError(f"{config_path}: 'sources' must be a list")

    sources = [parse_source(entry) for entry in raw_sources]
    names = [s.name for s in sources]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate source names: {', '.join(duplicates)}")
    return sources
