"""
Crawler settings and YAML config loading.

Example file::

    crawler:
      max_depth: 2
      delay: 1.5
      timeout: 10
      workers_per_host: 2
      archive_path: archive/
    seeds:
      - https://news.example/
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from newscrawler.errors import ConfigError
from newscrawler.fetch import DEFAULT_REFERRER, DEFAULT_USER_AGENT


@dataclass(slots=True)
class CrawlConfig:
    timeout: float = 10.0
    delay: float = 1.0
    max_depth: int = 2
    archive_path: Optional[str] = None
    workers_per_host: int = 1
    user_agent: str = DEFAULT_USER_AGENT
    referrer: Optional[str] = DEFAULT_REFERRER
    min_text_length: int = 200

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.delay < 0:
            raise ConfigError(f"delay must not be negative, got {self.delay}")
        if self.max_depth < 0:
            raise ConfigError(f"max_depth must not be negative, got {self.max_depth}")
        if self.workers_per_host < 1:
            raise ConfigError(f"workers_per_host must be at least 1, got {self.workers_per_host}")

    def with_overrides(self, **overrides: Any) -> "CrawlConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrawlConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown crawler settings: {', '.join(sorted(unknown))}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(str(e)) from e


def load_config(path: Union[str, Path]) -> Tuple[CrawlConfig, List[str]]:
    """Read crawler settings and seed URLs from a YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping")

    settings = raw.get("crawler") or {}
    seeds = raw.get("seeds") or []
    if not isinstance(settings, dict):
        raise ConfigError("'crawler' must be a mapping")
    if not isinstance(seeds, list) or not all(isinstance(s, str) for s in seeds):
        raise ConfigError("'seeds' must be a list of URLs")

    return CrawlConfig.from_dict(settings), seeds
