"""
Crawl history persistence, so later runs can skip unchanged pages.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Union

from newscrawler.models import LinkRecord

logger = logging.getLogger(__name__)


def history_path(directory: Union[str, Path], host: str) -> Path:
    """History file for a host: ``<directory>/<host>.json``."""
    return Path(directory) / f"{host.replace(':', '_')}.json"


def save_history(path: Union[str, Path], records: Iterable[LinkRecord]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.to_dict() for r in records]
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)
    logger.debug("Wrote %d links to %s", len(payload), path)


def load_history(path: Union[str, Path]) -> List[LinkRecord]:
    """Records saved by a previous run; empty when no history exists yet."""
    path = Path(path)
    if not path.exists():
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    return [LinkRecord.from_dict(item) for item in data]
