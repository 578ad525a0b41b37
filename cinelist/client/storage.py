# cinelist/client/storage.py
from __future__ import annotations

"""
Persistent key/value storage for the client core.

One JSON document on disk holds every key (session, pending-migration marker,
cached watchlist). Writes go through a temp file + `os.replace` so a crash never
leaves a half-written document behind.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from cinelist.core.config import settings

logger = logging.getLogger(__name__)

__all__ = ["LocalStorage"]


class LocalStorage:
    def __init__(self, path: Optional[Path | str] = None) -> None:
        self.path = Path(path or settings.CLIENT_STORAGE_PATH)
        self._data: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable client storage at %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, ensure_ascii=False, default=str), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, *keys: str) -> None:
        changed = False
        for key in keys:
            if key in self._data:
                del self._data[key]
                changed = True
        if changed:
            self._flush()
