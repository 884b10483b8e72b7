from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

STORAGE_KEY = "studyflow_data_v1"


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


def _safe_key(key: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9_.-]+", "_", key.strip())
    return safe.strip("_.") or "default"


class FileStorage:
    """
    One `<key>.json` file per key inside a data directory.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_safe_key(key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read %s, treating it as empty", path, exc_info=True)
            return None

    def set(self, key: str, value: str) -> None:
        """
        Atomic write: write to temp file then replace target.
        """
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        temp = path.with_suffix(path.suffix + ".tmp")
        temp.write_text(value, encoding="utf-8")
        temp.replace(path)


class MemoryStorage:
    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes += 1
