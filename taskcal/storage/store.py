import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from taskcal.core.config import load_config

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


class CollectionStore:
    """Per-user key/value storage for JSON collections, written through to disk."""

    def __init__(self, data_dir: Optional[str] = None):
        """
        Initialize the collection store.

        Args:
            data_dir: Directory to store collection files. If None, uses DATA_DIR from config.
        """
        self.data_dir = Path(data_dir) if data_dir else Path(load_config().data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # In-memory copy for faster access
        self._memory: Dict[str, Any] = {}

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read the value stored under a key.

        Args:
            key: Storage key (e.g. 'tasks', 'calendar-events')
            default: Value returned when the key is unset or unreadable

        Returns:
            The stored JSON value, or default
        """
        if key in self._memory:
            return self._memory[key]

        path = self._path_for(key)
        if not path.exists():
            return default

        try:
            with open(path, 'r', encoding='utf-8') as f:
                value = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            # Corrupted file reads as unset
            logger.warning(f"Ignoring unreadable storage file {path}: {e}")
            return default

        self._memory[key] = value
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Store a JSON-serializable value under a key.

        Args:
            key: Storage key
            value: JSON-serializable value
        """
        path = self._path_for(key)
        self._memory[key] = value

        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(value, f, ensure_ascii=False, indent=2)
        tmp_path.replace(path)

    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if something was removed, False otherwise
        """
        path = self._path_for(key)
        removed = self._memory.pop(key, None) is not None
        if path.exists():
            path.unlink()
            removed = True
        return removed

    def clear(self) -> int:
        """
        Remove every stored collection.

        Returns:
            Number of files removed
        """
        self._memory.clear()
        cleared = 0
        for path in self.data_dir.glob("*.json"):
            path.unlink()
            cleared += 1
        return cleared

    def get_stats(self) -> Dict[str, Any]:
        """
        Get storage statistics.

        Returns:
            Dictionary with storage statistics
        """
        return {
            'memory_entries': len(self._memory),
            'filesystem_entries': len(list(self.data_dir.glob("*.json"))),
            'data_dir': str(self.data_dir),
        }


# Global store instance
_store: Optional[CollectionStore] = None


def get_store() -> CollectionStore:
    """Get the global collection store instance."""
    global _store
    if _store is None:
        _store = CollectionStore()
    return _store


def reset_store() -> None:
    """Reset the global store instance so the next access re-reads DATA_DIR."""
    global _store
    _store = None
