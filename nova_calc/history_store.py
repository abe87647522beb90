"""History persistence for Nova Calc.

The calculator controller talks to a store with two operations:
- load(): best-effort read of the saved history, newest first
- save(items): replace the saved history with the full list

JsonHistoryStore keeps a small key-value JSON file, with the history array
under the ``nova-calc-history`` key.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .models import HistoryItem


logger = logging.getLogger(__name__)

HISTORY_KEY = "nova-calc-history"
STORAGE_FILE = "storage.json"


class HistoryStore:
    """Interface for history persistence."""

    def load(self) -> List[HistoryItem]:
        raise NotImplementedError

    def save(self, items: Iterable[HistoryItem]) -> None:
        raise NotImplementedError


class MemoryHistoryStore(HistoryStore):
    """In-process store, used for tests and throwaway sessions."""

    def __init__(self, items: Iterable[HistoryItem] = ()):
        self.items: List[HistoryItem] = list(items)
        self.save_count = 0

    def load(self) -> List[HistoryItem]:
        return list(self.items)

    def save(self, items: Iterable[HistoryItem]) -> None:
        self.items = list(items)
        self.save_count += 1


class JsonHistoryStore(HistoryStore):
    """History stored in a JSON key-value file."""

    def __init__(self, data_dir: Path, key: str = HISTORY_KEY):
        """Initialize with the data directory.

        Args:
            data_dir: Directory holding storage.json.
            key: Key the history array is stored under.
        """
        self.data_dir = Path(data_dir)
        self.storage_file = self.data_dir / STORAGE_FILE
        self.key = key

    def _read_storage(self) -> Dict[str, Any]:
        """Read the whole key-value file, empty if missing or unreadable."""
        if not self.storage_file.exists():
            return {}
        try:
            with open(self.storage_file) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError, UnicodeDecodeError) as e:
            logger.warning("Failed to load history from %s: %s", self.storage_file, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.storage_file)
            return {}
        return data

    def load(self) -> List[HistoryItem]:
        """Load saved history.

        A missing file or any parse failure yields an empty history.
        """
        raw = self._read_storage().get(self.key)
        if raw is None:
            return []

        # Stored as a serialized string, like a browser key-value store
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.warning("Failed to parse saved history: %s", e)
                return []

        if not isinstance(raw, list):
            logger.warning("Saved history is not a list, ignoring it")
            return []

        try:
            return [HistoryItem.from_dict(entry) for entry in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Failed to load history: %s", e)
            return []

    def save(self, items: Iterable[HistoryItem]) -> None:
        """Serialize the full history under the history key."""
        entries = [item.to_dict() for item in items]
        data = self._read_storage()
        data[self.key] = json.dumps(entries)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.storage_file, "w") as f:
            json.dump(data, f, indent=2)
        logger.debug("Saved %d history items to %s", len(entries), self.storage_file)
