# ===== IMPORTS & DEPENDENCIES =====
import json
import time
import random
import string
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Dict, Any

from game_analyzer.core.database import Database
from game_analyzer.models.game import QueuedDelivery, LeadData
from game_analyzer.config import QUEUE_KEY, MAX_DELIVERY_ATTEMPTS

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


# ===== STORAGE BACKENDS =====
class DeliveryStore(ABC):
    """Storage interface for queued deliveries: append, list, update, remove."""

    @abstractmethod
    def append(self, entry: QueuedDelivery) -> None:
        """Persist a new entry at the end of the queue."""

    @abstractmethod
    def list(self) -> List[QueuedDelivery]:
        """Return every stored entry in insertion order."""

    @abstractmethod
    def update(self, entry_id: str, **changes: Any) -> bool:
        """Apply changes to one entry. Returns False if the id is unknown."""

    @abstractmethod
    def remove(self, entry_id: str) -> bool:
        """Delete one entry. Returns False if the id is unknown."""

    @abstractmethod
    def clear(self) -> None:
        """Delete every entry."""


class InMemoryDeliveryStore(DeliveryStore):
    """Keeps entries in a process-local list."""

    def __init__(self):
        self._entries: List[QueuedDelivery] = []

    def append(self, entry: QueuedDelivery) -> None:
        self._entries.append(dict(entry))

    def list(self) -> List[QueuedDelivery]:
        return [dict(entry) for entry in self._entries]

    def update(self, entry_id: str, **changes: Any) -> bool:
        for entry in self._entries:
            if entry['id'] == entry_id:
                entry.update(changes)
                return True
        return False

    def remove(self, entry_id: str) -> bool:
        before = len(self._entries)
        self._entries = [entry for entry in self._entries if entry['id'] != entry_id]
        return len(self._entries) < before

    def clear(self) -> None:
        self._entries = []


class SqliteDeliveryStore(DeliveryStore):
    """
    Persists the whole queue as one JSON array under a fixed key in the local Database.
    Every operation is a read-modify-write of that document.
    """

    def __init__(self, db: Database, key: str = QUEUE_KEY):
        self.db = db
        self.key = key

    def _load(self) -> List[QueuedDelivery]:
        stored = self.db.get_item(self.key)
        if not stored:
            return []
        try:
            entries = json.loads(stored)
        except json.JSONDecodeError:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Stored queue under '{self.key}' is not valid JSON. Treating as empty.")
            return []
        return entries if isinstance(entries, list) else []

    def _save(self, entries: List[QueuedDelivery]) -> None:
        self.db.set_item(self.key, json.dumps(entries, ensure_ascii=False))

    def append(self, entry: QueuedDelivery) -> None:
        entries = self._load()
        entries.append(entry)
        self._save(entries)

    def list(self) -> List[QueuedDelivery]:
        return self._load()

    def update(self, entry_id: str, **changes: Any) -> bool:
        entries = self._load()
        found = False
        for entry in entries:
            if entry.get('id') == entry_id:
                entry.update(changes)
                found = True
        if found:
            self._save(entries)
        return found

    def remove(self, entry_id: str) -> bool:
        entries = self._load()
        remaining = [entry for entry in entries if entry.get('id') != entry_id]
        if len(remaining) == len(entries):
            return False
        self._save(remaining)
        return True

    def clear(self) -> None:
        self.db.remove_item(self.key)


# ===== CORE BUSINESS LOGIC =====
def generate_delivery_id() -> str:
    """e.g. 'webhook_1718000000000_k3j9x0a1b'"""
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"webhook_{int(time.time() * 1000)}_{suffix}"


class DeliveryQueue:
    """
    At-least-once queue for webhook notifications that failed immediate delivery.

    Entries leave the queue only on confirmed delivery. An entry whose attempt counter
    reaches `max_attempts` is abandoned: it stays listed but is never retried again.
    All store access goes through one lock so read-modify-write cycles never interleave.
    """

    def __init__(self, store: DeliveryStore, max_attempts: int = MAX_DELIVERY_ATTEMPTS):
        self.store = store
        self.max_attempts = max_attempts
        self._lock = threading.Lock()

    def enqueue(self, payload: Dict[str, Any], lead: LeadData) -> QueuedDelivery:
        entry = QueuedDelivery(
            id=generate_delivery_id(),
            payload=payload,
            lead=dict(lead),
            timestamp=datetime.now(timezone.utc).isoformat(),
            attempts=0,
        )
        with self._lock:
            self.store.append(entry)
        logger.info(f"💾 [{self.__class__.__name__}] Queued delivery {entry['id']} for later retry.")
        return entry

    def list_pending(self) -> List[QueuedDelivery]:
        """Every persisted entry, abandoned ones included."""
        with self._lock:
            return self.store.list()

    def retryable(self) -> List[QueuedDelivery]:
        """Entries still below the attempt ceiling."""
        return [entry for entry in self.list_pending() if entry.get('attempts', 0) < self.max_attempts]

    def mark_attempted(self, entry_id: str) -> None:
        with self._lock:
            entry = next((e for e in self.store.list() if e['id'] == entry_id), None)
            if entry is None:
                logger.warning(f"⚠️ [{self.__class__.__name__}] Cannot mark unknown delivery {entry_id}.")
                return
            attempts = entry.get('attempts', 0) + 1
            self.store.update(entry_id, attempts=attempts)
        if attempts >= self.max_attempts:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Delivery {entry_id} reached {attempts} attempts and is abandoned.")

    def remove(self, entry_id: str) -> None:
        with self._lock:
            removed = self.store.remove(entry_id)
        if removed:
            logger.info(f"[{self.__class__.__name__}] Removed delivered entry {entry_id}.")

    def clear(self) -> None:
        with self._lock:
            self.store.clear()
        logger.info(f"[{self.__class__.__name__}] Queue cleared.")
