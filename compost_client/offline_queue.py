"""
Offline pickup queue.

Pickup confirmations captured without a network connection are appended to a
single list kept in durable client-local storage. A sync pass resubmits the
whole list in enqueue order and removes it only when every submission
succeeded; after a partial failure the full list stays put and is retried as
a batch on the next pass. Submissions have no dedup key, so a retried batch
can insert duplicate pickup events for the items that made it the first time.
"""
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

PICKUP_QUEUE_KEY = "fxbg_pickup_queue"
LAST_SYNC_KEY = "fxbg_last_sync"
DRIVER_INITIALS_KEY = "fxbg_driver_initials"

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

# ---------------- Storage backends ----------------
class MemoryStorage:
    """Key-value storage that lives as long as the process (tests, previews)."""

    def __init__(self):
        self.items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

class JsonFileStorage:
    """Key-value storage persisted as one JSON object on disk."""

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

# ---------------- Queue ----------------
class SyncReport(BaseModel):
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    removed: int = 0

    @property
    def cleared(self) -> bool:
        return self.attempted > 0 and self.failed == 0 and self.removed == self.attempted

class OfflineQueue:
    def __init__(self, storage, clock: Callable[[], str] = _now_iso):
        self.storage = storage
        self.clock = clock
        # guards read-modify-write of the stored list
        self._lock = threading.RLock()
        self._syncing = False

    def _load(self) -> List[dict]:
        raw = self.storage.get_item(PICKUP_QUEUE_KEY)
        items = json.loads(raw or "[]")
        return items if isinstance(items, list) else []

    def _save(self, items: List[dict]) -> None:
        if items:
            self.storage.set_item(PICKUP_QUEUE_KEY, json.dumps(items))
        else:
            self.storage.remove_item(PICKUP_QUEUE_KEY)

    def enqueue(self, payload: dict) -> dict:
        """
        Append one payload stamped with `queued_at`. A storage failure is
        logged and the record is still returned: the caller treats it as saved.
        """
        record = {**payload, "queued_at": self.clock()}
        with self._lock:
            try:
                items = self._load()
                items.append(record)
                self._save(items)
            except (OSError, ValueError, TypeError) as ex:
                logger.error("Failed to queue pickup event: %s", ex)
        return record

    def peek_all(self) -> List[dict]:
        with self._lock:
            try:
                return self._load()
            except (OSError, ValueError) as ex:
                logger.error("Failed to get queued events: %s", ex)
                return []

    def pending_count(self) -> int:
        return len(self.peek_all())

    def last_sync(self) -> Optional[str]:
        try:
            return self.storage.get_item(LAST_SYNC_KEY)
        except (OSError, ValueError) as ex:
            logger.error("Failed to read last sync time: %s", ex)
            return None

    def sync_all(self, submit: Callable[[dict], bool]) -> SyncReport:
        """
        Submit every queued item, oldest first, and let every attempt settle.
        `submit` gets the payload without `queued_at` and returns True when the
        server accepted it; an exception counts as a failed attempt.

        All succeeded: the synced batch is removed and the last-sync time
        written. Anything failed: the stored list is left exactly as it was.
        Items enqueued while the pass is running stay queued for the next one.
        If the stored list no longer starts with the batch, nothing is removed
        and the last-sync time is left alone.
        """
        with self._lock:
            if self._syncing:
                return SyncReport()
            batch = self.peek_all()
            if not batch:
                return SyncReport()
            self._syncing = True

        try:
            report = SyncReport(attempted=len(batch))
            for item in batch:
                payload = {k: v for k, v in item.items() if k != "queued_at"}
                try:
                    accepted = bool(submit(payload))
                except Exception as ex:
                    logger.error("Queued pickup for stop %s failed to sync: %s", item.get("stop_id"), ex)
                    accepted = False
                if accepted:
                    report.succeeded += 1
                else:
                    report.failed += 1

            if report.failed:
                logger.warning(
                    "Sync pass incomplete (%d/%d failed); keeping all %d queued events",
                    report.failed, report.attempted, report.attempted,
                )
                return report

            with self._lock:
                try:
                    current = self._load()
                    if current[:len(batch)] != batch:
                        logger.warning(
                            "Queue changed during sync; leaving %d stored events in place", len(current),
                        )
                        return report
                    self._save(current[len(batch):])
                    report.removed = len(batch)
                    self.storage.set_item(LAST_SYNC_KEY, self.clock())
                except (OSError, ValueError) as ex:
                    logger.error("Failed to clear queued events: %s", ex)
                    return report
            logger.info("Synced %d queued pickup events", report.succeeded)
            return report
        finally:
            with self._lock:
                self._syncing = False
