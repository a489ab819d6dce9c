from __future__ import annotations

import json
import logging
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger("notifyhub.tracker")


class NotificationTracker:
    """
    Append-only journal of channel attempts kept in a JSON file.

    Only the newest ``max_entries`` records are retained. A missing or
    corrupt file is treated as an empty journal.
    Writes are serialised with a lock so the journal can be updated from
    worker threads.
    """

    def __init__(self, storage_path: Path, *, max_entries: int = 100, message_limit: int = 100) -> None:
        self._storage_path = storage_path
        self._max_entries = max(1, max_entries)
        self._message_limit = max(1, message_limit)
        self._lock = threading.Lock()

    def track(
        self,
        *,
        user_id: str,
        channel: str,
        recipient: Optional[str],
        status: str,
        message: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "notification_id": time.time_ns(),
            "user_id": user_id,
            "channel": channel,
            "recipient": recipient,
            "status": status,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if message and len(message) > self._message_limit:
            entry["message"] = message[: self._message_limit]
            entry["truncated"] = True
        if metadata:
            entry["metadata"] = dict(metadata)

        with self._lock:
            entries = self.load()
            entries.append(entry)
            excess = len(entries) - self._max_entries
            if excess > 0:
                entries = entries[excess:]
            try:
                self._persist(entries)
            except OSError as exc:
                logger.error("Failed to write notification journal %s: %s", self._storage_path, exc)
        return entry

    def load(self) -> List[Dict[str, Any]]:
        if not self._storage_path.exists():
            return []
        try:
            data = json.loads(self._storage_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Resetting unreadable notification journal %s: %s", self._storage_path, exc)
            return []
        if not isinstance(data, list):
            logger.error("Notification journal %s does not contain a list", self._storage_path)
            return []
        return data

    def _persist(self, entries: List[Dict[str, Any]]) -> None:
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._storage_path.write_text(json.dumps(entries, indent=2, default=str), encoding="utf-8")
