"""
In-memory store for call recordings served through private listen links.

Entries expire after a fixed TTL. Expired entries are hidden from ``get``
immediately and removed from memory by ``sweep``, which the application runs
on a fixed interval.
"""

import asyncio
import logging
import secrets
import threading
import time
from typing import Callable, Dict, Optional

from voice_relay.config.constants import (
    LOGGER_NAME,
    RECORDING_SWEEP_INTERVAL_SECONDS,
    RECORDING_TTL_SECONDS,
)

logger = logging.getLogger(LOGGER_NAME)


class StoredRecording:
    """An MP3 recording and the call metadata it was stored with."""

    def __init__(self, audio: bytes, created_at: float, metadata: Optional[Dict[str, str]] = None):
        self.audio = audio
        self.created_at = created_at
        self.metadata = metadata or {}


class RecordingStore:
    """
    Token-addressed recordings with time-based expiry.

    Writers run in the request threadpool while the sweeper runs on the event
    loop, so access is serialized with a lock.
    """

    def __init__(
        self,
        ttl_seconds: float = RECORDING_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: Dict[str, StoredRecording] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def put(self, audio: bytes, metadata: Optional[Dict[str, str]] = None) -> str:
        """Store a recording and return the unguessable token that addresses it."""
        token = secrets.token_hex(24)
        with self._lock:
            self._items[token] = StoredRecording(audio, self._clock(), metadata)
        return token

    def get(self, token: str) -> Optional[StoredRecording]:
        with self._lock:
            item = self._items.get(token)
        if item is None or self._is_expired(item, self._clock()):
            return None
        return item

    def sweep(self) -> int:
        """Remove expired recordings and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [token for token, item in self._items.items() if self._is_expired(item, now)]
            for token in expired:
                del self._items[token]
        if expired:
            logger.info(f"Removed {len(expired)} expired recordings")
        return len(expired)

    def _is_expired(self, item: StoredRecording, now: float) -> bool:
        return now - item.created_at > self.ttl_seconds


async def run_periodic_sweep(
    store: RecordingStore, interval: float = RECORDING_SWEEP_INTERVAL_SECONDS
) -> None:
    """Sweep ``store`` every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        store.sweep()
