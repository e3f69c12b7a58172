"""In-memory content-addressed store for produced segment bytes."""

import hashlib
import threading
from typing import Iterable


class ArtifactStore:
    """Holds artifact bytes keyed by their SHA-256 digest."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, data: bytes) -> str:
        ref = hashlib.sha256(data).hexdigest()
        with self._lock:
            self._blobs.setdefault(ref, bytes(data))
        return ref

    def get(self, ref: str) -> bytes:
        with self._lock:
            return self._blobs[ref]

    def discard(self, refs: Iterable[str]) -> None:
        with self._lock:
            for ref in refs:
                self._blobs.pop(ref, None)

    def clear(self) -> None:
        with self._lock:
            self._blobs.clear()

    def __contains__(self, ref: object) -> bool:
        with self._lock:
            return ref in self._blobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)
