"""Artifact cache — single-flight memoization of file reads and derived queries.

Every entry is keyed by (resource_id, query_id) and computed at most once per
cache instance. Concurrent callers asking for the same key wait for the one
in-flight computation. Failures are cached as typed negative results and are
never retried for the remainder of the run.
"""

import threading
from pathlib import Path
from typing import Any, Callable, Optional, Union

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()

CONTENT_QUERY = "__content__"


class CacheMiss(BaseModel):
    """Negative result stored in place of a value."""

    resource_id: str
    query_id: str
    reason: str = ""

    model_config = {"frozen": True}

    def __bool__(self) -> bool:
        return False


class NotFound(CacheMiss):
    """The resource could not be read."""


class ComputeFailed(CacheMiss):
    """The query function raised."""


class _Entry:
    """One cache slot. `ready` is set once `value` is final."""

    __slots__ = ("ready", "value")

    def __init__(self):
        self.ready = threading.Event()
        self.value: Any = None


class ArtifactCache:
    """Thread-safe, single-flight key-value store for one validation run."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._lock = threading.Lock()
        self._entries: dict[tuple[str, str], _Entry] = {}
        self._stats = {"hits": 0, "misses": 0, "failures": 0}

    def get_or_load(self, resource_id: Union[str, Path]) -> Union[str, NotFound]:
        """Return the text content of a file, or NotFound."""
        resource_id = str(resource_id)
        return self._get(resource_id, CONTENT_QUERY, lambda: self._read(resource_id))

    def get_or_compute(
        self,
        resource_id: Union[str, Path],
        query_id: str,
        compute_fn: Callable[[], Any],
    ) -> Any:
        """Return the memoized result of compute_fn, or ComputeFailed."""
        return self._get(str(resource_id), query_id, compute_fn)

    def peek(self, resource_id: Union[str, Path], query_id: str) -> Optional[Any]:
        """Return a completed entry's value without computing; None if absent."""
        with self._lock:
            entry = self._entries.get((str(resource_id), query_id))
        if entry is None or not entry.ready.is_set():
            return None
        return entry.value

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {**self._stats, "entries": len(self._entries)}

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._stats = {"hits": 0, "misses": 0, "failures": 0}

    # ── Internals ──

    def _get(self, resource_id: str, query_id: str, compute_fn: Callable[[], Any]) -> Any:
        key = (resource_id, query_id)
        with self._lock:
            entry = self._entries.get(key)
            owner = entry is None
            if owner:
                entry = _Entry()
                self._entries[key] = entry
                self._stats["misses"] += 1
            else:
                self._stats["hits"] += 1

        if not owner:
            entry.ready.wait()
            return entry.value

        try:
            entry.value = compute_fn()
        except Exception as e:
            entry.value = self._failure(resource_id, query_id, e)
        finally:
            entry.ready.set()

        if isinstance(entry.value, CacheMiss):
            with self._lock:
                self._stats["failures"] += 1
        return entry.value

    def _read(self, resource_id: str) -> Union[str, NotFound]:
        path = Path(resource_id)
        if not path.is_file():
            logger.debug("cache_file_missing", resource=resource_id)
            return NotFound(resource_id=resource_id, query_id=CONTENT_QUERY, reason="file not found")
        try:
            content = path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("cache_file_unreadable", resource=resource_id, error=str(e))
            return NotFound(resource_id=resource_id, query_id=CONTENT_QUERY, reason=str(e))
        logger.debug("cache_file_loaded", resource=resource_id, chars=len(content))
        return content

    @staticmethod
    def _failure(resource_id: str, query_id: str, error: Exception) -> CacheMiss:
        logger.debug(
            "cache_compute_failed",
            resource=resource_id,
            query=query_id,
            error=str(error),
            error_type=type(error).__name__,
        )
        if query_id == CONTENT_QUERY:
            return NotFound(resource_id=resource_id, query_id=query_id, reason=str(error))
        return ComputeFailed(resource_id=resource_id, query_id=query_id, reason=str(error))
