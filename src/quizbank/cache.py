import hashlib
import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from .config import get_config

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DiskCache:
    def __init__(self, namespace: str = 'llm'):
        cfg = get_config().cache
        self.root = Path(cfg.root) / namespace
        self.root.mkdir(parents=True, exist_ok=True)
        self.ttl = cfg.ttl_seconds

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def _is_expired(self, path: Path) -> bool:
        if self.ttl is None:
            return False
        try:
            mtime = path.stat().st_mtime
        except OSError:
            return True
        return (time.time() - mtime) > self.ttl

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists() or self._is_expired(path):
            return None
        try:
            with path.open('r', encoding='utf-8') as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            logger.debug("Ignoring unreadable cache entry %s: %s", path, exc)
            return None

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix('.tmp')
        try:
            with tmp.open('w', encoding='utf-8') as fh:
                json.dump(value, fh, ensure_ascii=False, indent=2)
            tmp.replace(path)
        except (OSError, TypeError) as exc:
            logger.warning("Could not write cache entry %s: %s", path, exc)
            if tmp.exists():
                tmp.unlink(missing_ok=True)

    @staticmethod
    def make_key(*parts: str) -> str:
        data = "|".join(parts)
        return hashlib.sha256(data.encode('utf-8')).hexdigest()


class PatternCache(Generic[T]):
    """Read-through in-memory cache for immutable compiled snapshots.

    Reads are plain dict lookups; only inserts take the lock. Once full, the
    oldest entry is evicted.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max(1, max_entries or get_config().cache.pattern_cache_size)
        self._entries: Dict[str, T] = {}
        self._lock = threading.Lock()

    def get(self, key: str, factory: Callable[[], T]) -> T:
        value = self._entries.get(key)
        if value is not None:
            return value
        created = factory()
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing
            if len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = created
        return created

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
