"""
Fact Cache

Persistent cache for character facts looked up through an LLM. Facts about a
character do not change between games, so they are kept in memory and on
disk keyed by the normalized character name.
"""

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value with timestamp."""
    value: str
    timestamp: float
    model: str
    hits: int = 0


class FactCache:
    """
    Two-level (memory, disk) cache of facts by character name.

    Entries older than `ttl_seconds` are ignored and refreshed on the next
    lookup.
    """

    DEFAULT_TTL = 7 * 86400  # 1 week

    def __init__(self, cache_dir: Optional[Path] = None, ttl_seconds: int = DEFAULT_TTL):
        """
        Args:
            cache_dir: Directory for cache files. Defaults to ~/.twentyq/fact_cache/
            ttl_seconds: Maximum entry age
        """
        self.cache_dir = Path(cache_dir) if cache_dir else Path.home() / ".twentyq" / "fact_cache"
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.ttl_seconds = ttl_seconds
        self._memory: dict[str, CacheEntry] = {}

    def _key(self, answer: str) -> str:
        normalized = " ".join(answer.lower().split())
        return hashlib.sha256(normalized.encode()).hexdigest()[:16]

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def _fresh(self, timestamp: float) -> bool:
        return time.time() - timestamp < self.ttl_seconds

    def get(self, answer: str) -> Optional[str]:
        """Return a cached fact, checking memory first, then disk."""
        key = self._key(answer)

        entry = self._memory.get(key)
        if entry and self._fresh(entry.timestamp):
            entry.hits += 1
            return entry.value

        path = self._path(key)
        if path.exists():
            try:
                data = json.loads(path.read_text())
                if self._fresh(data["timestamp"]):
                    entry = CacheEntry(
                        value=data["value"],
                        timestamp=data["timestamp"],
                        model=data.get("model", "unknown"),
                        hits=data.get("hits", 0) + 1
                    )
                    self._memory[key] = entry
                    return entry.value
            except (OSError, json.JSONDecodeError, KeyError) as e:
                logger.warning("Ignoring unreadable fact cache file %s: %s", path, e)

        return None

    def set(self, answer: str, fact: str, model: str = "unknown") -> None:
        """Cache a fact in memory and on disk."""
        key = self._key(answer)
        entry = CacheEntry(value=fact, timestamp=time.time(), model=model)
        self._memory[key] = entry

        path = self._path(key)
        try:
            path.write_text(json.dumps({
                "value": fact,
                "timestamp": entry.timestamp,
                "model": model,
                "answer": answer
            }))
        except OSError as e:
            logger.warning("Could not write fact cache file %s: %s", path, e)

    def clear(self) -> int:
        """Drop every entry. Returns the number of files removed."""
        self._memory.clear()
        removed = 0
        for path in self.cache_dir.glob("*.json"):
            path.unlink()
            removed += 1
        return removed

    def stats(self) -> dict:
        """Entry counts for diagnostics."""
        return {
            "memory_entries": len(self._memory),
            "disk_entries": sum(1 for _ in self.cache_dir.glob("*.json")),
            "total_hits": sum(e.hits for e in self._memory.values()),
        }
