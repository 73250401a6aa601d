"""In-process menu snapshot cache keyed by menu source."""
from __future__ import annotations

import copy
import time
from typing import Any

# key -> (expires_at, snapshot)
_entries: dict[str, tuple[float, Any]] = {}
_stats = {"hits": 0, "misses": 0}


def cache_get(key: str) -> Any | None:
    """Return a private copy of the snapshot under *key*, or ``None`` once expired."""
    entry = _entries.get(key)
    if entry is not None and entry[0] > time.monotonic():
        _stats["hits"] += 1
        return copy.deepcopy(entry[1])
    _entries.pop(key, None)
    _stats["misses"] += 1
    return None


def cache_set(key: str, value: Any, ttl_seconds: float) -> None:
    _entries[key] = (time.monotonic() + ttl_seconds, copy.deepcopy(value))


def get_cache_stats() -> dict:
    lookups = _stats["hits"] + _stats["misses"]
    return {
        "size": len(_entries),
        "hits": _stats["hits"],
        "misses": _stats["misses"],
        "hit_rate": round(_stats["hits"] / lookups * 100, 1) if lookups else 0.0,
    }


def clear_cache() -> None:
    _entries.clear()
    _stats.update(hits=0, misses=0)
