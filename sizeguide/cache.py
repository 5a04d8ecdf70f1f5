import time
import hashlib
from typing import Any, Dict, Optional


# Simple in-memory TTL cache, per process
_cache: Dict[str, Dict[str, Any]] = {}
_cache_exp: Dict[str, float] = {}


def cache_key(*parts: Optional[str]) -> str:
    h = hashlib.sha256()
    for part in parts:
        h.update((part or "").encode())
        h.update(b"\x00")
    return h.hexdigest()


def cache_get(key: str) -> Optional[Dict[str, Any]]:
    now = time.time()
    if key in _cache and _cache_exp.get(key, 0) > now:
        return _cache[key]
    if key in _cache:
        _cache.pop(key, None)
        _cache_exp.pop(key, None)
    return None


def cache_set(key: str, value: Dict[str, Any], ttl: int) -> None:
    _cache[key] = value
    _cache_exp[key] = time.time() + ttl


def cache_stats() -> Dict[str, int]:
    now = time.time()
    return {
        "entries": len(_cache),
        "expired": len([k for k, v in _cache_exp.items() if v < now]),
    }


def cache_clear() -> None:
    _cache.clear()
    _cache_exp.clear()
