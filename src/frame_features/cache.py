#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bounded result cache

Insertion-ordered store of recent analyses. Holds features, insight and
recommendations only; pixel data is never retained. When full, the
oldest-inserted entry is evicted.
"""

import hashlib
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from .buffer import PixelBuffer
from .steps.base import FeatureSet, Recommendation
from .utils import now_ms

CACHE_MAX_ENTRIES = 20

KEY_MODES = ("content", "frame")


@dataclass(frozen=True)
class CacheEntry:
    """One cached analysis."""
    key: str
    feature_set: FeatureSet
    insight: Optional[str] = None
    recommendations: Tuple[Recommendation, ...] = ()
    created_at: int = 0
    frame_timestamp: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "features": self.feature_set.to_dict(),
            "insight": self.insight,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "created_at": self.created_at,
            "frame_timestamp": self.frame_timestamp,
        }


# ============================================================================
# Key derivation
# ============================================================================

def rolling_hash(data: bytes, limit: int = 1000) -> int:
    """
    32-bit signed `h = h*31 + byte` over the first `limit` bytes.
    """
    h = 0
    for byte in data[:limit]:
        h = (h * 31 + byte) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def derive_cache_key(buffer: PixelBuffer, mode: str = "content", prefix_bytes: int = 1000) -> str:
    """
    Cache key for a buffer.

    Args:
        buffer: Validated pixel buffer
        mode: "content" hashes the whole buffer; "frame" reproduces the
            prefix-hash + timestamp key, which only hits for the same frame
            captured at the same instant
        prefix_bytes: Bytes hashed in "frame" mode

    Returns:
        Key string prefixed with "frame_"
    """
    if mode == "content":
        digest = hashlib.blake2b(buffer.data, digest_size=8).hexdigest()
        return f"frame_{digest}"
    if mode == "frame":
        stamp = buffer.timestamp if buffer.timestamp is not None else now_ms()
        return f"frame_{abs(rolling_hash(buffer.data, prefix_bytes))}_{stamp}"
    raise ValueError(f"Invalid cache key mode: {mode}. Valid options: {', '.join(KEY_MODES)}")


# ============================================================================
# Cache
# ============================================================================

class ResultCache:
    """
    Thread-safe FIFO cache.

    Usage:
        cache = ResultCache(max_entries=20)
        cache.insert(entry)
        hit = cache.lookup(entry.key)
    """

    def __init__(self, max_entries: int = CACHE_MAX_ENTRIES):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def lookup(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def insert(self, entry: CacheEntry) -> None:
        """Insert or replace; an existing key keeps its position."""
        with self._lock:
            self._entries[entry.key] = entry
            while len(self._entries) > self._max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full, evicted {evicted_key}")

    def entries(self) -> List[CacheEntry]:
        """Snapshot in insertion order (oldest first)."""
        with self._lock:
            return list(self._entries.values())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
