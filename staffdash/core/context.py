"""
staffdash/core/context.py
Everything a hook needs, bundled once per process and passed by reference.
Tests build their own DataContext with a fake clock and a mock transport.
"""

from dataclasses import dataclass, field
from typing import Optional

from staffdash.core.cache import CacheStore
from staffdash.core.config import CACHE_TTL_S
from staffdash.core.http_client import ApiClient, api_client
from staffdash.core.inflight import InflightRegistry


@dataclass
class DataContext:
    client:   ApiClient
    cache:    CacheStore = field(default_factory=CacheStore)
    inflight: InflightRegistry = field(default_factory=InflightRegistry)
    ttl_s:    float = CACHE_TTL_S


_context: Optional[DataContext] = None


def get_context() -> DataContext:
    """Process-wide context. Also the FastAPI dependency; override it in tests."""
    global _context
    if _context is None or _context.client.is_closed:
        cache    = _context.cache if _context else CacheStore()
        inflight = _context.inflight if _context else InflightRegistry()
        _context = DataContext(client=api_client(), cache=cache, inflight=inflight)
    return _context
