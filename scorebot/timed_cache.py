#!/usr/bin/env python3
"""
Staleness-gated snapshot cache for the Score Bot
Each plugin owns one TimedCache per data source and refreshes it on demand
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Generic, Optional, TypeVar

import aiohttp

from .providers.base import FetchError, ParseError


T = TypeVar('T')

logger = logging.getLogger(__name__)

# Far enough in the past that a fresh cache is always stale
NEVER = datetime.min.replace(tzinfo=timezone.utc)


class TimedCache(Generic[T]):
    """A value with a last-refresh timestamp and a time-to-live
    
    The value is only ever replaced wholesale, so readers may use it at any
    time. Staleness decides whether a refresh is attempted, never whether
    the current value is served.
    """
    
    def __init__(self, ttl: timedelta, default: T, name: str = "cache"):
        self.ttl = ttl
        self.value: T = default
        self.last_refresh: datetime = NEVER
        self.name = name
        self._has_data = False
    
    @staticmethod
    def _now(now: Optional[datetime]) -> datetime:
        return now if now is not None else datetime.now(timezone.utc)
    
    @property
    def has_data(self) -> bool:
        """True once at least one refresh has succeeded"""
        return self._has_data
    
    def age(self, now: Optional[datetime] = None) -> timedelta:
        """Time elapsed since the last successful refresh"""
        return self._now(now) - self.last_refresh
    
    def is_stale(self, now: Optional[datetime] = None) -> bool:
        """Check whether the cached value is older than the TTL"""
        return self.age(now) > self.ttl
    
    def refresh(self, new_value: T, now: Optional[datetime] = None):
        """Replace the value; only call this after a successful fetch"""
        self.value = new_value
        self.last_refresh = self._now(now)
        self._has_data = True
    
    async def refresh_if_stale(self, fetch: Callable[[], Awaitable[T]],
                               now: Optional[datetime] = None) -> bool:
        """Refresh from fetch() when stale. Returns True if the value was replaced.
        
        Fetch and parse failures are logged and dropped; last_refresh is left
        alone so the next call tries again.
        """
        if not self.is_stale(now):
            return False
        
        logger.info(f"Refreshing {self.name} (age {self.age(now)})")
        try:
            new_value = await fetch()
        except (FetchError, ParseError, asyncio.TimeoutError, aiohttp.ClientError) as e:
            logger.warning(f"Refresh of {self.name} failed, keeping previous data: {e}")
            return False
        
        if new_value is None or (hasattr(new_value, '__len__') and len(new_value) == 0):
            logger.warning(f"Refresh of {self.name} returned no data, keeping previous data")
            return False
        
        self.refresh(new_value, now)
        logger.info(f"Refreshed {self.name}")
        return True
