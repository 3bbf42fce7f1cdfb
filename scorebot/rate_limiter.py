#!/usr/bin/env python3
"""
Rate limiting functionality for the Score Bot
Spaces out transmissions so multi-part replies don't flood the mesh
"""

import asyncio
import time


class RateLimiter:
    """Per-user rate limiting for incoming commands"""

    def __init__(self, seconds: int):
        self.seconds = seconds
        self.last_seen = {}

    def can_process(self, user_id: str) -> bool:
        """Check if a command from this user may be handled now"""
        return time.time() - self.last_seen.get(user_id, 0) >= self.seconds

    def time_until_next(self, user_id: str) -> float:
        elapsed = time.time() - self.last_seen.get(user_id, 0)
        return max(0, self.seconds - elapsed)

    def record(self, user_id: str):
        self.last_seen[user_id] = time.time()


class BotTxRateLimiter:
    """Rate limiting for bot transmission to prevent network overload"""

    def __init__(self, seconds: float = 1.0):
        self.seconds = seconds
        self.last_tx = 0

    def can_tx(self) -> bool:
        """Check if bot can transmit a message"""
        return time.time() - self.last_tx >= self.seconds

    def time_until_next_tx(self) -> float:
        """Get time until next allowed transmission"""
        elapsed = time.time() - self.last_tx
        return max(0, self.seconds - elapsed)

    def record_tx(self):
        """Record that bot transmitted a message"""
        self.last_tx = time.time()

    async def wait_for_tx(self):
        """Wait until bot can transmit (async)"""
        while not self.can_tx():
            wait_time = self.time_until_next_tx()
            if wait_time > 0:
                await asyncio.sleep(wait_time + 0.05)  # Small buffer
