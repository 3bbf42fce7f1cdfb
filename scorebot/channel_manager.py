#!/usr/bin/env python3
"""
Channel management functionality for the Score Bot
Maps channel indexes on the node to the names used in config
"""

import asyncio
from typing import Dict, Any, List, Optional
from meshcore import EventType


class ChannelManager:
    """Keeps the channel index <-> name table of the connected node"""

    def __init__(self, bot, max_channels: int = 8):
        self.bot = bot
        self.logger = bot.logger
        self.max_channels = max_channels
        self._channels_cache: Dict[int, Dict[str, Any]] = {}
        self._fetch_timeout = 2.0

    async def fetch_channels(self):
        """Read every configured channel from the node, stopping early if it stops answering"""
        self.logger.info("Fetching channels from MeshCore node...")
        self._channels_cache.clear()
        consecutive_misses = 0

        for channel_idx in range(self.max_channels):
            channel = await self._fetch_single_channel(channel_idx)
            if channel is None:
                consecutive_misses += 1
                if consecutive_misses >= 3 and channel_idx < 3:
                    self.logger.warning("Node did not answer channel requests, giving up")
                    break
                continue
            consecutive_misses = 0
            if channel.get('channel_name'):
                self._channels_cache[channel_idx] = channel
                self.logger.info(f"  Channel {channel_idx}: {channel['channel_name']}")
            await asyncio.sleep(0.1)

        if not self._channels_cache:
            self.logger.warning("No channels found on MeshCore node")

    async def _fetch_single_channel(self, channel_idx: int) -> Optional[Dict[str, Any]]:
        try:
            event = await asyncio.wait_for(
                self.bot.meshcore.commands.get_channel(channel_idx),
                timeout=self._fetch_timeout
            )
        except asyncio.TimeoutError:
            self.logger.debug(f"Timeout fetching channel {channel_idx}")
            return None

        if not event or event.type != EventType.CHANNEL_INFO:
            return None

        # An all-zero secret marks an unused slot
        channel_secret = event.payload.get('channel_secret', b'')
        if isinstance(channel_secret, bytes) and not any(channel_secret):
            return {}
        return event.payload

    def get_channels(self) -> List[Dict[str, Any]]:
        return [self._channels_cache[idx] for idx in sorted(self._channels_cache)]

    def get_channel_name(self, channel_num: int) -> str:
        """Get channel name from channel number"""
        if channel_num in self._channels_cache:
            return self._channels_cache[channel_num].get('channel_name', f"Channel{channel_num}")
        self.logger.warning(f"Channel {channel_num} not found in cached channels")
        return f"Channel{channel_num}"

    def get_channel_number(self, channel_name: str) -> Optional[int]:
        """Channel number for a name, None if unknown (0 is a valid channel)"""
        for num, channel_info in self._channels_cache.items():
            if channel_info.get('channel_name', '').lower() == channel_name.lower():
                return num

        self.logger.warning(f"Channel name '{channel_name}' not found in cached channels")
        return None
