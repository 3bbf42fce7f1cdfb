#!/usr/bin/env python3
"""
Message handling functionality for the Score Bot
Turns MeshCore events into MeshMessages and feeds them to the command manager one at a time
"""

import asyncio
from typing import Optional

from .models import MeshMessage


class MessageHandler:
    """Queues incoming messages and processes them serially"""

    def __init__(self, bot):
        self.bot = bot
        self.logger = bot.logger
        self.queue: asyncio.Queue = asyncio.Queue()
        self._dispatcher: Optional[asyncio.Task] = None

    def start(self):
        """Start the dispatcher task; must be called from the running loop"""
        if self._dispatcher is None or self._dispatcher.done():
            self._dispatcher = asyncio.create_task(self.dispatch_forever())

    async def stop(self):
        if self._dispatcher:
            self._dispatcher.cancel()
            try:
                await self._dispatcher
            except asyncio.CancelledError:
                pass
            self._dispatcher = None

    async def dispatch_forever(self):
        """Handle queued messages one by one, so plugin state is never touched concurrently"""
        while True:
            message = await self.queue.get()
            try:
                await self.process_message(message)
            except Exception as e:
                self.logger.error(f"Error processing message from {message.sender_id}: {e}")
            finally:
                self.queue.task_done()

    async def handle_contact_message(self, event, metadata=None):
        """Handle incoming contact message (DM)"""
        payload = event.payload
        self.logger.debug(f"Contact message payload: {payload}")

        sender_id = payload.get('pubkey_prefix', '')
        contact = self._find_contact(sender_id)
        if contact:
            sender_id = contact.get('adv_name', contact.get('name', sender_id))

        text = payload.get('text', '')
        self.logger.info(f"Received DM from {sender_id}: {text}")

        await self.queue.put(MeshMessage(
            content=text,
            sender_id=sender_id,
            is_dm=True,
            timestamp=payload.get('sender_timestamp'),
        ))

    async def handle_channel_message(self, event, metadata=None):
        """Handle incoming channel message"""
        payload = event.payload
        channel_idx = payload.get('channel_idx', 0)
        self.logger.debug(f"Channel message payload: {payload}")

        text = payload.get('text', '')
        sender_id, content = self.split_sender(text)
        channel_name = self.bot.channel_manager.get_channel_name(channel_idx)

        self.logger.info(f"Received channel message ({channel_name}) from {sender_id}: {content}")

        await self.queue.put(MeshMessage(
            content=content,
            sender_id=sender_id,
            channel=channel_name,
            is_dm=False,
            timestamp=payload.get('sender_timestamp'),
        ))

    @staticmethod
    def split_sender(text: str) -> tuple:
        """Channel texts arrive as "SENDER: message"."""
        if ':' in text and not text.startswith(':'):
            sender, content = text.split(':', 1)
            if sender.strip():
                return sender.strip(), content.strip()
        return "Channel User", text

    def _find_contact(self, pubkey_prefix: str) -> Optional[dict]:
        contacts = getattr(self.bot.meshcore, 'contacts', None) or {}
        if not pubkey_prefix:
            return None
        for contact in contacts.values():
            if contact.get('public_key', '').startswith(pubkey_prefix):
                return contact
        return None

    async def process_message(self, message: MeshMessage):
        """Process a received message"""
        if not self.should_process_message(message):
            return

        if not self.bot.rate_limiter.can_process(message.sender_id or ''):
            wait_time = self.bot.rate_limiter.time_until_next(message.sender_id or '')
            self.logger.warning(f"Rate limited {message.sender_id}. Wait {wait_time:.1f} seconds")
            return

        self.logger.info(f"Processing message: {message.content}")
        if await self.bot.command_manager.execute_commands(message):
            self.bot.rate_limiter.record(message.sender_id or '')

    def should_process_message(self, message: MeshMessage) -> bool:
        """Check if message should be processed by the bot"""
        if not self.bot.config.getboolean('Bot', 'enabled', fallback=True):
            return False

        if message.sender_id and message.sender_id in self.bot.command_manager.banned_users:
            self.logger.debug(f"Ignoring message from banned user: {message.sender_id}")
            return False

        if not message.is_dm and message.channel not in self.bot.command_manager.monitor_channels:
            self.logger.debug(f"Channel {message.channel} not in monitored channels: {self.bot.command_manager.monitor_channels}")
            return False

        if message.is_dm and not self.bot.config.getboolean('Channels', 'respond_to_dms', fallback=True):
            self.logger.debug("DMs are disabled")
            return False

        return True
