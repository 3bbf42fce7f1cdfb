#!/usr/bin/env python3
"""
Command management functionality for the Score Bot
Dispatches messages to command plugins and sends their replies over the mesh
"""

import traceback
from typing import List, Dict, Optional, Sequence
from meshcore import EventType
from meshcore_cli.meshcore_cli import send_msg, send_chan_msg

from .models import MeshMessage
from .plugin_loader import PluginLoader
from .commands.base_command import BaseCommand


class CommandManager:
    """Manages all bot commands and responses using dynamic plugin loading"""

    def __init__(self, bot):
        self.bot = bot
        self.logger = bot.logger

        self.banned_users = self.load_banned_users()
        self.monitor_channels = self.load_monitor_channels()

        self.plugin_loader = PluginLoader(bot)
        self.commands: Dict[str, BaseCommand] = self.plugin_loader.load_all_plugins()

        self.logger.info(f"CommandManager initialized with {len(self.commands)} plugins")

    def load_banned_users(self) -> List[str]:
        """Load banned users from config"""
        banned = self.bot.config.get('Banned_Users', 'banned_users', fallback='')
        return [user.strip() for user in banned.split(',') if user.strip()]

    def load_monitor_channels(self) -> List[str]:
        """Load monitored channels from config"""
        channels = self.bot.config.get('Channels', 'monitor_channels', fallback='')
        return [channel.strip() for channel in channels.split(',') if channel.strip()]

    async def send_dm(self, recipient_id: str, content: str) -> bool:
        """Send a direct message using meshcore-cli"""
        if not self.bot.connected or not self.bot.meshcore:
            return False

        await self.bot.bot_tx_rate_limiter.wait_for_tx()

        try:
            contact = self.bot.meshcore.get_contact_by_name(recipient_id)
            if not contact:
                self.logger.error(f"Contact not found for name: {recipient_id}")
                return False

            contact_name = contact.get('name', contact.get('adv_name', recipient_id))
            self.logger.info(f"Sending DM to {contact_name}: {content}")

            result = await send_msg(self.bot.meshcore, contact, content)
            self.bot.bot_tx_rate_limiter.record_tx()

            if not result:
                self.logger.error("Failed to send DM: No result returned")
                return False
            if getattr(result, 'type', None) == EventType.ERROR:
                self.logger.error(f"Failed to send DM: {result.payload}")
                return False
            self.logger.info(f"Successfully sent DM to {contact_name}")
            return True

        except Exception as e:
            self.logger.error(f"Failed to send DM: {e}")
            return False

    async def send_channel_message(self, channel: str, content: str) -> bool:
        """Send a channel message using meshcore-cli"""
        if not self.bot.connected or not self.bot.meshcore:
            return False

        channel_num = self.bot.channel_manager.get_channel_number(channel)
        if channel_num is None:
            self.logger.error(f"Cannot send to unknown channel {channel}")
            return False

        await self.bot.bot_tx_rate_limiter.wait_for_tx()

        try:
            self.logger.info(f"Sending channel message to {channel} (channel {channel_num}): {content}")
            result = await send_chan_msg(self.bot.meshcore, channel_num, content)
            self.bot.bot_tx_rate_limiter.record_tx()

            if result and result.type != EventType.ERROR:
                self.logger.info(f"Successfully sent channel message to {channel} (channel {channel_num})")
                return True
            self.logger.error(f"Failed to send channel message: {result.payload if result else 'No result'}")
            return False

        except Exception as e:
            self.logger.error(f"Failed to send channel message: {e}")
            return False

    async def send_response(self, message: MeshMessage, content: str) -> bool:
        """Send a single message back where the command came from"""
        if message.is_dm:
            return await self.send_dm(message.sender_id, content)
        return await self.send_channel_message(message.channel, content)

    async def send_chunks(self, message: MeshMessage, chunks: Sequence[str]) -> List[bool]:
        """Send each chunk as its own message, in order

        A failed chunk is logged and the remaining chunks are still sent.
        Returns the outcome of every chunk.
        """
        results = []
        for index, chunk in enumerate(chunks, 1):
            sent = await self.send_response(message, chunk)
            if not sent:
                self.logger.warning(f"Chunk {index}/{len(chunks)} was not delivered")
            results.append(sent)
        return results

    def find_command(self, message: MeshMessage) -> Optional[BaseCommand]:
        for command in self.commands.values():
            if command.matches_keyword(message):
                return command
        return None

    async def execute_commands(self, message: MeshMessage) -> bool:
        """Run the command plugin matching the message, if any"""
        command = self.find_command(message)
        if command is None:
            return False

        self.logger.info(f"Command '{command.name}' matched, executing")

        if not command.can_execute(message):
            if command.requires_dm and not message.is_dm:
                await self.send_response(message, f"Command '{command.name}' can only be used in DMs")
            else:
                remaining = command.get_remaining_cooldown()
                if remaining > 0:
                    await self.send_response(message, f"Command '{command.name}' is on cooldown. Wait {remaining} seconds.")
            return True

        try:
            command._record_execution()
            await command.execute(message)
        except Exception as e:
            self.logger.error(f"Error executing command '{command.name}': {e}")
            self.logger.error(traceback.format_exc())
        return True

    def get_plugin_by_keyword(self, keyword: str) -> Optional[BaseCommand]:
        return self.plugin_loader.get_plugin_by_keyword(keyword)

    def get_plugin_by_name(self, name: str) -> Optional[BaseCommand]:
        return self.plugin_loader.get_plugin_by_name(name)
