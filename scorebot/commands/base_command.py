#!/usr/bin/env python3
"""
Base command class for all Score Bot commands
Provides common functionality and interface for command implementations
"""

import time
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
from ..models import MeshMessage


class BaseCommand(ABC):
    """Base class for all bot commands - Plugin Interface"""

    # Plugin metadata - to be overridden by subclasses
    name: str = ""
    keywords: List[str] = []  # All trigger words for this command (including name and aliases)
    description: str = ""
    requires_dm: bool = False
    cooldown_seconds: int = 0
    category: str = "general"

    def __init__(self, bot):
        self.bot = bot
        self.logger = bot.logger
        self._last_execution_time = 0

    @abstractmethod
    async def execute(self, message: MeshMessage) -> bool:
        """Execute the command with the given message"""
        pass

    def get_help_text(self) -> str:
        """Get help text for this command"""
        return self.description or "No help available for this command."

    @property
    def command_prefix(self) -> str:
        return self.bot.config.get('Bot', 'command_prefix', fallback='!')

    def get_config_value(self, section: str, key: str, fallback: Any = None, value_type: str = 'str') -> Any:
        """Read a value from this plugin's config section"""
        config = self.bot.config
        if not config.has_option(section, key):
            return fallback
        if value_type == 'int':
            return config.getint(section, key, fallback=fallback)
        if value_type == 'float':
            return config.getfloat(section, key, fallback=fallback)
        if value_type == 'bool':
            return config.getboolean(section, key, fallback=fallback)
        if value_type == 'list':
            raw = config.get(section, key, fallback='')
            return [item.strip() for item in raw.split(',') if item.strip()]
        return config.get(section, key, fallback=fallback)

    def can_execute(self, message: MeshMessage) -> bool:
        """Check if this command can be executed with the given message"""
        if self.requires_dm and not message.is_dm:
            return False

        if self.cooldown_seconds > 0:
            if (time.time() - self._last_execution_time) < self.cooldown_seconds:
                return False

        return True

    def get_metadata(self) -> Dict[str, Any]:
        """Get plugin metadata for discovery and registration"""
        return {
            'name': self.name,
            'keywords': self.keywords,
            'description': self.description,
            'requires_dm': self.requires_dm,
            'cooldown_seconds': self.cooldown_seconds,
            'category': self.category,
            'class_name': self.__class__.__name__,
            'module_name': self.__class__.__module__
        }

    def _record_execution(self):
        """Record the execution time for cooldown tracking"""
        self._last_execution_time = time.time()

    def get_remaining_cooldown(self) -> int:
        """Get remaining cooldown time in seconds"""
        if self.cooldown_seconds <= 0:
            return 0
        remaining = self.cooldown_seconds - (time.time() - self._last_execution_time)
        return max(0, int(remaining))

    def split_command(self, message: MeshMessage) -> Optional[tuple]:
        """(trigger word, argument text) when the message is a prefixed command"""
        content = message.content.strip()
        prefix = self.command_prefix
        if prefix:
            if not content.startswith(prefix):
                return None
            content = content[len(prefix):]
        word, _, argument = content.partition(' ')
        return word.lower(), argument.strip()

    def matches_keyword(self, message: MeshMessage) -> bool:
        """The first word after the prefix must be one of the keywords"""
        parts = self.split_command(message)
        if not parts:
            return False
        return parts[0] in (keyword.lower() for keyword in self.keywords)

    def get_argument(self, message: MeshMessage) -> str:
        parts = self.split_command(message)
        return parts[1] if parts else ""

    def should_execute(self, message: MeshMessage) -> bool:
        """Check if this command should execute for the given message"""
        return self.matches_keyword(message) and self.can_execute(message)

    async def send_response(self, message: MeshMessage, content: str) -> bool:
        """Send one reply, chunked to fit the transport"""
        results = await self.bot.command_manager.send_chunks(
            message, self.bot.formatter.chunk(content)
        )
        return bool(results) and all(results)

    async def send_messages(self, message: MeshMessage, messages: List[str]) -> bool:
        """Send pre-packed messages in order; one failing does not stop the rest"""
        results = await self.bot.command_manager.send_chunks(message, messages)
        return bool(results) and all(results)
