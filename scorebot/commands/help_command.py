#!/usr/bin/env python3
"""
Help command for the Score Bot
Lists the available commands, or details for one of them
"""

from .base_command import BaseCommand
from ..models import MeshMessage


class HelpCommand(BaseCommand):
    """Handles the help command"""

    # Plugin metadata
    name = "help"
    keywords = ['help']
    description = "Shows commands. Use 'help <command>' for details."
    category = "basic"

    async def execute(self, message: MeshMessage) -> bool:
        """Execute the help command"""
        command_name = self.get_argument(message).lstrip(self.command_prefix).lower()
        if command_name:
            return await self.send_response(message, self.get_specific_help(command_name))
        return await self.send_response(message, self.get_general_help())

    def get_specific_help(self, command_name: str) -> str:
        """Get help text for a specific command, by name or keyword"""
        manager = self.bot.command_manager
        command = manager.get_plugin_by_name(command_name) or manager.get_plugin_by_keyword(command_name)
        if command:
            return f"Help {command_name}: {command.get_help_text()}"
        return f"Unknown: {command_name}. Commands: {self.get_available_commands_list()}"

    def get_general_help(self) -> str:
        return f"Commands: {self.get_available_commands_list()}. Use {self.command_prefix}help <command> for details."

    def get_available_commands_list(self) -> str:
        """Prefixed names of all loaded commands, sports first"""
        commands = sorted((command for command in self.bot.command_manager.commands.values()
                           if getattr(command, 'enabled', True)),
                          key=lambda command: (command.category != "sports", command.name))
        return ", ".join(f"{self.command_prefix}{command.name}" for command in commands)
