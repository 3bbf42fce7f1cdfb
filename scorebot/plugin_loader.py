#!/usr/bin/env python3
"""
Plugin loader for dynamic command discovery and loading
Handles scanning, loading, and registering command plugins
"""

import importlib
import inspect
import os
from pathlib import Path
from typing import Dict, List, Any, Optional

from .commands.base_command import BaseCommand


class PluginLoader:
    """Handles dynamic loading and discovery of command plugins"""

    package = "scorebot.commands"

    def __init__(self, bot, commands_dir: str = None):
        self.bot = bot
        self.logger = bot.logger
        self.commands_dir = commands_dir or os.path.join(os.path.dirname(__file__), 'commands')
        self.loaded_plugins: Dict[str, BaseCommand] = {}
        self.plugin_metadata: Dict[str, Dict[str, Any]] = {}
        self.keyword_mappings: Dict[str, str] = {}  # keyword -> plugin_name

    def discover_plugins(self) -> List[str]:
        """Discover all Python files in the commands directory that could be plugins"""
        commands_path = Path(self.commands_dir)
        if not commands_path.exists():
            self.logger.error(f"Commands directory does not exist: {self.commands_dir}")
            return []

        plugin_files = sorted(
            file_path.stem for file_path in commands_path.glob("*.py")
            if file_path.name not in ("__init__.py", "base_command.py")
        )
        self.logger.info(f"Discovered {len(plugin_files)} potential plugin files: {plugin_files}")
        return plugin_files

    def load_plugin(self, plugin_name: str) -> Optional[BaseCommand]:
        """Load a single plugin by module name"""
        module_path = f"{self.package}.{plugin_name}"
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            self.logger.error(f"Failed to import plugin {plugin_name}: {e}")
            return None

        # The command class is the BaseCommand subclass defined in the module itself
        command_class = None
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if issubclass(obj, BaseCommand) and obj is not BaseCommand and obj.__module__ == module_path:
                command_class = obj
                break

        if not command_class:
            self.logger.warning(f"No valid command class found in {plugin_name}")
            return None

        plugin_instance = command_class(self.bot)
        if not plugin_instance.name:
            plugin_instance.name = command_class.__name__.lower().replace('command', '')

        self.logger.info(f"Successfully loaded plugin: {plugin_instance.name} from {plugin_name}")
        return plugin_instance

    def load_all_plugins(self) -> Dict[str, BaseCommand]:
        """Load all discovered plugins"""
        loaded_plugins = {}

        for plugin_file in self.discover_plugins():
            plugin_instance = self.load_plugin(plugin_file)
            if plugin_instance:
                metadata = plugin_instance.get_metadata()
                plugin_name = metadata['name']
                loaded_plugins[plugin_name] = plugin_instance
                self.plugin_metadata[plugin_name] = metadata
                self._build_keyword_mappings(plugin_name, metadata)

        self.loaded_plugins = loaded_plugins
        self.logger.info(f"Loaded {len(loaded_plugins)} plugins: {list(loaded_plugins.keys())}")
        return loaded_plugins

    def _build_keyword_mappings(self, plugin_name: str, metadata: Dict[str, Any]):
        for keyword in metadata.get('keywords', []):
            existing = self.keyword_mappings.get(keyword.lower())
            if existing and existing != plugin_name:
                self.logger.warning(f"Keyword '{keyword}' of {plugin_name} already used by {existing}")
                continue
            self.keyword_mappings[keyword.lower()] = plugin_name

    def get_plugin_by_keyword(self, keyword: str) -> Optional[BaseCommand]:
        """Get a plugin instance by keyword"""
        plugin_name = self.keyword_mappings.get(keyword.lower())
        if plugin_name:
            return self.loaded_plugins.get(plugin_name)
        return None

    def get_plugin_by_name(self, name: str) -> Optional[BaseCommand]:
        return self.loaded_plugins.get(name)
