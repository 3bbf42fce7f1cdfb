#!/usr/bin/env python3
"""
Elo command for the Score Bot
Club Elo ratings from clubelo.com
"""

from datetime import timedelta

from .base_command import BaseCommand
from ..models import MeshMessage
from ..providers.clubelo import ClubEloProvider
from ..ranking import find_entries, window_around
from ..timed_cache import TimedCache


class EloCommand(BaseCommand):
    """Handles the elo command"""

    # Plugin metadata
    name = "elo"
    keywords = ['elo']
    description = "Club Elo ranking. Usage: elo (top), elo <rank>, elo <club>"
    category = "sports"

    PREFIX = "[ELO] "
    NOT_FOUND = "No club found for your query"

    def __init__(self, bot, provider=None):
        super().__init__(bot)
        self.enabled = self.get_config_value('Elo_Command', 'enabled', fallback=True, value_type='bool')
        self.top = self.get_config_value('Elo_Command', 'top', fallback=15, value_type='int')
        cache_hours = self.get_config_value('Elo_Command', 'cache_hours', fallback=12, value_type='int')
        self.provider = provider or ClubEloProvider(
            timeout_seconds=self.get_config_value('Bot', 'http_timeout', fallback=10, value_type='int')
        )
        self.cache = TimedCache(timedelta(hours=cache_hours), [], name="elo ranking")

    def matches_keyword(self, message: MeshMessage) -> bool:
        return self.enabled and super().matches_keyword(message)

    def select(self, argument: str):
        """Entries to show for the argument: top list, window around a rank, or search results"""
        ranking = self.cache.value
        if not argument:
            return ranking[:self.top]
        if argument.isdecimal():
            return window_around(ranking, int(argument))
        return find_entries(ranking, argument)

    async def execute(self, message: MeshMessage) -> bool:
        """Execute the elo command"""
        await self.cache.refresh_if_stale(self.provider.fetch)
        formatter = self.bot.formatter
        if not self.cache.has_data:
            return await self.send_response(message, self.PREFIX + formatter.no_data_message("Elo"))

        entries = self.select(self.get_argument(message))
        if not entries:
            return await self.send_response(message, self.PREFIX + self.NOT_FOUND)

        rendered = formatter.render_ranking(entries)
        return await self.send_messages(message, formatter.to_messages(rendered, separator="; ", prefix=self.PREFIX))
