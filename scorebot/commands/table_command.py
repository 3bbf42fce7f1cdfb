#!/usr/bin/env python3
"""
League table command for the Score Bot
Standings scraped from soccerway, one cached table per configured league
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional

from .base_command import BaseCommand
from ..models import MeshMessage
from ..providers.soccerway import SoccerwayTableProvider
from ..ranking import find_rank_by_label, window_around
from ..timed_cache import TimedCache


@dataclass
class League:
    name: str
    provider: SoccerwayTableProvider
    cache: TimedCache


class TableCommand(BaseCommand):
    """Handles the table command"""

    # Plugin metadata
    name = "table"
    keywords = ['table', 'standings', 'ranking']
    description = "League table. Usage: table <league> [team|position]"
    category = "sports"

    def __init__(self, bot):
        super().__init__(bot)
        self.enabled = self.get_config_value('Table_Command', 'enabled', fallback=True, value_type='bool')
        self.cache_minutes = self.get_config_value('Table_Command', 'cache_minutes', fallback=30, value_type='int')
        self.timeout = self.get_config_value('Bot', 'http_timeout', fallback=10, value_type='int')
        self.leagues: Dict[str, League] = {}
        self.aliases: Dict[str, str] = {}
        self.load_leagues()

    def load_leagues(self):
        """Read [Table_Leagues] entries of the form: name = url | alias, alias"""
        if not self.bot.config.has_section('Table_Leagues'):
            return
        for name, value in self.bot.config.items('Table_Leagues'):
            url, _, alias_text = value.partition('|')
            url = url.strip()
            if not url:
                self.logger.warning(f"League {name} has no url, skipping")
                continue
            self.add_league(name, SoccerwayTableProvider(url, timeout_seconds=self.timeout),
                            [alias.strip() for alias in alias_text.split(',') if alias.strip()])

    def add_league(self, name: str, provider, aliases: List[str] = ()):
        key = name.lower()
        self.leagues[key] = League(
            name=key,
            provider=provider,
            cache=TimedCache(timedelta(minutes=self.cache_minutes), [], name=f"{key} table"),
        )
        self.aliases[key] = key
        for alias in aliases:
            self.aliases[alias.lower()] = key

    def find_league(self, word: str) -> Optional[League]:
        key = self.aliases.get(word.lower())
        return self.leagues.get(key) if key else None

    def matches_keyword(self, message: MeshMessage) -> bool:
        return self.enabled and super().matches_keyword(message)

    async def execute(self, message: MeshMessage) -> bool:
        """Execute the table command"""
        argument = self.get_argument(message)
        league_word, _, selector = argument.partition(' ')
        selector = selector.strip()

        if not league_word:
            return await self.send_response(message, f"Usage: table <league> [team|position]. Leagues: {self.league_names()}")

        league = self.find_league(league_word)
        if league is None:
            return await self.send_response(message, f"Unknown league '{league_word}'. Leagues: {self.league_names()}")

        await league.cache.refresh_if_stale(league.provider.fetch)
        formatter = self.bot.formatter
        prefix = f"[{league.name.upper()}] "
        if not league.cache.has_data:
            return await self.send_response(message, prefix + formatter.no_data_message("table"))

        table = league.cache.value
        if not selector:
            entries = table
        else:
            rank = int(selector) if selector.isdecimal() else find_rank_by_label(table, selector)
            if rank is None:
                return await self.send_response(message, f"{prefix}No team matching '{selector}'")
            entries = window_around(table, rank)

        rendered = formatter.render_ranking(entries)
        return await self.send_messages(message, formatter.to_messages(rendered, separator="; ", prefix=prefix))

    def league_names(self) -> str:
        return ", ".join(sorted(self.leagues)) or "none configured"
