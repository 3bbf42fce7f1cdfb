#!/usr/bin/env python3
"""
Games command for the Score Bot
Live scores and fixtures, filtered with a small query language
"""

from datetime import datetime, timedelta

from .base_command import BaseCommand
from ..games_filter import HierarchyFilter
from ..games_query import QueryParser
from ..models import GameTree, MeshMessage
from ..providers.espn import DEFAULT_LEAGUES, EspnFixturesProvider
from ..timed_cache import TimedCache


class GamesCommand(BaseCommand):
    """Handles the games command and its whole-message aliases"""

    # Plugin metadata
    name = "games"
    keywords = ['games', 'game', 'scores']
    description = "Football games. Usage: games [teams] [--country X] [--competition Y] [@today|@live|@yday|@done|@soon] [@bytime]"
    category = "sports"

    NO_RESULTS = "Your !games query returned no results."
    NOTHING_TODAY = "I've got nothing today. Go outside and enjoy the weather."

    def __init__(self, bot, provider=None):
        super().__init__(bot)
        self.enabled = self.get_config_value('Games_Command', 'enabled', fallback=True, value_type='bool')
        cache_minutes = self.get_config_value('Games_Command', 'cache_minutes', fallback=2, value_type='int')
        self.aliases = [alias.lower() for alias in
                        self.get_config_value('Games_Command', 'aliases', fallback=['epl', 'genk'], value_type='list')]

        self.provider = provider or EspnFixturesProvider(
            self.load_leagues(),
            timeout_seconds=self.get_config_value('Bot', 'http_timeout', fallback=10, value_type='int'),
        )
        self.cache = TimedCache(timedelta(minutes=cache_minutes), GameTree(), name="games")
        self.parser = QueryParser()
        self.filter = HierarchyFilter(
            bot.timezone,
            window_start_hour=self.get_config_value('Games_Command', 'window_hours_back', fallback=10, value_type='int'),
            window_end_hour=self.get_config_value('Games_Command', 'window_hours_ahead', fallback=16, value_type='int'),
        )

    def load_leagues(self):
        """Configured ESPN league codes with their display names"""
        codes = self.get_config_value('Games_Command', 'leagues', fallback=None, value_type='list')
        if not codes:
            return dict(DEFAULT_LEAGUES)
        leagues = {}
        for code in codes:
            if code in DEFAULT_LEAGUES:
                leagues[code] = DEFAULT_LEAGUES[code]
            else:
                self.logger.warning(f"No display name for league {code}, using the code")
                leagues[code] = (code, code)
        return leagues

    def matches_keyword(self, message: MeshMessage) -> bool:
        if not self.enabled:
            return False
        if super().matches_keyword(message):
            return True
        parts = self.split_command(message)
        return bool(parts) and parts[0] in self.aliases

    def get_query_text(self, message: MeshMessage) -> str:
        """Argument text, with a leading alias turned back into a query term"""
        word, argument = self.split_command(message) or ('', '')
        if word in self.aliases:
            return f"{word} {argument}".strip()
        return argument

    async def execute(self, message: MeshMessage) -> bool:
        """Execute the games command"""
        await self.cache.refresh_if_stale(self.provider.fetch)
        if not self.cache.has_data:
            return await self.send_response(message, self.bot.formatter.no_data_message("games"))

        now = datetime.now(self.bot.timezone)
        text = self.get_query_text(message)
        if not text:
            return await self.send_response(message, self.suggest_places(now))

        query = self.parser.parse(text)
        self.logger.debug(f"Games query: {query}")
        tree = self.filter.apply(self.cache.value, query, now)
        total = self.filter.count_items(tree)
        self.logger.debug(f"Games query matched {total} games")
        if not total:
            return await self.send_response(message, self.NO_RESULTS)

        rows = self.filter.flatten(tree, query.display_order)

        formatter = self.bot.formatter
        rendered = formatter.render_games(rows, now)
        return await self.send_messages(message, formatter.to_messages(rendered))

    def suggest_places(self, now: datetime) -> str:
        """Countries with games in the sliding window, for an empty query"""
        window = self.filter.sliding_window(self.cache.value, now)
        names = [country.name for country in window.countries]
        if not names:
            return self.NOTHING_TODAY
        return f"Check out some places: {', '.join(names)}"
