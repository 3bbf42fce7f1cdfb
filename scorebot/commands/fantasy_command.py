#!/usr/bin/env python3
"""
Fantasy command for the Score Bot
Leaderboards of a private UEFA fantasy league and match predictor league
"""

from datetime import timedelta

from .base_command import BaseCommand
from ..models import MeshMessage
from ..providers.uefa import UefaFantasyProvider, UefaPredictorProvider
from ..timed_cache import TimedCache


FANTASY_KEYWORDS = ['fantasy', 'ufpl', 'uefafantasy', 'fantasyuefa', 'efpl']
PREDICTOR_KEYWORDS = ['predict', 'predictor', 'uefapredict', 'uefapredictor']


class FantasyCommand(BaseCommand):
    """Handles the fantasy and predictor leaderboards"""

    # Plugin metadata
    name = "fantasy"
    keywords = FANTASY_KEYWORDS + PREDICTOR_KEYWORDS
    description = "UEFA fantasy (fantasy) and match predictor (predict) league rankings"
    category = "sports"

    FANTASY_PREFIX = "[EURO FANTASY] "
    PREDICTOR_PREFIX = "[EURO PREDICTOR] "

    def __init__(self, bot, fantasy_provider=None, predictor_provider=None):
        super().__init__(bot)
        section = 'Fantasy_Command'
        self.enabled = self.get_config_value(section, 'enabled', fallback=False, value_type='bool')
        self.top = self.get_config_value(section, 'top', fallback=15, value_type='int')
        ttl = timedelta(minutes=self.get_config_value(section, 'cache_minutes', fallback=3, value_type='int'))
        timeout = self.get_config_value('Bot', 'http_timeout', fallback=10, value_type='int')
        cookie = self.get_config_value(section, 'cookie', fallback='')
        auth_header = self.get_config_value(section, 'auth_header', fallback='')

        self.fantasy_provider = fantasy_provider or UefaFantasyProvider(
            self.get_config_value(section, 'fantasy_page_url', fallback=''),
            self.get_config_value(section, 'fantasy_api_url', fallback=''),
            cookie=cookie, auth_header=auth_header, timeout_seconds=timeout,
        )
        self.predictor_provider = predictor_provider or UefaPredictorProvider(
            self.get_config_value(section, 'predictor_page_url', fallback=''),
            self.get_config_value(section, 'predictor_api_url', fallback=''),
            cookie=cookie, auth_header=auth_header, timeout_seconds=timeout,
        )
        self.fantasy_cache = TimedCache(ttl, [], name="fantasy ranking")
        self.predictor_cache = TimedCache(ttl, [], name="predictor ranking")

    def matches_keyword(self, message: MeshMessage) -> bool:
        return self.enabled and super().matches_keyword(message)

    async def execute(self, message: MeshMessage) -> bool:
        """Execute the fantasy or predictor command"""
        word, _ = self.split_command(message)
        if word in PREDICTOR_KEYWORDS:
            cache, provider, prefix = self.predictor_cache, self.predictor_provider, self.PREDICTOR_PREFIX
        else:
            cache, provider, prefix = self.fantasy_cache, self.fantasy_provider, self.FANTASY_PREFIX

        await cache.refresh_if_stale(provider.fetch)
        formatter = self.bot.formatter
        if not cache.has_data:
            return await self.send_response(message, prefix + formatter.no_data_message("ranking"))

        rendered = formatter.render_ranking(cache.value[:self.top])
        return await self.send_messages(message, formatter.to_messages(rendered, separator="; ", prefix=prefix))
