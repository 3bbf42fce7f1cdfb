#!/usr/bin/env python3
"""
Strava command for the Score Bot
Weekly leaderboard of a Strava club, sortable by several metrics
"""

from dataclasses import replace
from datetime import timedelta
from typing import Dict, List

from .base_command import BaseCommand
from ..models import MeshMessage
from ..providers.strava import StravaClubProvider
from ..ranking import StravaAthleteEntry
from ..timed_cache import TimedCache


DEFAULT_SORT = 'distance'

SORT_ALIASES = {
    'elev': 'elevation', 'elevation': 'elevation', 'vertical': 'elevation', 'climb': 'elevation', 'climbing': 'elevation',
    'distance': 'distance', 'dist': 'distance', 'length': 'distance', 'len': 'distance',
    'moving': 'moving', 'time': 'moving', 'duration': 'moving',
    'pace': 'pace', 'speed': 'pace', 'velocity': 'pace',
    'slope': 'slope', 'steep': 'slope', 'steepness': 'slope',
}

# Every sort is highest first
SORT_KEYS = {
    'distance': lambda athlete: athlete.distance,
    'elevation': lambda athlete: athlete.elev_gain,
    'moving': lambda athlete: athlete.moving_time,
    'pace': lambda athlete: athlete.velocity,
    'slope': lambda athlete: athlete.slope,
}


class StravaCommand(BaseCommand):
    """Handles the strava command"""

    # Plugin metadata
    name = "strava"
    keywords = ['strava']
    description = "Strava club leaderboard. Usage: strava [distance|elevation|time|pace|slope]"
    category = "sports"

    PREFIX = "[STRAVA] "

    def __init__(self, bot, provider=None):
        super().__init__(bot)
        section = 'Strava_Command'
        self.enabled = self.get_config_value(section, 'enabled', fallback=False, value_type='bool')
        self.top = self.get_config_value(section, 'top', fallback=10, value_type='int')
        ttl = timedelta(minutes=self.get_config_value(section, 'cache_minutes', fallback=2, value_type='int'))
        timeout = self.get_config_value('Bot', 'http_timeout', fallback=10, value_type='int')
        self.ignored = set()
        for athlete_id in self.get_config_value(section, 'ignored_athletes', fallback=[], value_type='list'):
            if athlete_id.isdecimal():
                self.ignored.add(int(athlete_id))
            else:
                self.logger.warning(f"Ignoring invalid Strava athlete id '{athlete_id}'")
        self.names = self.load_names()

        self.provider = provider or StravaClubProvider(
            self.get_config_value(section, 'club_id', fallback=''), timeout_seconds=timeout,
        )
        self.cache = TimedCache(ttl, [], name="strava leaderboard")

    def load_names(self) -> Dict[int, str]:
        """Read [Strava_Names] entries of the form: athlete_id = nick"""
        names = {}
        if not self.bot.config.has_section('Strava_Names'):
            return names
        for athlete_id, nick in self.bot.config.items('Strava_Names'):
            if athlete_id.isdecimal() and nick.strip():
                names[int(athlete_id)] = nick.strip()
            else:
                self.logger.warning(f"Skipping Strava name entry '{athlete_id}'")
        return names

    def parse_sort(self, text: str) -> str:
        word = text.strip().lower()
        if not word:
            return DEFAULT_SORT
        sort = SORT_ALIASES.get(word)
        if sort is None:
            self.logger.debug(f"Unknown Strava sort '{word}', using {DEFAULT_SORT}")
            return DEFAULT_SORT
        return sort

    def leaderboard(self, athletes: List[StravaAthleteEntry], sort: str) -> List[StravaAthleteEntry]:
        """Renamed, filtered and re-ranked copy of the cached leaderboard"""
        shown = [
            replace(athlete, label=self.names.get(athlete.athlete_id, athlete.label))
            for athlete in athletes
            if athlete.athlete_id not in self.ignored
        ]
        shown.sort(key=SORT_KEYS[sort], reverse=True)
        return [replace(athlete, rank=position) for position, athlete in enumerate(shown, 1)]

    def matches_keyword(self, message: MeshMessage) -> bool:
        return self.enabled and super().matches_keyword(message)

    async def execute(self, message: MeshMessage) -> bool:
        """Execute the strava command"""
        await self.cache.refresh_if_stale(self.provider.fetch)
        formatter = self.bot.formatter
        if not self.cache.has_data:
            return await self.send_response(message, self.PREFIX + formatter.no_data_message("leaderboard"))

        sort = self.parse_sort(self.get_argument(message))
        athletes = self.leaderboard(self.cache.value, sort)
        if not athletes:
            return await self.send_response(message, self.PREFIX + "Nobody on the leaderboard yet")

        rendered = formatter.render_ranking(athletes[:self.top])
        return await self.send_messages(message, formatter.to_messages(rendered, separator="; ", prefix=self.PREFIX))
