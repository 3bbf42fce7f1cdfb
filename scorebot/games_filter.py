#!/usr/bin/env python3
"""
Filtering of the Country -> Competition -> Game tree for the games command
"""

from datetime import datetime, timedelta, tzinfo
from typing import Callable, List, Optional

import pytz

from .games_query import DisplayOrder, Query, QueryTime
from .models import Competition, Country, Game, GameRow, GameStatus, GameTree


class HierarchyFilter:
    """Applies a Query to a GameTree, pruning empty nodes"""

    def __init__(self, timezone: Optional[tzinfo] = None,
                 window_start_hour: int = 10, window_end_hour: int = 16):
        self.timezone = timezone or pytz.utc
        # Sliding window spans window_start_hour hours back to window_end_hour hours ahead
        self.window_start_hour = window_start_hour
        self.window_end_hour = window_end_hour

    def _now(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return datetime.now(self.timezone)
        return now.astimezone(self.timezone)

    def _local_date(self, moment: datetime):
        return moment.astimezone(self.timezone).date()

    def time_predicate(self, time_filter: QueryTime, now: Optional[datetime] = None) -> Callable[[Game], bool]:
        """Build the game predicate for a time filter relative to now"""
        now = self._now(now)
        today = now.date()

        if time_filter == QueryTime.TODAY:
            return lambda game: self._local_date(game.start_time) == today
        if time_filter == QueryTime.TOMORROW:
            tomorrow = today + timedelta(days=1)
            return lambda game: self._local_date(game.start_time) == tomorrow
        if time_filter == QueryTime.YESTERDAY:
            yesterday = today - timedelta(days=1)
            return lambda game: self._local_date(game.start_time) == yesterday
        if time_filter == QueryTime.LIVE:
            return lambda game: game.status == GameStatus.ONGOING
        if time_filter == QueryTime.FINISHED:
            return lambda game: game.status == GameStatus.ENDED
        if time_filter == QueryTime.UPCOMING:
            return lambda game: game.status == GameStatus.UPCOMING

        window_start = now - timedelta(hours=self.window_start_hour)
        window_end = now + timedelta(hours=self.window_end_hour)
        return lambda game: (game.status == GameStatus.ONGOING
                             or window_start <= game.start_time <= window_end)

    @staticmethod
    def text_predicate(terms) -> Callable[[Game], bool]:
        """A game matches when any term is a substring of its home or away team, case-insensitive

        No terms matches every game.
        """
        lowered = [term.lower() for term in terms if term]
        if not lowered:
            return lambda game: True
        return lambda game: any(term in game.home.lower() or term in game.away.lower() for term in lowered)

    @staticmethod
    def filter_games(tree: GameTree, predicate: Callable[[Game], bool]) -> GameTree:
        """Keep games matching predicate, dropping countries and competitions left empty"""
        countries = []
        for country in tree.countries:
            competitions = []
            for competition in country.competitions:
                games = [game for game in competition.games if predicate(game)]
                if games:
                    competitions.append(Competition(competition.name, games))
            if competitions:
                countries.append(Country(country.name, competitions))
        return GameTree(countries)

    @staticmethod
    def pin(tree: GameTree, country: Optional[str] = None, competition: Optional[str] = None) -> GameTree:
        """Keep only the named country and/or competition (case-insensitive exact match)"""
        country_key = country.lower() if country else None
        competition_key = competition.lower() if competition else None
        countries = []
        for node in tree.countries:
            if country_key and node.name.lower() != country_key:
                continue
            competitions = [comp for comp in node.competitions
                            if not competition_key or comp.name.lower() == competition_key]
            if competitions:
                countries.append(Country(node.name, competitions))
        return GameTree(countries)

    def apply(self, tree: GameTree, query: Query, now: Optional[datetime] = None) -> GameTree:
        """Text filter, then country/competition pins, then time filter"""
        filtered = self.filter_games(tree, self.text_predicate(query.free_terms))
        if query.country or query.competition:
            filtered = self.pin(filtered, query.country, query.competition)
        return self.filter_games(filtered, self.time_predicate(query.time_filter, now))

    def sliding_window(self, tree: GameTree, now: Optional[datetime] = None) -> GameTree:
        return self.filter_games(tree, self.time_predicate(QueryTime.SLIDING_WINDOW, now))

    @staticmethod
    def flatten(tree: GameTree, order: DisplayOrder = DisplayOrder.COUNTRY_COMPETITION) -> List[GameRow]:
        """Games with their country/competition labels, grouped or by kickoff"""
        rows = [GameRow(country.name, competition.name, game)
                for country in tree.countries
                for competition in country.competitions
                for game in competition.games]
        if order == DisplayOrder.TIME:
            # sort() is stable, so games kicking off together stay grouped
            rows.sort(key=lambda row: row.game.start_time)
        return rows

    @staticmethod
    def count_items(tree: GameTree) -> int:
        return sum(len(competition.games)
                   for country in tree.countries
                   for competition in country.competitions)
