#!/usr/bin/env python3
"""
ESPN soccer scoreboard provider
Builds the Country -> Competition -> Game tree from ESPN scoreboards
API description via https://github.com/zuplo/espn-openapi/
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Sequence, Tuple

import requests

from .base import BaseProvider, FetchError, ParseError
from ..models import Competition, Country, Game, GameStatus, GameTree


logger = logging.getLogger(__name__)

# ESPN league code -> (country, competition) as shown to users
DEFAULT_LEAGUES: Dict[str, Tuple[str, str]] = {
    'eng.1': ('England', 'Premier League'),
    'eng.2': ('England', 'Championship'),
    'esp.1': ('Spain', 'LaLiga'),
    'ger.1': ('Germany', 'Bundesliga'),
    'ita.1': ('Italy', 'Serie A'),
    'fra.1': ('France', 'Ligue 1'),
    'ned.1': ('Netherlands', 'Eredivisie'),
    'bel.1': ('Belgium', 'Pro League'),
    'por.1': ('Portugal', 'Primeira Liga'),
    'sco.1': ('Scotland', 'Premiership'),
    'usa.1': ('USA', 'MLS'),
    'uefa.champions': ('Champions League', 'Champions League'),
    'uefa.europa': ('Europa League', 'Europa League'),
    'uefa.europa.conf': ('Europa Conference League', 'Europa Conference League'),
}

STATUS_NAMES = {
    'STATUS_POSTPONED': GameStatus.POSTPONED,
    'STATUS_CANCELED': GameStatus.CANCELLED,
    'STATUS_CANCELLED': GameStatus.CANCELLED,
    'STATUS_ABANDONED': GameStatus.CANCELLED,
}

STATE_STATUS = {
    'pre': GameStatus.UPCOMING,
    'in': GameStatus.ONGOING,
    'post': GameStatus.ENDED,
}


class EspnFixturesProvider(BaseProvider):
    """Fixtures from yesterday to tomorrow for the configured leagues"""

    name = "espn"
    ESPN_BASE_URL = "http://site.api.espn.com/apis/site/v2/sports/soccer"

    def __init__(self, leagues: Optional[Dict[str, Tuple[str, str]]] = None, timeout_seconds: int = None):
        super().__init__(timeout_seconds)
        self.leagues = leagues or DEFAULT_LEAGUES

    def scoreboard_url(self, league: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        start = (now - timedelta(days=1)).strftime('%Y%m%d')
        end = (now + timedelta(days=1)).strftime('%Y%m%d')
        return f"{self.ESPN_BASE_URL}/{league}/scoreboard?dates={start}-{end}"

    def fetch_scoreboard(self, league: str) -> Dict[str, Any]:
        url = self.scoreboard_url(league)
        try:
            response = requests.get(url, timeout=self.timeout_seconds,
                                    headers={'User-Agent': self.user_agent})
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Scoreboard request for {league} failed: {e}") from e
        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON in {league} scoreboard: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get('events', []), list):
            raise ParseError(f"Unexpected {league} scoreboard shape: {type(data).__name__}")
        return data

    async def fetch(self) -> GameTree:
        """Fetch every configured league off the event loop; a league that fails is skipped"""
        scoreboards = []
        failures = 0
        for league, (country, competition) in self.leagues.items():
            try:
                data = await asyncio.to_thread(self.fetch_scoreboard, league)
                scoreboards.append((country, competition, data))
            except (FetchError, ParseError) as e:
                failures += 1
                logger.warning(f"Skipping {league}: {e}")
        if self.leagues and failures == len(self.leagues):
            raise FetchError("All scoreboard requests failed")
        return self.build_tree(scoreboards)

    @classmethod
    def build_tree(cls, scoreboards: Sequence[Tuple[str, str, Dict[str, Any]]]) -> GameTree:
        """Group parsed scoreboards by country, keeping configured league order"""
        countries: Dict[str, Country] = {}
        for country_name, competition_name, data in scoreboards:
            if not isinstance(data, dict) or not isinstance(data.get('events', []), list):
                raise ParseError(f"Unexpected scoreboard shape for {competition_name}")
            games = [game for game in (cls.parse_event(event) for event in data.get('events', [])) if game]
            if not games:
                continue
            country = countries.setdefault(country_name, Country(country_name))
            country.competitions.append(Competition(competition_name, games))
        return GameTree(list(countries.values()))

    @staticmethod
    def extract_score(competitor: Dict) -> Optional[int]:
        """Score as an int; ESPN sends either a string or a {'value', 'displayValue'} dict"""
        score = competitor.get('score')
        if isinstance(score, dict):
            score = score.get('displayValue', score.get('value'))
        if score is None or score == '':
            return None
        try:
            return int(float(score))
        except (TypeError, ValueError):
            return None

    @classmethod
    def parse_event(cls, event: Dict) -> Optional[Game]:
        """Turn one ESPN event into a Game, None when it lacks teams or a date"""
        if not isinstance(event, dict):
            return None
        try:
            competition = event['competitions'][0]
            competitors = competition['competitors']
            home = next(c for c in competitors if c.get('homeAway') == 'home')
            away = next(c for c in competitors if c.get('homeAway') == 'away')
            start_time = datetime.fromisoformat(event['date'].replace('Z', '+00:00'))
            status_info = event.get('status') or competition.get('status') or {}
            status_type = status_info.get('type') or {}
            status_name = status_type.get('name')
            status_state = status_type.get('state')
            home_name = home.get('team', {}).get('displayName', 'TBD')
            away_name = away.get('team', {}).get('displayName', 'TBD')
        except (KeyError, IndexError, StopIteration, ValueError, AttributeError, TypeError):
            logger.debug(f"Skipping malformed event {event.get('id')}")
            return None

        status = STATUS_NAMES.get(status_name)
        if status is None:
            status = STATE_STATUS.get(status_state, GameStatus.UPCOMING)

        elapsed = None
        if status == GameStatus.ONGOING:
            if status_name == 'STATUS_HALFTIME':
                elapsed = 'HT'
            else:
                elapsed = status_info.get('displayClock') or None

        scored = status in (GameStatus.ONGOING, GameStatus.ENDED)
        return Game(
            home=home_name,
            away=away_name,
            start_time=start_time,
            status=status,
            home_score=cls.extract_score(home) if scored else None,
            away_score=cls.extract_score(away) if scored else None,
            elapsed=elapsed,
        )
