#!/usr/bin/env python3
"""
Strava club leaderboard provider
The weekly club leaderboard served to the club page, no API token needed
"""

from typing import Any, List

from .base import BaseProvider, FetchError, ParseError
from ..ranking import StravaAthleteEntry


class StravaClubProvider(BaseProvider):
    """This week's leaderboard of one Strava club, ranked by distance"""

    name = "strava"
    LEADERBOARD_URL = "https://www.strava.com/clubs/{club_id}/leaderboard"
    # Without these the club page answers with HTML instead of JSON
    HEADERS = {
        'Accept': 'text/javascript, application/javascript, application/ecmascript, application/x-ecmascript',
        'X-Requested-With': 'XmlHttpRequest',
    }

    def __init__(self, club_id: str, timeout_seconds: int = None):
        super().__init__(timeout_seconds)
        self.club_id = str(club_id).strip()

    @property
    def leaderboard_url(self) -> str:
        return self.LEADERBOARD_URL.format(club_id=self.club_id)

    async def fetch(self) -> List[StravaAthleteEntry]:
        if not self.club_id:
            raise FetchError("No Strava club configured")
        return self.parse(await self.fetch_json(self.leaderboard_url, headers=self.HEADERS))

    @staticmethod
    def parse(payload: Any) -> List[StravaAthleteEntry]:
        try:
            rows = payload['data']
            return [
                StravaAthleteEntry(
                    rank=position,
                    label=row['athlete_firstname'],
                    athlete_id=int(row['athlete_id']),
                    distance=float(row.get('distance') or 0),
                    moving_time=int(row.get('moving_time') or 0),
                    elev_gain=float(row.get('elev_gain') or 0),
                    velocity=float(row.get('velocity') or 0),
                )
                for position, row in enumerate(rows, 1)
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(f"Unexpected Strava leaderboard shape: {e}") from e
