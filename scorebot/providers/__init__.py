"""Data providers for the Score Bot commands"""

from .base import BaseProvider, FetchError, ParseError, ScoreBotError
from .clubelo import ClubEloProvider
from .espn import EspnFixturesProvider
from .soccerway import SoccerwayTableProvider
from .uefa import UefaFantasyProvider, UefaPredictorProvider

__all__ = [
    "BaseProvider", "FetchError", "ParseError", "ScoreBotError",
    "ClubEloProvider", "EspnFixturesProvider", "SoccerwayTableProvider",
    "UefaFantasyProvider", "UefaPredictorProvider",
]
